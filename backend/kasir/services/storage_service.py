"""
Object Storage Service for S3-compatible storage (MinIO, AWS S3, DigitalOcean Spaces).

Clients never stream files through this API: they ask for a presigned PUT
URL, upload directly to the bucket, then reference the returned storage id.
Reads go through presigned GET URLs the same way.

Presigning is a local signing operation; no request reaches the bucket
until the client uses the URL.
"""
import logging
import uuid

import boto3
from botocore.client import Config as BotoConfig
from flask import current_app

logger = logging.getLogger(__name__)


class StorageService:
    """
    S3-compatible object storage service.

    Usage:
        storage = StorageService()
        url = storage.presigned_upload_url('qr/42/abcd.png', 'image/png')
        url = storage.presigned_download_url('qr/42/abcd.png')
    """

    def __init__(self, client=None):
        """Initialize S3 client from Flask config."""
        self.bucket = current_app.config['S3_BUCKET']
        self.expires_in = current_app.config.get('UPLOAD_URL_EXPIRES_SECONDS', 900)

        self.client = client or boto3.client(
            's3',
            endpoint_url=current_app.config['S3_ENDPOINT'],
            aws_access_key_id=current_app.config['S3_ACCESS_KEY'],
            aws_secret_access_key=current_app.config['S3_SECRET_KEY'],
            region_name=current_app.config['S3_REGION'],
            config=BotoConfig(signature_version='s3v4')
        )

    @staticmethod
    def new_object_key(prefix: str, user_id: int) -> str:
        return f"{prefix}/{user_id}/{uuid.uuid4().hex}"

    def presigned_upload_url(self, object_name: str, content_type: str) -> str:
        """Presigned PUT; the client must send the same Content-Type header."""
        url = self.client.generate_presigned_url(
            'put_object',
            Params={
                'Bucket': self.bucket,
                'Key': object_name,
                'ContentType': content_type,
            },
            ExpiresIn=self.expires_in,
        )
        logger.info(f"[STORAGE] Issued upload URL for '{object_name}'")
        return url

    def presigned_download_url(self, object_name: str) -> str:
        return self.client.generate_presigned_url(
            'get_object',
            Params={'Bucket': self.bucket, 'Key': object_name},
            ExpiresIn=self.expires_in,
        )


def get_storage() -> StorageService:
    """Return a StorageService instance (one per call, cheap to build)."""
    return StorageService()
