"""
Business settings: the profile printed on receipts and the payment QR image.

One settings row per user, created on first update. Reads fall back to
empty defaults so a new account can open the settings screen immediately.
"""

from __future__ import annotations

import logging
import uuid

from flask import current_app

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import BusinessSettings, StoredFile
from .catalog_service import require_actor
from .concurrency import run_with_retry
from .storage_service import get_storage

logger = logging.getLogger(__name__)

TEXT_FIELDS = {
    "business_name": 255,
    "business_address": 512,
    "business_phone": 64,
}
WRITABLE_FIELDS = set(TEXT_FIELDS) | {"qr_image_id"}

DEFAULT_SETTINGS = {
    "business_name": "",
    "business_address": "",
    "business_phone": "",
    "qr_image_id": None,
}


def get_settings(actor_id: int | None) -> dict:
    actor_id = require_actor(actor_id)
    settings = db.session.query(BusinessSettings).filter_by(user_id=actor_id).first()
    if settings is None:
        return dict(DEFAULT_SETTINGS)
    return settings.to_dict()


def _clean_patch(payload: dict) -> dict:
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    for key in payload:
        if key not in WRITABLE_FIELDS:
            raise ValidationError(f"Field not allowed: {key}")

    patch = {}
    for field, max_len in TEXT_FIELDS.items():
        value = payload.get(field)
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")
        value = value.strip()
        if len(value) > max_len:
            raise ValidationError(f"{field} exceeds max length {max_len}")
        patch[field] = value

    qr_image_id = payload.get("qr_image_id")
    if qr_image_id is not None and not isinstance(qr_image_id, str):
        raise ValidationError("qr_image_id must be a string")
    patch["qr_image_id"] = qr_image_id or None
    return patch


def update_settings(actor_id: int | None, payload: dict) -> dict:
    """
    Upsert the actor's settings.

    Omitted text fields are stored as empty strings and an omitted
    qr_image_id clears the image, so every update is a full replacement.
    """
    actor_id = require_actor(actor_id)
    patch = _clean_patch(payload)

    if patch["qr_image_id"] is not None:
        stored = db.session.get(StoredFile, patch["qr_image_id"])
        if stored is None or stored.created_by_user_id != actor_id:
            raise NotFoundError("Image not found", details={"qr_image_id": patch["qr_image_id"]})

    def _op():
        settings = db.session.query(BusinessSettings).filter_by(user_id=actor_id).first()
        if settings is None:
            settings = BusinessSettings(user_id=actor_id)
            db.session.add(settings)

        for key, value in patch.items():
            setattr(settings, key, value)

        db.session.commit()
        return settings

    settings = run_with_retry(_op)
    logger.info("Business settings updated for user %s", actor_id)
    return settings.to_dict()


def generate_upload_url(actor_id: int | None, content_type: str | None) -> dict:
    """Reserve a storage id and return a presigned upload URL for it."""
    actor_id = require_actor(actor_id)

    allowed = current_app.config.get("ALLOWED_UPLOAD_MIME_TYPES", set())
    if not content_type or content_type not in allowed:
        raise ValidationError(
            f"content_type must be one of: {', '.join(sorted(allowed))}"
        )

    storage = get_storage()
    stored = StoredFile(
        id=str(uuid.uuid4()),
        object_key=storage.new_object_key("qr", actor_id),
        content_type=content_type,
        created_by_user_id=actor_id,
    )
    upload_url = storage.presigned_upload_url(stored.object_key, content_type)

    db.session.add(stored)
    db.session.commit()
    logger.info("Upload URL issued to user %s for storage id %s", actor_id, stored.id)

    return {"storage_id": stored.id, "upload_url": upload_url}


def get_file_url(storage_id: str) -> str | None:
    """Resolve a storage id to a download URL; None when unknown."""
    stored = db.session.get(StoredFile, storage_id)
    if stored is None:
        return None
    return get_storage().presigned_download_url(stored.object_key)
