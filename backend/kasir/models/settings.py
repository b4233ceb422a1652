from __future__ import annotations

from ..extensions import db
from kasir.time_utils import to_utc_z


class BusinessSettings(db.Model):
    """Business profile shown on receipts. One row per user."""
    __tablename__ = "business_settings"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, unique=True, index=True)

    business_name = db.Column(db.String(255), nullable=False, default="")
    business_address = db.Column(db.String(512), nullable=False, default="")
    business_phone = db.Column(db.String(64), nullable=False, default="")

    # Payment QR image held in object storage
    qr_image_id = db.Column(db.String(36), db.ForeignKey("stored_files.id"), nullable=True)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    user = db.relationship("User", backref=db.backref("business_settings", uselist=False, lazy=True))
    qr_image = db.relationship("StoredFile")

    def to_dict(self) -> dict:
        return {
            "business_name": self.business_name,
            "business_address": self.business_address,
            "business_phone": self.business_phone,
            "qr_image_id": self.qr_image_id,
            "updated_at": to_utc_z(self.updated_at),
        }


class StoredFile(db.Model):
    """
    Reference to an object in the upload bucket.

    Created when an upload URL is issued; the id is the opaque storage id
    handed to clients.
    """
    __tablename__ = "stored_files"

    id = db.Column(db.String(36), primary_key=True)
    object_key = db.Column(db.String(512), nullable=False, unique=True)
    content_type = db.Column(db.String(128), nullable=True)
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
