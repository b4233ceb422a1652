# Overview: Business settings routes; profile fields and QR image storage.

from flask import Blueprint, jsonify, g

from ..decorators import json_body, require_auth
from ..errors import NotFoundError
from ..services import settings_service


settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.get("")
@require_auth
def get_settings_route():
    return jsonify({"settings": settings_service.get_settings(g.actor_id)}), 200


@settings_bp.put("")
@require_auth
def update_settings_route():
    payload = json_body()
    settings = settings_service.update_settings(g.actor_id, payload)
    return jsonify({"settings": settings}), 200


@settings_bp.post("/upload-url")
@require_auth
def upload_url_route():
    """Body: {"content_type": "image/png"}. Client PUTs the file to upload_url."""
    payload = json_body()
    result = settings_service.generate_upload_url(g.actor_id, payload.get("content_type"))
    return jsonify(result), 201


@settings_bp.get("/files/<storage_id>/url")
@require_auth
def file_url_route(storage_id: str):
    url = settings_service.get_file_url(storage_id)
    if url is None:
        raise NotFoundError("File not found", details={"storage_id": storage_id})
    return jsonify({"url": url}), 200
