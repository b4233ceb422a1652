# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/kasir/routes/auth.py
"""
Authentication API routes

- Self-registration creates a user and returns a session token
- Login returns a bearer token for the Authorization header
- Logout revokes the presented token
"""

from flask import Blueprint, request, jsonify, g

from ..services import auth_service
from ..services import session_service
from ..decorators import json_body, require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _session_response(user, status: int, message: str):
    session, token = session_service.create_session(
        user_id=user.id,
        user_agent=request.headers.get("User-Agent"),
        ip_address=request.remote_addr,
    )
    return jsonify({
        "user": user.to_dict(),
        "token": token,
        "session": session.to_dict(),
        "message": message,
    }), status


@auth_bp.post("/register")
def register_route():
    """
    Create an account and log it in.

    Body: username, email, password, name (optional)
    """
    data = json_body()

    user = auth_service.create_user(
        username=data.get("username"),
        email=data.get("email"),
        password=data.get("password"),
        name=data.get("name"),
    )
    return _session_response(user, 201, "Registration successful")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    """
    data = json_body()
    username = data.get("username") or data.get("email") or data.get("identifier")
    password = data.get("password")

    if not all([username, password]):
        return jsonify({"error": "username/email and password required"}), 400

    user = auth_service.authenticate(username, password)
    if not user:
        return jsonify({"error": "Invalid credentials", "code": "UNAUTHORIZED"}), 401

    return _session_response(user, 200, "Login successful")


@auth_bp.post("/logout")
@require_auth
def logout_route():
    session_service.revoke_session(g.auth_token)
    return jsonify({"ok": True}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()}), 200
