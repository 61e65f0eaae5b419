from __future__ import annotations

import logging

from flask import Blueprint, current_app
from werkzeug.security import generate_password_hash, check_password_hash

from bakeryshop.app.common.auth import authenticated_user_id, current_user, login_required
from bakeryshop.app.common.errors import abort_json
from bakeryshop.app.common.tokens import issue_token
from bakeryshop.app.common.validation import clean_str, get_json, optional_str, require_fields
from bakeryshop.app.extensions import get_store
from bakeryshop.store.base import ConflictError, UserRecord

bp = Blueprint("auth", __name__)
logger = logging.getLogger(__name__)

REGISTER_REQUIRED = ["firstName", "lastName", "phone", "street", "houseNumber", "postalCode", "city", "state"]


def user_to_dict(user: UserRecord) -> dict:
    """Public projection of a user (never includes the password hash)."""
    return {
        "id": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "phone": user.phone,
        "email": user.email,
        "birthDate": user.birth_date,
        "street": user.street,
        "houseNumber": user.house_number,
        "apartment": user.apartment,
        "postalCode": user.postal_code,
        "city": user.city,
        "state": user.state,
        "country": user.country,
        "newsletter": user.newsletter,
        "role": user.role,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


@bp.post("/register")
def register():
    """POST /api/register - Create a customer account and sign them in."""
    data = get_json()
    require_fields(data, REGISTER_REQUIRED, "All required fields must be provided")

    password = str(data.get("password") or "")
    if password:
        if password != str(data.get("confirmPassword") or ""):
            abort_json(400, "validation_error", "Passwords do not match")
        min_length = current_app.config["PASSWORD_MIN_LENGTH"]
        if len(password) < min_length:
            abort_json(400, "validation_error", f"Password must be at least {min_length} characters")

    email = optional_str(data.get("email"))
    try:
        user = get_store().add_user(
            first_name=clean_str(data["firstName"]),
            last_name=clean_str(data["lastName"]),
            phone=clean_str(data["phone"]),
            email=email.lower() if email else None,
            birth_date=optional_str(data.get("birthDate")),
            street=clean_str(data["street"]),
            house_number=clean_str(data["houseNumber"]),
            apartment=clean_str(data.get("apartment")),
            postal_code=clean_str(data["postalCode"]),
            city=clean_str(data["city"]),
            state=clean_str(data["state"]),
            country=current_app.config["DEFAULT_COUNTRY"],
            newsletter=bool(data.get("newsletter")),
            password_hash=generate_password_hash(password) if password else None,
        )
    except ConflictError as exc:
        abort_json(400, "conflict", f"User already exists with this {exc.field_name}", {"field": exc.field_name})

    logger.info("User registered: %s", user.id)
    return {
        "success": True,
        "message": "User registered successfully",
        "token": issue_token(user.id),
        "user": user_to_dict(user),
    }, 201


@bp.post("/login")
def login():
    """POST /api/login - Exchange phone/email + password for a token."""
    data = get_json()
    phone = clean_str(data.get("phone"))
    email = clean_str(data.get("email")).lower()
    password = str(data.get("password") or "")
    if not (phone or email) or not password:
        abort_json(400, "validation_error", "phone or email and password are required")

    user = get_store().find_user(phone=phone or None, email=email or None)
    # One message for every failure so callers can't probe which accounts exist
    if not user or not user.password_hash or not check_password_hash(user.password_hash, password):
        logger.info("Failed login attempt")
        abort_json(401, "unauthorized", "Invalid credentials")

    return {"success": True, "token": issue_token(user.id), "user": user_to_dict(user)}, 200


@bp.post("/logout")
def logout():
    """POST /api/logout - Tokens are stateless; the client just drops its copy."""
    return {"success": True, "message": "Logged out successfully"}, 200


@bp.get("/auth/status")
def auth_status():
    uid = authenticated_user_id()
    if uid is not None and get_store().get_user(uid):
        return {"authenticated": True, "userId": uid}, 200
    return {"authenticated": False}, 200


@bp.get("/user")
@login_required
def me():
    """GET /api/user - Current authenticated user."""
    return user_to_dict(current_user()), 200
