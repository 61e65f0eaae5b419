"""Token auth and role capabilities.

Clients send the token issued at register/login as ``Authorization: Bearer``;
a ``token`` query parameter or JSON body field is accepted as well. Views
protect capabilities, not role names.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from flask import g, request

from bakeryshop.app.common.errors import abort_json
from bakeryshop.app.common.tokens import verify_token
from bakeryshop.app.extensions import get_store
from bakeryshop.store.base import ROLE_ADMIN, ROLE_CUSTOMER, UserRecord

F = TypeVar("F", bound=Callable[..., Any])

CAP_ORDERS_VIEW_ALL = "orders.view_all"
CAP_ORDERS_MARK_DELIVERED = "orders.mark_delivered"
CAP_ADMIN_DATABASE = "admin.database"

ROLE_CAPABILITIES = {
    ROLE_CUSTOMER: frozenset(),
    ROLE_ADMIN: frozenset({CAP_ORDERS_VIEW_ALL, CAP_ORDERS_MARK_DELIVERED, CAP_ADMIN_DATABASE}),
}


def has_capability(user: Optional[UserRecord], capability: str) -> bool:
    if user is None:
        return False
    return capability in ROLE_CAPABILITIES.get(user.role, frozenset())


def token_from_request() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        token = header[len("Bearer "):].strip()
        if token:
            return token
    if request.args.get("token"):
        return request.args["token"]
    if request.is_json:
        data = request.get_json(silent=True)
        if isinstance(data, dict) and isinstance(data.get("token"), str):
            return data["token"]
    return None


def authenticated_user_id() -> Optional[int]:
    """User id from a valid token on the current request, else None."""
    return verify_token(token_from_request())


def current_user() -> UserRecord:
    """The user behind `login_required`; 404 if the store no longer has them."""
    user = get_store().get_user(g.user_id)
    if not user:
        abort_json(404, "not_found", "User not found")
    return user


def login_required(fn: F) -> F:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        uid = authenticated_user_id()
        if uid is None:
            abort_json(401, "unauthorized", "Authentication required")
        g.user_id = uid
        return fn(*args, **kwargs)

    return wrapper  # type: ignore


def capability_required(capability: str) -> Callable[[F], F]:
    def decorator(fn: F) -> F:
        @wraps(fn)
        @login_required
        def wrapper(*args, **kwargs):
            if not has_capability(current_user(), capability):
                abort_json(403, "forbidden", "Access denied. Admin privileges required.")
            return fn(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator
