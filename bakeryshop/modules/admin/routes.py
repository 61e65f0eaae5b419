from __future__ import annotations

import logging

from flask import Blueprint

from bakeryshop.app.common.auth import (
    CAP_ADMIN_DATABASE,
    CAP_ORDERS_MARK_DELIVERED,
    capability_required,
)
from bakeryshop.app.common.errors import abort_json
from bakeryshop.app.common.validation import get_json, parse_int
from bakeryshop.app.extensions import get_store
from bakeryshop.modules.auth.routes import user_to_dict
from bakeryshop.modules.orders.routes import order_to_dict

bp = Blueprint("admin", __name__)
logger = logging.getLogger(__name__)


@bp.get("/admin/database")
@capability_required(CAP_ADMIN_DATABASE)
def database_dump():
    """GET /api/admin/database - Every user and order (admins only)."""
    store = get_store()
    users = store.list_users()
    orders = store.list_orders()
    return {
        "success": True,
        "users": [user_to_dict(u) for u in users],
        "orders": [order_to_dict(o) for o in orders],
        "totalUsers": len(users),
        "totalOrders": len(orders),
    }, 200


@bp.post("/admin/mark-delivered")
@capability_required(CAP_ORDERS_MARK_DELIVERED)
def mark_delivered():
    """POST /api/admin/mark-delivered - Safe to repeat; the first delivery time sticks."""
    data = get_json()
    if data.get("orderId") is None:
        abort_json(400, "validation_error", "orderId is required")
    order_id = parse_int(data["orderId"], "orderId")

    order = get_store().mark_delivered(order_id)
    if not order:
        abort_json(404, "not_found", "Order not found")

    logger.info("Order %s marked as delivered", order.id)
    return {
        "success": True,
        "message": "Order marked as delivered successfully",
        "order": order_to_dict(order),
    }, 200
