from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional

from flask import Blueprint, current_app

from bakeryshop.app.common.auth import (
    CAP_ORDERS_VIEW_ALL,
    authenticated_user_id,
    current_user,
    has_capability,
    login_required,
)
from bakeryshop.app.common.errors import abort_json
from bakeryshop.app.common.validation import clean_str, get_json, optional_str, parse_int
from bakeryshop.app.extensions import get_store
from bakeryshop.store.base import OrderRecord, OrderStatus, UserRecord, address_snapshot

bp = Blueprint("orders", __name__)
logger = logging.getLogger(__name__)

# Keeps every stored integer well inside a signed 64-bit column
MAX_PRICE_CENTS = 100_000_000
MAX_ITEM_QUANTITY = 10_000


def to_cents(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool):
        abort_json(400, "validation_error", f"{field_name} must be a number")
    if isinstance(raw, str):
        raw = raw.replace("€", "").replace(",", ".").strip()
    try:
        value = float(raw)
    except (TypeError, ValueError):
        abort_json(400, "validation_error", f"{field_name} must be a number")
    if not math.isfinite(value):
        abort_json(400, "validation_error", f"{field_name} must be a number")
    if value < 0:
        abort_json(400, "validation_error", f"{field_name} must not be negative")
    if value * 100 > MAX_PRICE_CENTS:
        abort_json(400, "validation_error", f"{field_name} is too large")
    return int(round(value * 100))


def order_to_dict(order: OrderRecord) -> dict:
    return {
        "id": order.id,
        "userId": order.user_id,
        "items": order.items,
        "productName": ", ".join(i["name"] for i in order.items),
        "quantity": order.quantity,
        "totalAmount": order.total_cents / 100,
        "totalCents": order.total_cents,
        "firstName": order.first_name,
        "lastName": order.last_name,
        "phone": order.phone,
        "street": order.street,
        "houseNumber": order.house_number,
        "apartment": order.apartment,
        "postalCode": order.postal_code,
        "city": order.city,
        "state": order.state,
        "deliveryDate": order.delivery_date,
        "deliveryTime": order.delivery_time,
        "specialInstructions": order.special_instructions,
        "paymentMethod": order.payment_method,
        "status": order.status,
        "createdAt": order.created_at.isoformat() if order.created_at else None,
        "deliveredAt": order.delivered_at.isoformat() if order.delivered_at else None,
    }


def resolve_order_user(data: Dict[str, Any]) -> Optional[UserRecord]:
    """Find who is ordering.

    1. a valid token
    2. the phone number in ``userData`` (or the body itself)
    3. a ``userId`` from the body, only if that user actually exists

    2 and 3 are skipped when ORDER_IDENTITY_FALLBACK is off.
    """
    store = get_store()

    uid = authenticated_user_id()
    if uid is not None:
        user = store.get_user(uid)
        if user:
            return user

    if not current_app.config["ORDER_IDENTITY_FALLBACK"]:
        return None

    user_data = data.get("userData") if isinstance(data.get("userData"), dict) else {}
    phone = clean_str(user_data.get("phone") or data.get("phone"))
    if phone:
        user = store.find_user(phone=phone)
        if user:
            logger.info("Order owner resolved by phone: %s", user.id)
            return user

    raw_uid = data.get("userId")
    if raw_uid is not None and not isinstance(raw_uid, bool):
        try:
            claimed = int(str(raw_uid).strip())
        except ValueError:
            return None
        user = store.get_user(claimed)
        if user:
            logger.info("Order owner resolved by userId: %s", user.id)
            return user

    return None


def check_quantity(quantity: int, details: Optional[Dict[str, Any]] = None) -> None:
    if quantity < 1:
        abort_json(400, "validation_error", "Quantity must be at least 1", details)
    if quantity > MAX_ITEM_QUANTITY:
        abort_json(400, "validation_error", f"Quantity must be at most {MAX_ITEM_QUANTITY}", details)


def normalize_items(data: Dict[str, Any]) -> tuple[List[Dict[str, Any]], int]:
    """Return (items, total_cents).

    With an item list the total is computed here. Without one the order is for
    the default product, and a client-sent ``totalPrice`` is kept.
    """
    raw_items = data.get("items")
    if raw_items is not None:
        if not isinstance(raw_items, list) or not raw_items:
            abort_json(400, "validation_error", "items must be a non-empty list")
        items = []
        total = 0
        for idx, raw in enumerate(raw_items):
            if not isinstance(raw, dict):
                abort_json(400, "validation_error", "Invalid item", {"index": idx})
            name = clean_str(raw.get("name"))
            if not name:
                abort_json(400, "validation_error", "Item name is required", {"index": idx})
            price_cents = to_cents(raw.get("price", 0), "price")
            quantity = parse_int(raw.get("quantity", 1), "quantity")
            check_quantity(quantity, {"index": idx})
            items.append({"name": name, "price": price_cents / 100, "quantity": quantity})
            total += price_cents * quantity
        return items, total

    quantity = parse_int(data.get("quantity") or 1, "quantity")
    check_quantity(quantity)
    unit_cents = current_app.config["DEFAULT_PRODUCT_PRICE_CENTS"]
    items = [{"name": current_app.config["DEFAULT_PRODUCT_NAME"], "price": unit_cents / 100, "quantity": quantity}]
    raw_total = data.get("totalPrice", data.get("totalAmount"))
    total = to_cents(raw_total, "totalPrice") if raw_total is not None else unit_cents * quantity
    return items, total


@bp.post("/orders")
def create_order():
    """POST /api/orders - Place an order for the resolved user."""
    data = get_json()

    user = resolve_order_user(data)
    if not user:
        abort_json(404, "not_found", "User not found")

    items, total_cents = normalize_items(data)
    order = get_store().add_order(
        user_id=user.id,
        items=items,
        quantity=sum(i["quantity"] for i in items),
        total_cents=total_cents,
        status=OrderStatus(current_app.config["ORDER_INITIAL_STATUS"]).value,
        delivery_date=optional_str(data.get("deliveryDate")),
        delivery_time=optional_str(data.get("deliveryTime")),
        special_instructions=optional_str(data.get("specialInstructions")),
        payment_method=optional_str(data.get("paymentMethod")),
        **address_snapshot(user),
    )

    logger.info("Order %s created for user %s", order.id, user.id)
    return {"success": True, "message": "Order created successfully", "orderId": order.id}, 201


@bp.get("/orders")
@login_required
def list_orders():
    """GET /api/orders - Own orders, or every order for admins. Newest first."""
    user = current_user()
    store = get_store()
    if has_capability(user, CAP_ORDERS_VIEW_ALL):
        orders = store.list_orders()
    else:
        orders = store.list_orders(user_id=user.id)
    return {"success": True, "orders": [order_to_dict(o) for o in orders]}, 200


@bp.get("/orders/<int:order_id>")
@login_required
def get_order(order_id: int):
    user = current_user()
    order = get_store().get_order(order_id)
    # Someone else's order looks the same as a missing one
    if not order or (order.user_id != user.id and not has_capability(user, CAP_ORDERS_VIEW_ALL)):
        abort_json(404, "not_found", "Order not found")
    return {"success": True, "order": order_to_dict(order)}, 200
