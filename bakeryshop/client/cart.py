from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Mapping, Optional, Sequence

from bakeryshop.client.storage import CART_KEY, CHECKOUT_KEY, SELECTED_PRODUCT_KEY, LocalStorage

# Checkout form fields forwarded to POST /api/orders as-is
CHECKOUT_FIELDS = (
    "firstName", "lastName", "email", "phone",
    "street", "houseNumber", "apartment", "postalCode", "city", "state",
    "deliveryDate", "deliveryTime", "specialInstructions", "paymentMethod",
)


class EmptyCartError(Exception):
    pass


def parse_price(raw: Any) -> float:
    """'€3.50', '3,50 €' or 3.5 -> 3.5"""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw)
    text = str(raw or "").replace("€", "").replace(",", ".").strip()
    try:
        return float(Decimal(text))
    except InvalidOperation:
        raise ValueError(f"Invalid price: {raw!r}") from None


def add_to_cart(
    storage: LocalStorage,
    name: str,
    price: Any,
    quantity: int = 1,
    image: Optional[str] = None,
    description: Optional[str] = None,
    features: Sequence[str] = (),
) -> Dict[str, Any]:
    product = {
        "name": name,
        "price": parse_price(price),
        "image": image,
        "description": description,
        "features": list(features),
    }
    storage.set_item(SELECTED_PRODUCT_KEY, product)

    cart: List[Dict[str, Any]] = storage.get_item(CART_KEY) or []
    for line in cart:
        if line.get("name") == name:
            line["quantity"] = int(line.get("quantity") or 0) + quantity
            break
    else:
        cart.append({"name": name, "price": product["price"], "quantity": quantity})
    storage.set_item(CART_KEY, cart)
    return product


def proceed_to_checkout(storage: LocalStorage) -> List[Dict[str, Any]]:
    cart = storage.get_item(CART_KEY) or []
    if not cart:
        raise EmptyCartError("Your cart is empty!")
    storage.set_item(CHECKOUT_KEY, cart)
    return cart


def checkout_summary(items: Sequence[Mapping[str, Any]]) -> Dict[str, Any]:
    lines = []
    total = Decimal("0")
    for item in items:
        line_total = Decimal(str(item["price"])) * int(item["quantity"])
        total += line_total
        lines.append({"name": item["name"], "quantity": int(item["quantity"]), "total": float(line_total)})
    return {"lines": lines, "total": float(total)}


def build_order_payload(items: Sequence[Mapping[str, Any]], form: Mapping[str, Any]) -> Dict[str, Any]:
    if not items:
        raise EmptyCartError("No items in cart!")
    payload: Dict[str, Any] = {
        "items": [dict(i) for i in items],
        "totalAmount": checkout_summary(items)["total"],
    }
    for name in CHECKOUT_FIELDS:
        if form.get(name) not in (None, ""):
            payload[name] = form[name]
    # lets the server find the account when no token is stored
    if form.get("phone"):
        payload["userData"] = {"phone": form["phone"]}
    return payload
