from datetime import datetime

import pytest

from bakeryshop.app.extensions import get_store
from conftest import auth_header, user_payload

CART = [
    {"name": "Barbari-Brot", "price": 3.5, "quantity": 2},
    {"name": "Sangak", "price": "€4,20", "quantity": 1},
]


def place(client, token=None, **body):
    headers = auth_header(token) if token else {}
    return client.post("/api/orders", json=body, headers=headers)


def test_create_order_with_token(client, register):
    token, user = register()

    r = place(client, token, items=CART, deliveryDate="2026-10-20", deliveryTime="08:00")
    assert r.status_code == 201
    assert r.json["success"] is True
    order_id = r.json["orderId"]

    orders = client.get("/api/orders", headers=auth_header(token)).json["orders"]
    assert len(orders) == 1
    order = orders[0]
    assert order["id"] == order_id
    assert order["userId"] == user["id"]
    assert order["status"] == "confirmed"
    assert order["totalCents"] == 350 * 2 + 420
    assert order["quantity"] == 3
    assert order["deliveryTime"] == "08:00"
    assert order["street"] == "Lindenstraße"
    assert order["deliveredAt"] is None


def test_total_is_computed_server_side(client, register):
    token, _ = register()
    place(client, token, items=CART, totalAmount=0.01)
    order = client.get("/api/orders", headers=auth_header(token)).json["orders"][0]
    assert order["totalAmount"] == pytest.approx(11.2)


def test_legacy_single_product_order(client, register):
    token, _ = register()
    place(client, token, quantity=3)
    place(client, token, quantity=2, totalPrice=6.0)

    orders = client.get("/api/orders", headers=auth_header(token)).json["orders"]
    by_qty = {o["quantity"]: o for o in orders}
    assert by_qty[3]["productName"] == "Traditionelles Barbari-Brot"
    assert by_qty[3]["totalCents"] == 1050
    assert by_qty[2]["totalCents"] == 600


@pytest.mark.parametrize(
    "body",
    [
        {"quantity": 10**20},
        {"quantity": 2, "totalPrice": "inf"},
        {"quantity": 2, "totalPrice": "NaN"},
        {"quantity": 2, "totalPrice": 1e17},
    ],
)
def test_legacy_order_rejects_out_of_range_numbers(client, register, body):
    token, _ = register()
    r = place(client, token, **body)
    assert r.status_code == 400
    assert r.json["error"]["code"] == "validation_error"
    assert client.get("/api/orders", headers=auth_header(token)).json["orders"] == []


def test_largest_allowed_quantity_is_accepted(client, register):
    token, _ = register()
    r = place(client, token, items=[{"name": "Brot", "price": 1, "quantity": 10_000}])
    assert r.status_code == 201
    order = client.get("/api/orders", headers=auth_header(token)).json["orders"][0]
    assert order["totalCents"] == 1_000_000


@pytest.mark.parametrize(
    "items",
    [
        [],
        "bread",
        [{"name": "", "price": 1, "quantity": 1}],
        [{"name": "Brot", "price": -1, "quantity": 1}],
        [{"name": "Brot", "price": 1, "quantity": 0}],
        [{"name": "Brot", "price": "abc", "quantity": 1}],
        [{"name": "Brot", "price": "inf", "quantity": 1}],
        [{"name": "Brot", "price": "nan", "quantity": 1}],
        [{"name": "Brot", "price": 1e308, "quantity": 1}],
        [{"name": "Brot", "price": 1, "quantity": 10**20}],
        [{"name": "Brot", "price": 1, "quantity": 10_001}],
    ],
)
def test_invalid_items_are_rejected_without_creating_an_order(client, register, items):
    token, _ = register()
    r = place(client, token, items=items)
    assert r.status_code == 400
    assert client.get("/api/orders", headers=auth_header(token)).json["orders"] == []


def test_owner_resolved_by_phone_fallback(client, register):
    token, user = register()
    r = place(client, items=CART, userData={"phone": user["phone"]})
    assert r.status_code == 201
    orders = client.get("/api/orders", headers=auth_header(token)).json["orders"]
    assert [o["id"] for o in orders] == [r.json["orderId"]]


def test_owner_resolved_by_user_id_fallback(client, register):
    token, user = register()
    r = place(client, items=CART, userId=user["id"])
    assert r.status_code == 201
    assert client.get("/api/orders", headers=auth_header(token)).json["orders"][0]["userId"] == user["id"]


@pytest.mark.parametrize("claimed", [999, "abc", True])
def test_unknown_or_bogus_user_id_is_not_trusted(client, register, claimed):
    register()
    r = place(client, items=CART, userId=claimed)
    assert r.status_code == 404
    assert r.json["error"]["message"] == "User not found"


def test_no_identity_at_all_is_not_found(client):
    r = place(client, items=CART)
    assert r.status_code == 404


def test_invalid_token_falls_through_to_phone(client, register):
    token, user = register()
    r = place(client, "garbage", items=CART, userData={"phone": user["phone"]})
    assert r.status_code == 201


def test_fallback_can_be_disabled(app, client, register):
    app.config["ORDER_IDENTITY_FALLBACK"] = False
    _, user = register()
    r = place(client, items=CART, userData={"phone": user["phone"]}, userId=user["id"])
    assert r.status_code == 404


def test_listing_only_shows_own_orders(client, register):
    token_a, _ = register()
    token_b, _ = register(phone="+49 160 5555555", email="b@example.com", firstName="Bert")

    a_order = place(client, token_a, items=CART).json["orderId"]
    b_order = place(client, token_b, items=CART).json["orderId"]

    a_ids = [o["id"] for o in client.get("/api/orders", headers=auth_header(token_a)).json["orders"]]
    b_ids = [o["id"] for o in client.get("/api/orders", headers=auth_header(token_b)).json["orders"]]
    assert a_ids == [a_order]
    assert b_ids == [b_order]


def test_listing_requires_token(client):
    r = client.get("/api/orders")
    assert r.status_code == 401
    assert r.json["error"]["code"] == "unauthorized"


def test_listing_is_newest_first(client, register):
    token, _ = register()
    ids = [place(client, token, quantity=q).json["orderId"] for q in (1, 2, 3)]
    listed = [o["id"] for o in client.get("/api/orders", headers=auth_header(token)).json["orders"]]
    assert listed == sorted(ids, reverse=True)


def test_order_keeps_address_snapshot(app, client, register):
    token, user = register()
    place(client, token, items=CART)

    with app.app_context():
        get_store().update_user(user["id"], street="Neue Straße", house_number="99", city="Hamburg")

    order = client.get("/api/orders", headers=auth_header(token)).json["orders"][0]
    assert order["street"] == "Lindenstraße"
    assert order["houseNumber"] == "5"
    assert order["city"] == "Berlin"

    assert client.get("/api/user", headers=auth_header(token)).json["city"] == "Hamburg"


def test_get_single_order_is_owner_only(client, register):
    token_a, _ = register()
    token_b, _ = register(phone="+49 160 5555555", email="b@example.com")
    order_id = place(client, token_a, items=CART).json["orderId"]

    assert client.get(f"/api/orders/{order_id}", headers=auth_header(token_a)).status_code == 200
    assert client.get(f"/api/orders/{order_id}", headers=auth_header(token_b)).status_code == 404
    assert client.get("/api/orders/999", headers=auth_header(token_a)).status_code == 404


def test_pending_initial_status(app, client, register):
    app.config["ORDER_INITIAL_STATUS"] = "pending"
    token, _ = register()
    place(client, token, items=CART)
    assert client.get("/api/orders", headers=auth_header(token)).json["orders"][0]["status"] == "pending"


def test_created_at_is_iso_timestamp(client, register):
    token, _ = register()
    place(client, token, items=CART)
    created = client.get("/api/orders", headers=auth_header(token)).json["orders"][0]["createdAt"]
    assert isinstance(datetime.fromisoformat(created), datetime)
