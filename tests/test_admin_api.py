from conftest import auth_header

ITEMS = [{"name": "Barbari-Brot", "price": 3.5, "quantity": 1}]


def test_admin_database_requires_token_and_role(client, register, make_admin):
    token, user = register()

    assert client.get("/api/admin/database").status_code == 401
    forbidden = client.get("/api/admin/database", headers=auth_header(token))
    assert forbidden.status_code == 403
    assert forbidden.json["error"]["code"] == "forbidden"

    make_admin(user["id"])
    r = client.get("/api/admin/database", headers=auth_header(token))
    assert r.status_code == 200
    assert r.json["totalUsers"] == 1
    assert r.json["totalOrders"] == 0
    assert "password_hash" not in r.json["users"][0]


def test_admin_by_name_alone_gets_nothing(client, register):
    token, _ = register(firstName="Azizollah", lastName="Payandeh")
    assert client.get("/api/admin/database", headers=auth_header(token)).status_code == 403


def test_admin_sees_all_orders(client, register, make_admin):
    admin_token, admin = register()
    customer_token, _ = register(phone="+49 160 5555555", email="c@example.com")
    make_admin(admin["id"])

    client.post("/api/orders", json={"items": ITEMS}, headers=auth_header(customer_token))
    client.post("/api/orders", json={"items": ITEMS}, headers=auth_header(admin_token))

    all_orders = client.get("/api/orders", headers=auth_header(admin_token)).json["orders"]
    assert len(all_orders) == 2
    own = client.get("/api/orders", headers=auth_header(customer_token)).json["orders"]
    assert len(own) == 1


def test_mark_delivered_requires_admin(client, register):
    token, _ = register()
    order_id = client.post("/api/orders", json={"items": ITEMS}, headers=auth_header(token)).json["orderId"]

    assert client.post("/api/admin/mark-delivered", json={"orderId": order_id}).status_code == 401
    r = client.post("/api/admin/mark-delivered", json={"orderId": order_id}, headers=auth_header(token))
    assert r.status_code == 403


def test_mark_delivered_is_idempotent(client, register, make_admin):
    token, user = register()
    make_admin(user["id"])
    order_id = client.post("/api/orders", json={"items": ITEMS}, headers=auth_header(token)).json["orderId"]

    first = client.post("/api/admin/mark-delivered", json={"orderId": order_id}, headers=auth_header(token))
    second = client.post("/api/admin/mark-delivered", json={"orderId": str(order_id)}, headers=auth_header(token))

    assert first.status_code == 200 and second.status_code == 200
    assert first.json["order"]["status"] == "delivered"
    assert first.json["order"]["deliveredAt"] is not None
    assert second.json["order"]["deliveredAt"] == first.json["order"]["deliveredAt"]


def test_mark_delivered_errors(client, register, make_admin):
    token, user = register()
    make_admin(user["id"])
    headers = auth_header(token)

    assert client.post("/api/admin/mark-delivered", json={}, headers=headers).status_code == 400
    assert client.post("/api/admin/mark-delivered", json={"orderId": "x"}, headers=headers).status_code == 400
    missing = client.post("/api/admin/mark-delivered", json={"orderId": 404}, headers=headers)
    assert missing.status_code == 404
    assert missing.json["error"]["code"] == "not_found"


def test_end_to_end_order_flow(client, register, make_admin):
    phone = "+49 176 3141592"
    _, user = register(phone=phone, email="e2e@example.com")

    login = client.post("/api/login", json={"phone": phone, "password": "secret123"})
    token = login.json["token"]
    assert login.json["user"]["id"] == user["id"]

    order_id = client.post(
        "/api/orders",
        json={"items": ITEMS, "deliveryDate": "2026-10-18"},
        headers=auth_header(token),
    ).json["orderId"]

    orders = client.get("/api/orders", headers=auth_header(token)).json["orders"]
    assert [(o["id"], o["status"]) for o in orders] == [(order_id, "confirmed")]

    make_admin(user["id"])
    r = client.post("/api/admin/mark-delivered", json={"orderId": order_id}, headers=auth_header(token))
    assert r.json["success"] is True

    orders = client.get("/api/orders", headers=auth_header(token)).json["orders"]
    assert orders[0]["status"] == "delivered"
