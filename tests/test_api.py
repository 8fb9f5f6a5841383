from decimal import Decimal

DEVICE = {"device_id": "device-1"}
CHECKOUT_BODY = {
    "contact": {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com", "phone": "555-0100"},
    "shipping_address": {"address": "1 Spore Lane", "city": "Portland", "state": "OR", "lat": 45.52, "lng": -122.68},
}
ADMIN = {"X-Admin-Token": "test-admin"}


def test_health(api):
    assert api.get("/health").json() == {"status": "ok"}


def test_guest_cart_endpoints(api):
    api.post("/cart/items", params=DEVICE, json={"product_id": 1})
    resp = api.post("/cart/items", params=DEVICE, json={"product_id": 1})

    body = resp.json()
    assert resp.status_code == 200
    assert body["owner_ref"] is None
    assert [(i["product_id"], i["quantity"]) for i in body["items"]] == [(1, 2)]
    assert Decimal(body["total"]) == Decimal("25.98")

    body = api.put("/cart/items/1", params=DEVICE, json={"quantity": 0}).json()
    assert body["items"] == []

    assert api.delete("/cart/items/1", params=DEVICE).status_code == 200


def test_unknown_product_is_404(api):
    resp = api.post("/cart/items", params=DEVICE, json={"product_id": 999})

    assert resp.status_code == 404


def test_cart_requires_device_id(api):
    assert api.get("/cart/").status_code == 422


def test_transfer_cart_on_login(api):
    api.post("/cart/items", params=DEVICE, json={"product_id": 2})
    resp = api.post("/cart/transfer", params={"device_id": "device-1", "user_id": "user-1"})

    assert resp.json()["owner_ref"] == "user-1"
    assert [i["product_id"] for i in resp.json()["items"]] == [2]
    assert api.get("/cart/", params=DEVICE).json()["items"] == []
    assert len(api.get("/cart/", params={**DEVICE, "user_id": "user-1"}).json()["items"]) == 1


def test_checkout_with_empty_cart_is_400(api):
    resp = api.post("/checkout/", params=DEVICE, json=CHECKOUT_BODY)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cart is empty"


def test_checkout_relay_failure_is_502(api, fake_relay):
    api.post("/cart/items", params=DEVICE, json={"product_id": 1})
    fake_relay.fail = True

    resp = api.post("/checkout/", params=DEVICE, json=CHECKOUT_BODY)

    assert resp.status_code == 502


def test_guest_checkout_flow(api, fake_relay):
    api.post("/cart/items", params=DEVICE, json={"product_id": 1})
    api.post("/cart/items", params=DEVICE, json={"product_id": 1})
    api.post("/cart/items", params=DEVICE, json={"product_id": 4})

    placed = api.post("/checkout/", params=DEVICE, json=CHECKOUT_BODY).json()
    assert Decimal(placed["amount"]) == Decimal("36.97")
    assert api.get("/checkout/state", params=DEVICE).json() == {"state": "awaiting-redirect"}

    finalized = api.post("/checkout/finalize", params={**DEVICE, "status": "success"}).json()
    assert finalized["state"] == "order-created"
    assert finalized["message"] == "Payment successful and order placed!"
    order = finalized["order"]
    assert Decimal(order["total_amount"]) == Decimal("36.97")
    assert order["user_id"] is None

    assert api.get("/cart/", params=DEVICE).json()["items"] == []
    assert api.get("/checkout/state", params=DEVICE).json() == {"state": "idle"}

    tracked = api.get(f"/orders/{order['id']}").json()
    assert tracked["status"] == "pending"

    guest = api.get("/guest-orders/", params=DEVICE).json()
    assert [s["order_id"] for s in guest["pending"]] == [order["id"]]

    updated = api.patch(f"/orders/{order['id']}/status", json={"status": "delivered"}, headers=ADMIN)
    assert updated.json()["status"] == "delivered"
    assert api.get(f"/orders/{order['id']}").json()["status"] == "delivered"

    guest = api.get("/guest-orders/", params=DEVICE).json()
    assert guest["pending"] == []
    assert [s["order_id"] for s in guest["delivered"]] == [order["id"]]

    assert api.delete(f"/guest-orders/{order['id']}", params=DEVICE).status_code == 204
    assert api.get("/guest-orders/", params=DEVICE).json()["delivered"] == []


def test_finalize_failure_redirect(api):
    resp = api.post("/checkout/finalize", params={**DEVICE, "status": "failure", "message": "PENDING"})

    assert resp.json() == {"state": "failure-confirmed", "message": "Payment failed: PENDING", "order": None}


def test_status_update_requires_admin(api):
    resp = api.patch("/orders/1/status", json={"status": "shipped"})

    assert resp.status_code == 403


def test_status_update_rejects_unknown_status(api):
    resp = api.patch("/orders/1/status", json={"status": "lost"}, headers=ADMIN)

    assert resp.status_code == 422


def test_unknown_order_is_404(api):
    assert api.get("/orders/12345").status_code == 404
    assert api.patch("/orders/12345/status", json={"status": "shipped"}, headers=ADMIN).status_code == 404
