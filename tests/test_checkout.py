import json

import httpx
from sqlalchemy.exc import OperationalError

from services.cart_service.repository import CartRepository
from services.checkout_service.gateway import SANDBOX_URL, SQUARE_VERSION
from services.checkout_service.service import make_idempotency_key
from services.product_service.repository import ProductRepository


async def _fill_cart(client, headers):
    await client.post("/cart/items", json={"product_id": "1", "quantity": 1}, headers=headers)
    await client.post("/cart/items", json={"product_id": "2", "quantity": 2}, headers=headers)


async def test_empty_cart_never_reaches_the_gateway(client, shopper, square):
    resp = await client.post("/checkout/payment", json={"sourceId": "cnon:card-ok"}, headers=shopper["headers"])
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cart is empty"
    assert square.requests == []


async def test_successful_checkout_creates_order_and_empties_cart(client, shopper, square):
    headers = shopper["headers"]
    await _fill_cart(client, headers)

    resp = await client.post(
        "/checkout/payment",
        json={"sourceId": "cnon:card-ok", "email": "shopper@example.com", "name": "Shopper"},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["success"] is True
    assert body["payment_id"] == "pay_1"

    order = (await client.get(f"/orders/{body['order_id']}", headers=headers)).json()
    assert order["total"] == 69700
    assert order["status"] == "completed"
    assert order["payment_id"] == "pay_1"
    assert [(i["product_id"], i["product_name"], i["quantity"], i["price"]) for i in order["items"]] == [
        ("1", "Premium Headphones", 1, 29900),
        ("2", "Smart Watch", 2, 19900),
    ]

    cart = (await client.get("/cart", headers=headers)).json()
    assert cart["items"] == []


async def test_gateway_request_shape(client, shopper, square):
    headers = shopper["headers"]
    await _fill_cart(client, headers)

    await client.post(
        "/checkout/payment",
        json={"sourceId": "cnon:card-ok", "email": "buyer@example.com", "name": "Pat"},
        headers=headers,
    )

    assert len(square.requests) == 1
    sent = square.requests[0]
    assert sent.method == "POST"
    assert str(sent.url) == SANDBOX_URL
    assert sent.headers["authorization"] == "Bearer sq-test-token"
    assert sent.headers["square-version"] == SQUARE_VERSION

    payload = json.loads(sent.content)
    assert payload["source_id"] == "cnon:card-ok"
    assert payload["amount_money"] == {"amount": 69700, "currency": "USD"}
    assert payload["location_id"] == "LOC123"
    assert payload["buyer_email_address"] == "buyer@example.com"
    assert payload["note"] == "Order for Pat"
    assert payload["idempotency_key"]


async def test_order_keeps_price_from_purchase_time(client, db, shopper, square):
    headers = shopper["headers"]
    await client.post("/cart/items", json={"product_id": "3", "quantity": 1}, headers=headers)
    order_id = (
        await client.post("/checkout/payment", json={"sourceId": "cnon:card-ok"}, headers=headers)
    ).json()["order_id"]

    product = await ProductRepository.get_product_by_id(db, "3")
    product.price = 99
    await db.commit()

    order = (await client.get(f"/orders/{order_id}", headers=headers)).json()
    assert order["items"][0]["price"] == 4900
    assert order["total"] == 4900


async def test_declined_charge_leaves_cart_and_creates_no_order(client, shopper, square):
    headers = shopper["headers"]
    await _fill_cart(client, headers)
    square.status_code = 402
    square.body = {"errors": [{"category": "PAYMENT_METHOD_ERROR", "code": "CARD_DECLINED"}]}

    resp = await client.post("/checkout/payment", json={"sourceId": "cnon:card-declined"}, headers=headers)
    assert resp.status_code == 402
    assert resp.json() == {"detail": "Payment failed"}
    assert "CARD_DECLINED" not in resp.text

    assert (await client.get("/orders", headers=headers)).json() == []
    cart = (await client.get("/cart", headers=headers)).json()
    assert [(line["product"]["id"], line["quantity"]) for line in cart["items"]] == [("1", 1), ("2", 2)]


async def test_unreachable_gateway_is_a_payment_failure(client, shopper, square):
    headers = shopper["headers"]
    await _fill_cart(client, headers)
    square.error = httpx.ConnectTimeout("timed out")

    resp = await client.post("/checkout/payment", json={"sourceId": "cnon:card-ok"}, headers=headers)
    assert resp.status_code == 402
    assert (await client.get("/orders", headers=headers)).json() == []
    assert len((await client.get("/cart", headers=headers)).json()["items"]) == 2


async def test_failed_payment_status_is_a_payment_failure(client, shopper, square):
    headers = shopper["headers"]
    await _fill_cart(client, headers)
    square.body = {"payment": {"id": "pay_failed", "status": "FAILED"}}

    resp = await client.post("/checkout/payment", json={"sourceId": "cnon:card-ok"}, headers=headers)
    assert resp.status_code == 402
    assert (await client.get("/orders", headers=headers)).json() == []


async def test_retry_with_same_checkout_id_reuses_idempotency_key(client, shopper, square):
    headers = shopper["headers"]
    await _fill_cart(client, headers)
    square.status_code = 500
    square.body = {"errors": [{"code": "INTERNAL_SERVER_ERROR"}]}

    payment = {"sourceId": "cnon:card-ok", "checkoutId": "attempt-42"}
    assert (await client.post("/checkout/payment", json=payment, headers=headers)).status_code == 402

    square.status_code = 200
    square.body = None
    assert (await client.post("/checkout/payment", json=payment, headers=headers)).status_code == 200

    keys = [json.loads(r.content)["idempotency_key"] for r in square.requests]
    assert keys[0] == keys[1] == make_idempotency_key(shopper["user"]["id"], "attempt-42")


async def test_attempts_without_checkout_id_get_fresh_keys(client, shopper, square):
    headers = shopper["headers"]
    await _fill_cart(client, headers)
    square.status_code = 500
    square.body = {"errors": []}

    await client.post("/checkout/payment", json={"sourceId": "cnon:card-ok"}, headers=headers)
    await client.post("/checkout/payment", json={"sourceId": "cnon:card-ok"}, headers=headers)

    keys = {json.loads(r.content)["idempotency_key"] for r in square.requests}
    assert len(keys) == 2


async def test_checkout_summary(client, shopper):
    headers = shopper["headers"]
    assert (await client.get("/checkout", headers=headers)).status_code == 400

    await _fill_cart(client, headers)
    summary = (await client.get("/checkout", headers=headers)).json()
    assert summary["total"] == 69700
    assert summary["currency"] == "USD"
    assert summary["application_id"] == "sandbox-sq0idb-test"
    assert summary["location_id"] == "LOC123"
    assert len(summary["items"]) == 2


async def test_orders_are_private(client, register, square):
    alice = await register(email="alice@example.com")
    mallory = await register(email="mallory@example.com")

    await client.post("/cart/items", json={"product_id": "4"}, headers=alice["headers"])
    order_id = (
        await client.post("/checkout/payment", json={"sourceId": "cnon:card-ok"}, headers=alice["headers"])
    ).json()["order_id"]

    assert (await client.get(f"/orders/{order_id}", headers=mallory["headers"])).status_code == 404
    assert (await client.get("/orders", headers=mallory["headers"])).json() == []

    history = (await client.get("/orders", headers=alice["headers"])).json()
    assert [o["id"] for o in history] == [order_id]


async def test_payment_requires_source_id(client, shopper, square):
    resp = await client.post("/checkout/payment", json={"email": "x@example.com"}, headers=shopper["headers"])
    assert resp.status_code == 422
    assert square.requests == []


async def test_failed_commit_after_charge_rolls_back_order_and_keeps_cart(client, shopper, square, monkeypatch):
    headers = shopper["headers"]
    await _fill_cart(client, headers)

    async def broken_delete(db, user_id):
        raise OperationalError("DELETE FROM cart_items", {}, Exception("database is locked"))

    monkeypatch.setattr(CartRepository, "delete_for_user", staticmethod(broken_delete))

    resp = await client.post("/checkout/payment", json={"sourceId": "cnon:card-ok"}, headers=headers)
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}
    # The charge went through before the commit failed
    assert len(square.requests) == 1

    assert (await client.get("/orders", headers=headers)).json() == []
    cart = (await client.get("/cart", headers=headers)).json()
    assert [(line["product"]["id"], line["quantity"]) for line in cart["items"]] == [("1", 1), ("2", 2)]


async def test_payment_accepts_snake_case_fields(client, shopper, square):
    headers = shopper["headers"]
    await _fill_cart(client, headers)

    resp = await client.post(
        "/checkout/payment",
        json={"source_id": "cnon:card-ok", "checkout_id": "attempt-7"},
        headers=headers,
    )
    assert resp.status_code == 200
    assert set(resp.json()) == {"success", "order_id", "payment_id"}

    sent = json.loads(square.requests[0].content)
    assert sent["source_id"] == "cnon:card-ok"
    assert sent["idempotency_key"] == make_idempotency_key(shopper["user"]["id"], "attempt-7")
