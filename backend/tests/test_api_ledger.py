"""
HTTP tests for the ledger blueprints: customers, inventory, orders, payments.
"""


def _create_customer(client, **overrides):
    payload = {
        "name": "Ngozi Eze",
        "phone": "08035551234",
        "customer_type": "wholesale",
        "address": {"street": "4 Bank Road", "city": "Enugu", "state": "Enugu"},
    }
    payload.update(overrides)
    resp = client.post("/api/customers/", json=payload)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


def _create_item(client, **overrides):
    payload = {
        "item_name": "Spaghetti",
        "brand": "Golden Penny",
        "category": "SPAGHETTI",
        "unit": "CARTON",
        "unit_price_cents": 850_000,
        "quantity": 40,
        "location": "Warehouse B-01",
        "supplier": {"name": "Flour Mills", "contact": "08022222222"},
    }
    payload.update(overrides)
    resp = client.post("/api/inventory/", json=payload)
    assert resp.status_code == 201, resp.get_json()
    return resp.get_json()["data"]


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200


def test_create_customer_envelope(client):
    data = _create_customer(client, old_balance_cents=25_000)

    assert data["customer_type"] == "WHOLESALE"
    assert data["address"]["country"] == "Nigeria"
    assert data["old_balance_cents"] == 25_000
    assert data["old_balance_remaining_cents"] == 25_000
    assert data["balance_cents"] == 0


def test_create_customer_validation_errors(client):
    resp = client.post("/api/customers/", json={"name": "No Phone"})
    body = resp.get_json()
    assert resp.status_code == 400
    assert body["success"] is False
    assert body["message"]

    resp = client.post("/api/customers/", json={
        "name": "X", "phone": "1", "customer_type": "RETAIL",
        "address": {"street": "a", "city": "b", "state": "c"},
        "favourite_colour": "blue",
    })
    assert resp.status_code == 400

    resp = client.post("/api/customers/", data="not json", content_type="text/plain")
    assert resp.status_code == 400


def test_customer_old_balance_is_immutable(client):
    customer = _create_customer(client, old_balance_cents=1000)

    resp = client.put(f"/api/customers/{customer['id']}", json={"old_balance_cents": 0})
    assert resp.status_code == 400

    resp = client.put(f"/api/customers/{customer['id']}", json={"business_name": "Eze Stores"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["business_name"] == "Eze Stores"


def test_unknown_ids_return_404(client):
    for url in ("/api/customers/999", "/api/orders/999", "/api/payments/999", "/api/inventory/999"):
        resp = client.get(url)
        assert resp.status_code == 404, url
        assert resp.get_json()["success"] is False


def test_order_and_payment_flow(client):
    customer = _create_customer(client, old_balance_cents=100_000)
    item = _create_item(client)

    resp = client.post("/api/orders/", json={
        "customer_id": customer["id"],
        "lines": [{"inventory_item_id": item["id"], "quantity": 2}],
        "discount_cents": 100_000,
    })
    assert resp.status_code == 201
    order = resp.get_json()["data"]
    assert order["total_cents"] == 1_600_000
    assert order["payment_status"] == "UNPAID"
    assert order["lines"][0]["item_name"] == "Spaghetti"

    resp = client.get(f"/api/inventory/{item['id']}")
    assert resp.get_json()["data"]["quantity"] == 38

    resp = client.post("/api/payments/", json={
        "customer_id": customer["id"],
        "amount_cents": 2_000_000,
        "payment_method": "bank_transfer",
        "bank_name": "Access Bank",
    })
    assert resp.status_code == 201
    payment = resp.get_json()["data"]
    [allocation] = payment["allocations"]
    assert allocation["order_id"] == order["id"]
    assert allocation["applied_cents"] == 1_600_000
    assert allocation["order_payment_status"] == "PAID"
    # every payment counts against old balance 100_000 + remaining order debt 0
    assert payment["customer_wallet_cents"] == 1_900_000

    resp = client.get(f"/api/customers/{customer['id']}/wallet")
    wallet = resp.get_json()["data"]
    assert wallet["wallet_cents"] == 1_900_000
    assert wallet["stored_wallet_cents"] == 1_900_000

    resp = client.get(f"/api/orders/{order['id']}")
    detail = resp.get_json()["data"]
    assert detail["payment_status"] == "PAID"
    assert detail["customer"]["id"] == customer["id"]

    resp = client.get(f"/api/customers/{customer['id']}")
    overview = resp.get_json()["data"]
    assert overview["stats"]["order_count"] == 1
    assert overview["stats"]["payment_count"] == 1
    assert overview["stats"]["wallet_cents"] == 1_900_000


def test_order_insufficient_stock_returns_400(client):
    customer = _create_customer(client)
    item = _create_item(client, quantity=1)

    resp = client.post("/api/orders/", json={
        "customer_id": customer["id"],
        "lines": [{"inventory_item_id": item["id"], "quantity": 2}],
    })

    assert resp.status_code == 400
    assert "Insufficient stock" in resp.get_json()["message"]


def test_order_update_rejects_financial_fields(client):
    customer = _create_customer(client)
    item = _create_item(client)
    order = client.post("/api/orders/", json={
        "customer_id": customer["id"],
        "lines": [{"inventory_item_id": item["id"], "quantity": 1}],
    }).get_json()["data"]

    resp = client.put(f"/api/orders/{order['id']}", json={"amount_paid_cents": 5})
    assert resp.status_code == 400
    assert resp.get_json()["details"]["rejected_fields"] == ["amount_paid_cents"]

    resp = client.put(f"/api/orders/{order['id']}", json={"status": "COMPLETED", "delivery_status": "DELIVERED"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["status"] == "COMPLETED"


def test_delete_order_endpoint(client):
    customer = _create_customer(client)
    item = _create_item(client, quantity=10)
    order = client.post("/api/orders/", json={
        "customer_id": customer["id"],
        "lines": [{"inventory_item_id": item["id"], "quantity": 4}],
    }).get_json()["data"]
    client.post("/api/payments/", json={
        "customer_id": customer["id"],
        "order_id": order["id"],
        "amount_cents": 1000,
        "payment_method": "CASH",
    })

    resp = client.delete(f"/api/orders/{order['id']}")
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["deleted_payment_count"] == 1
    assert data["restored_item_count"] == 1

    assert client.get(f"/api/inventory/{item['id']}").get_json()["data"]["quantity"] == 10
    assert client.get(f"/api/orders/{order['id']}").status_code == 404


def test_delete_customer_with_history_conflicts(client):
    customer = _create_customer(client)
    client.post("/api/payments/", json={
        "customer_id": customer["id"],
        "amount_cents": 500,
        "payment_method": "CASH",
    })

    resp = client.delete(f"/api/customers/{customer['id']}")
    assert resp.status_code == 409
    assert resp.get_json()["success"] is False

    fresh = _create_customer(client, name="Tunde Nwosu")
    resp = client.delete(f"/api/customers/{fresh['id']}")
    assert resp.status_code == 200


def test_payment_amount_must_be_positive(client):
    customer = _create_customer(client)

    resp = client.post("/api/payments/", json={
        "customer_id": customer["id"],
        "amount_cents": 0,
        "payment_method": "CASH",
    })

    assert resp.status_code == 400


def test_payment_amount_above_ceiling_returns_400(client):
    customer = _create_customer(client)

    resp = client.post("/api/payments/", json={
        "customer_id": customer["id"],
        "amount_cents": 10**19,
        "payment_method": "CASH",
    })

    assert resp.status_code == 400
    assert "amount_cents" in resp.get_json()["message"]
    wallet = client.get(f"/api/customers/{customer['id']}/wallet").get_json()["data"]
    assert wallet["total_payments_cents"] == 0


def test_payment_update_rejects_amount(client):
    customer = _create_customer(client)
    payment = client.post("/api/payments/", json={
        "customer_id": customer["id"],
        "amount_cents": 700,
        "payment_method": "POS",
    }).get_json()["data"]

    resp = client.put(f"/api/payments/{payment['id']}", json={"amount_cents": 1})
    assert resp.status_code == 400

    resp = client.put(f"/api/payments/{payment['id']}", json={"reference_number": "POS-0042"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["reference_number"] == "POS-0042"


def test_inventory_adjust_and_list_stats(client):
    item = _create_item(client, quantity=5)

    resp = client.post(f"/api/inventory/{item['id']}/adjust", json={"delta": -6})
    assert resp.status_code == 400

    resp = client.post(f"/api/inventory/{item['id']}/adjust", json={"delta": 20, "reason": "Delivery"})
    assert resp.status_code == 200
    assert resp.get_json()["data"]["quantity"] == 25

    resp = client.put(f"/api/inventory/{item['id']}", json={"quantity": 1})
    assert resp.status_code == 400

    resp = client.get("/api/inventory/")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["stats"]["item_count"] == 1


def test_customer_statement_endpoint(client):
    customer = _create_customer(client)

    resp = client.get(f"/api/customers/{customer['id']}/statement?start=2026-01-01&end=2026-12-31")
    assert resp.status_code == 200
    assert resp.get_json()["data"]["summary"]["total_orders_cents"] == 0

    resp = client.get(f"/api/customers/{customer['id']}/statement?start=2026-12-31&end=2026-01-01")
    assert resp.status_code == 400


def test_cors_headers_for_allowed_origin(client):
    resp = client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"

    resp = client.get("/health", headers={"Origin": "http://evil.example"})
    assert "Access-Control-Allow-Origin" not in resp.headers
