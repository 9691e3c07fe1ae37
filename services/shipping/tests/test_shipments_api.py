import pytest

@pytest.fixture
def order_id(client, make_csv):
    resp = client.post("/orders/upload-csv", files={"file": ("orders.csv", make_csv(), "text/csv")})
    assert resp.json()["results"]["successful"] == 1
    return client.get("/orders/").json()["data"][0]["id"]

def _shipments(client, **params):
    return client.get("/shipments/", params=params).json()

def test_imported_order_has_pending_quotes(client, order_id):
    shipments = _shipments(client, order_id=order_id)
    assert 2 <= len(shipments) <= 4
    assert all(s["status"] == "pending" for s in shipments)
    assert all(s["tracking_number"] is None and s["label_url"] is None for s in shipments)
    assert len({s["carrier"] for s in shipments}) == len(shipments)

def test_purchase_label(client, order_id):
    shipment = _shipments(client, order_id=order_id)[0]
    resp = client.post(f"/shipments/{shipment['id']}/purchase")
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Shipping label purchased successfully"

    data = body["data"]
    assert data["status"] == "purchased"
    assert data["tracking_number"]
    assert data["label_url"].endswith(f"/{data['tracking_number']}.pdf")
    assert data["shipped_date"] is not None

    assert client.get(f"/orders/{order_id}").json()["status"] == "shipped"
    assert [s["id"] for s in _shipments(client, status="purchased")] == [shipment["id"]]

def test_second_purchase_is_rejected_without_changes(client, order_id):
    shipment = _shipments(client, order_id=order_id)[0]
    first = client.post(f"/shipments/{shipment['id']}/purchase").json()["data"]

    again = client.post(f"/shipments/{shipment['id']}/purchase")
    assert again.status_code == 400
    assert again.json()["detail"] == "Shipment already purchased"

    current = next(s for s in _shipments(client, order_id=order_id) if s["id"] == shipment["id"])
    assert current["tracking_number"] == first["tracking_number"]
    assert current["label_url"] == first["label_url"]

def test_only_one_label_per_order(client, order_id):
    first, second = _shipments(client, order_id=order_id)[:2]
    assert client.post(f"/shipments/{first['id']}/purchase").status_code == 200

    resp = client.post(f"/shipments/{second['id']}/purchase")
    assert resp.status_code == 400
    assert resp.json()["detail"].startswith("Order already has a purchased shipment")
    sibling = next(s for s in _shipments(client, order_id=order_id) if s["id"] == second["id"])
    assert sibling["status"] == "pending"
    assert sibling["tracking_number"] is None

def test_purchase_unknown_shipment(client):
    resp = client.post("/shipments/9999/purchase")
    assert resp.status_code == 404

def test_create_shipment_and_reject_purchase_in_transit(client, order_id):
    payload = {
        "order_id": order_id,
        "carrier": "dhl",
        "service_level": "DHL Ground",
        "package_type": "Box",
        "weight_lb": 1.5,
        "length_in": 10,
        "width_in": 8,
        "height_in": 4,
        "rate_amount": 13.75,
        "status": "in_transit",
    }
    resp = client.post("/shipments/", json=payload)
    assert resp.status_code == 201
    created = resp.json()
    assert created["delivery_estimate"] == "2-4 days"

    rejected = client.post(f"/shipments/{created['id']}/purchase")
    assert rejected.status_code == 400
    assert client.get(f"/orders/{order_id}").json()["status"] == "pending"

def test_create_shipment_for_missing_order(client):
    payload = {
        "order_id": 4242,
        "carrier": "ups",
        "service_level": "UPS Ground",
        "package_type": "Box",
        "weight_lb": 1,
        "length_in": 1,
        "width_in": 1,
        "height_in": 1,
        "rate_amount": 9.35,
    }
    assert client.post("/shipments/", json=payload).status_code == 404

def test_unknown_carrier_is_rejected(client, order_id):
    payload = {"order_id": order_id, "carrier": "pigeon", "service_level": "x", "package_type": "Box",
               "weight_lb": 1, "length_in": 1, "width_in": 1, "height_in": 1, "rate_amount": 1}
    assert client.post("/shipments/", json=payload).status_code == 422
