CUSTOMER = {
    "name": "Ann Lee",
    "company": "Lee Trading",
    "email": "ann@example.com",
    "phone": "555-0142",
    "street_line_1": "400 Pine St",
    "city": "Seattle",
    "state": "WA",
    "zip": "98101",
    "country": "US",
}

def test_list_customers_empty(client):
    resp = client.get("/customers/")
    assert resp.status_code == 200
    assert resp.json() == []

def test_create_and_get_customer(client):
    resp = client.post("/customers/", json=CUSTOMER)
    assert resp.status_code == 201
    created = resp.json()
    assert created["id"] > 0
    assert created["street_line_2"] is None

    fetched = client.get(f"/customers/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["email"] == "ann@example.com"

def test_duplicate_email_conflicts(client):
    client.post("/customers/", json=CUSTOMER)
    resp = client.post("/customers/", json={**CUSTOMER, "name": "Someone Else"})
    assert resp.status_code == 409

def test_search_customers(client):
    client.post("/customers/", json=CUSTOMER)
    client.post("/customers/", json={**CUSTOMER, "name": "Tom Park", "email": "tom@example.com", "company": None})

    assert [c["name"] for c in client.get("/customers/", params={"search": "trading"}).json()] == ["Ann Lee"]
    assert [c["name"] for c in client.get("/customers/", params={"search": "TOM@"}).json()] == ["Tom Park"]
    assert len(client.get("/customers/", params={"limit": 1}).json()) == 1

def test_customer_not_found(client):
    assert client.get("/customers/12345").status_code == 404
