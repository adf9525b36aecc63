from pharmasys.models import Purchase, PurchaseItem


def _item_payload(master_data, **overrides):
    payload = {
        "name": "Cefadroxil 500mg",
        "category_id": master_data["category_id"],
        "type_id": master_data["type_id"],
        "unit_id": master_data["box_id"],
        "base_price": 50000,
        "sell_price": 65000,
        "unit_conversions": [{"unit_name": "Strip", "conversion_rate": 10}],
    }
    payload.update(overrides)
    return payload


def test_create_item_generates_code_and_unit_prices(client, master_data):
    res = client.post("/items/", json=_item_payload(master_data))
    assert res.status_code == 201
    item = res.json()

    assert item["code"] == "KBAB01"
    assert item["base_unit"] == "Box"
    assert item["stock"] == 0
    assert item["category"]["name"] == "Antibiotik"
    assert item["unit_conversions"] == [{
        "unit_name": "Strip", "to_unit_id": master_data["strip_id"], "conversion_rate": 10.0,
        "base_price": 5000.0, "sell_price": 6500.0,
    }]


def test_code_preview_follows_existing_items(client, master_data, amoxicillin):
    res = client.get("/items/code-preview", params={
        "type_id": master_data["type_id"],
        "category_id": master_data["category_id"],
        "unit_id": master_data["box_id"],
    })
    assert res.json() == {"code": "KBAB02"}


def test_duplicate_code_is_rejected(client, master_data, amoxicillin):
    res = client.post("/items/", json=_item_payload(master_data, code="KBAB01"))
    assert res.status_code == 400


def test_invalid_conversions_are_rejected(client, master_data):
    res = client.post("/items/", json=_item_payload(
        master_data, unit_conversions=[{"unit_name": "Box", "conversion_rate": 2}]
    ))
    assert res.status_code == 400

    res = client.post("/items/", json=_item_payload(
        master_data, unit_conversions=[{"unit_name": "Strip", "conversion_rate": 0}]
    ))
    assert res.status_code == 400

    res = client.post("/items/", json=_item_payload(master_data, base_price=-1))
    assert res.status_code == 422


def test_update_rederives_conversion_prices(client, amoxicillin):
    res = client.put(f"/items/{amoxicillin}", json={"sell_price": 70000})
    assert res.status_code == 200

    prices = {c["unit_name"]: c["sell_price"] for c in res.json()["unit_conversions"]}
    assert prices == {"Strip": 7000, "Tablet": 700}


def test_update_blank_name(client, amoxicillin):
    res = client.put(f"/items/{amoxicillin}", json={"name": "  "})
    assert res.status_code == 400


def test_list_search_by_name_and_code(client, amoxicillin):
    assert client.get("/items/", params={"search": "amx"}).json()["total"] == 1
    assert client.get("/items/", params={"search": "kbab"}).json()["total"] == 1
    assert client.get("/items/", params={"search": "zzz"}).json()["total"] == 0


def test_pricing_preview_from_margin(client):
    res = client.post("/items/pricing-preview", json={
        "base_price": 50000,
        "margin_percentage": 30,
        "unit_conversions": [{"unit_name": "Strip", "conversion_rate": 10}],
    })
    body = res.json()

    assert body["sell_price"] == 65000
    assert round(body["profit_percentage"], 2) == 30.0
    assert body["unit_conversions"][0]["sell_price"] == 6500


def test_pricing_preview_needs_a_sell_price(client):
    res = client.post("/items/pricing-preview", json={"base_price": 50000})
    assert res.status_code == 400


def test_delete_item_with_history_is_refused(client, db, amoxicillin):
    purchase = Purchase(invoice_number="PB-9", total=50000, items=[
        PurchaseItem(item_id=amoxicillin, quantity=1, price=50000, subtotal=50000),
    ])
    db.add(purchase)
    db.commit()

    res = client.delete(f"/items/{amoxicillin}")
    assert res.status_code == 409


def test_delete_item(client, amoxicillin):
    assert client.delete(f"/items/{amoxicillin}").status_code == 200
    assert client.get(f"/items/{amoxicillin}").status_code == 404


def test_update_with_nulls_keeps_stored_values(client, amoxicillin):
    res = client.put(f"/items/{amoxicillin}", json={
        "sell_price": None, "base_price": None, "min_stock": None,
        "is_active": None, "is_medicine": None, "has_expiry_date": None,
    })
    assert res.status_code == 200
    item = res.json()
    assert item["sell_price"] == 65000
    assert item["base_price"] == 50000
    assert item["min_stock"] == 5
    assert item["is_active"] is True

    assert client.get("/items/").status_code == 200
    assert client.get("/dashboard/low-stock").status_code == 200


def test_update_rejects_negative_values(client, amoxicillin):
    assert client.put(f"/items/{amoxicillin}", json={"base_price": -5000}).status_code == 422
    assert client.put(f"/items/{amoxicillin}", json={"sell_price": -1}).status_code == 422
    assert client.put(f"/items/{amoxicillin}", json={"min_stock": -1}).status_code == 422
    assert client.get(f"/items/{amoxicillin}").json()["base_price"] == 50000


def test_list_paging_bounds(client, amoxicillin):
    assert client.get("/items/", params={"page_size": -1}).status_code == 422
    assert client.get("/items/", params={"page": 0}).status_code == 422
