"""
Menu items and offers

Tests:
  1. Menu item defaults, price validation and filters
  2. Offer validation codes (required fields, discount range, dates)
  3. Active-offer filter
"""
from datetime import datetime, timedelta, timezone


def _iso(moment):
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def _offer(**overrides):
    now = datetime.now(timezone.utc)
    body = {
        "title": "Lunch deal",
        "discountPercent": 15,
        "validFrom": _iso(now - timedelta(days=1)),
        "validUntil": _iso(now + timedelta(days=1)),
    }
    body.update(overrides)
    return body


# ─── Menu items ────────────────────────────────────────────────────────────────
def test_menu_item_defaults_to_available(make_menu_item):
    item = make_menu_item()
    assert item["availability"] is True
    assert item["price"] == 6.5
    assert item["description"] is None


def test_menu_item_price_rules(client):
    base = {"name": "Tea", "category": "Beverages"}

    r = client.post("/api/menu-items", json=base)
    assert r.get_json()["code"] == "MISSING_PRICE"

    for bad in (0, -2, "cheap", True):
        r = client.post("/api/menu-items", json={**base, "price": bad})
        assert r.status_code == 400, bad
        assert r.get_json()["code"] == "INVALID_PRICE"

    r = client.post("/api/menu-items", json={**base, "price": "2.50"})
    assert r.status_code == 201
    assert r.get_json()["price"] == 2.5


def test_menu_item_filters(client, make_menu_item):
    make_menu_item(name="Dosa", category="South Indian")
    make_menu_item(name="Idli", category="South Indian", availability=False)
    make_menu_item(name="Cold Coffee", category="Beverages")

    names = [i["name"] for i in client.get("/api/menu-items", query_string={"category": "South Indian"}).get_json()]
    assert names == ["Dosa", "Idli"]

    names = [i["name"] for i in client.get("/api/menu-items?availability=true").get_json()]
    assert names == ["Dosa", "Cold Coffee"]

    names = [i["name"] for i in client.get("/api/menu-items?availability=no").get_json()]
    assert names == ["Idli"]


def test_menu_item_update_keeps_order_item_snapshot(client, make_menu_item, make_order):
    item = make_menu_item(price=5)
    order = make_order()
    line = client.post("/api/order-items", json={
        "orderId": order["id"], "menuItemId": item["id"], "quantity": 2, "price": 5,
    }).get_json()

    client.put(f"/api/menu-items?id={item['id']}", json={"price": 7})

    r = client.get(f"/api/order-items?id={line['id']}")
    assert r.get_json()["price"] == 5


# ─── Offers ────────────────────────────────────────────────────────────────────
def test_offer_create(client):
    r = client.post("/api/offers", json=_offer(validFrom="2030-01-01T00:00:00.000Z",
                                               validUntil="2030-02-01T00:00:00.000Z"))
    assert r.status_code == 201
    offer = r.get_json()
    assert offer["discountPercent"] == 15
    assert offer["validFrom"] == "2030-01-01T00:00:00.000Z"


def test_offer_validation_codes(client):
    body = _offer()
    del body["title"]
    r = client.post("/api/offers", json=body)
    assert r.get_json()["code"] == "MISSING_REQUIRED_FIELD"

    body = _offer()
    del body["validUntil"]
    assert client.post("/api/offers", json=body).get_json()["code"] == "MISSING_REQUIRED_FIELD"

    for percent in (-1, 101, "lots"):
        r = client.post("/api/offers", json=_offer(discountPercent=percent))
        assert r.get_json()["code"] == "INVALID_DISCOUNT_PERCENT", percent

    r = client.post("/api/offers", json=_offer(validFrom="next tuesday"))
    assert r.get_json()["code"] == "INVALID_DATE_FORMAT"


def test_offer_boundary_percentages_are_accepted(client):
    assert client.post("/api/offers", json=_offer(discountPercent=0)).status_code == 201
    assert client.post("/api/offers", json=_offer(discountPercent=100)).status_code == 201


def test_offer_update_rejects_blank_title(client):
    offer = client.post("/api/offers", json=_offer()).get_json()
    r = client.put(f"/api/offers?id={offer['id']}", json={"title": " "})
    assert r.status_code == 400
    assert r.get_json()["code"] == "INVALID_TITLE"


def test_active_offer_filter(client):
    now = datetime.now(timezone.utc)
    client.post("/api/offers", json=_offer(title="Running"))
    client.post("/api/offers", json=_offer(
        title="Expired",
        validFrom=_iso(now - timedelta(days=10)),
        validUntil=_iso(now - timedelta(days=5)),
    ))

    titles = [o["title"] for o in client.get("/api/offers?active=true").get_json()]
    assert titles == ["Running"]

    assert len(client.get("/api/offers").get_json()) == 2
