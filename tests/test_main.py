import config
from main import DEMO_PRODUCTS


def test_root(client):
    assert client.get("/").json() == {"message": "Ramani Fashion API running"}


def test_unknown_route_uses_error_shape(client):
    res = client.get("/api/nothing-here")
    assert res.status_code == 404
    assert res.json() == {"error": "Not Found"}


def test_seed_is_one_shot(client):
    first = client.post("/api/seed").json()
    assert first == {"seeded": True, "products": len(DEMO_PRODUCTS)}
    assert client.post("/api/seed").json()["seeded"] is False

    res = client.post("/api/admin/auth/start", json={"email": config.ADMIN_EMAIL, "password": config.ADMIN_PASSWORD})
    assert res.status_code == 200


def test_seeded_catalog_sorts_by_discount(client):
    client.post("/api/seed")
    products = client.get("/api/products?sort=discount&order=desc").json()["products"]
    discounts = [p["discountPercent"] for p in products]
    assert discounts == sorted(discounts, reverse=True)
    assert discounts[0] == 50
