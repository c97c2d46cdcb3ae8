from bson import ObjectId

from tests.conftest import make_product


def test_empty_cart(client, customer):
    res = client.get("/api/cart", headers=customer["headers"])
    assert res.status_code == 200
    assert res.json() == {"items": []}


def test_adding_same_product_twice_sums_quantity(client, customer):
    product_id = make_product(name="Banarasi")
    client.post("/api/cart", json={"productId": product_id, "quantity": 2}, headers=customer["headers"])
    res = client.post("/api/cart", json={"productId": product_id, "quantity": 3}, headers=customer["headers"])
    assert res.status_code == 200
    items = res.json()["items"]
    assert len(items) == 1
    assert items[0]["productId"] == product_id
    assert items[0]["quantity"] == 5
    assert items[0]["product"]["name"] == "Banarasi"


def test_one_cart_document_per_user(client, db, customer):
    first = make_product()
    second = make_product()
    client.post("/api/cart", json={"productId": first}, headers=customer["headers"])
    client.post("/api/cart", json={"productId": second}, headers=customer["headers"])
    assert db["cart"].count_documents({"userId": customer["id"]}) == 1
    cart = db["cart"].find_one({"userId": customer["id"]})
    assert [item["quantity"] for item in cart["items"]] == [1, 1]


def test_add_unknown_product(client, customer):
    res = client.post("/api/cart", json={"productId": str(ObjectId())}, headers=customer["headers"])
    assert res.status_code == 404


def test_quantity_must_be_positive(client, customer):
    product_id = make_product()
    res = client.post("/api/cart", json={"productId": product_id, "quantity": 0}, headers=customer["headers"])
    assert res.status_code == 400


def test_set_quantity(client, customer):
    product_id = make_product()
    client.post("/api/cart", json={"productId": product_id}, headers=customer["headers"])
    res = client.put(f"/api/cart/{product_id}", json={"quantity": 4}, headers=customer["headers"])
    assert res.status_code == 200
    assert res.json()["items"][0]["quantity"] == 4


def test_set_quantity_on_missing_line(client, customer):
    product_id = make_product()
    other = make_product()
    res = client.put(f"/api/cart/{product_id}", json={"quantity": 4}, headers=customer["headers"])
    assert res.status_code == 404
    assert res.json() == {"error": "Cart not found"}

    client.post("/api/cart", json={"productId": other}, headers=customer["headers"])
    res = client.put(f"/api/cart/{product_id}", json={"quantity": 4}, headers=customer["headers"])
    assert res.status_code == 404
    assert res.json() == {"error": "Item not found in cart"}


def test_remove_item(client, customer):
    keep = make_product(name="keep")
    drop = make_product(name="drop")
    client.post("/api/cart", json={"productId": keep}, headers=customer["headers"])
    client.post("/api/cart", json={"productId": drop}, headers=customer["headers"])
    res = client.delete(f"/api/cart/{drop}", headers=customer["headers"])
    assert [item["productId"] for item in res.json()["items"]] == [keep]


def test_deleted_product_shows_as_empty_line(client, db, customer):
    product_id = make_product()
    client.post("/api/cart", json={"productId": product_id}, headers=customer["headers"])
    db["product"].delete_one({"_id": ObjectId(product_id)})
    items = client.get("/api/cart", headers=customer["headers"]).json()["items"]
    assert items[0]["product"] is None


def test_cart_requires_login(client):
    assert client.get("/api/cart").status_code == 401


def test_wishlist_is_a_set(client, customer):
    product_id = make_product(name="Paithani")
    client.post(f"/api/wishlist/{product_id}", headers=customer["headers"])
    res = client.post(f"/api/wishlist/{product_id}", headers=customer["headers"])
    assert res.status_code == 200
    assert res.json()["productIds"] == [product_id]
    assert [p["name"] for p in res.json()["products"]] == ["Paithani"]


def test_wishlist_remove(client, customer):
    product_id = make_product()
    client.post(f"/api/wishlist/{product_id}", headers=customer["headers"])
    res = client.delete(f"/api/wishlist/{product_id}", headers=customer["headers"])
    assert res.json()["products"] == []


def test_wishlist_remove_without_wishlist(client, customer):
    res = client.delete(f"/api/wishlist/{ObjectId()}", headers=customer["headers"])
    assert res.status_code == 404
    assert res.json() == {"error": "Wishlist not found"}
