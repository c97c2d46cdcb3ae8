"""
Per-user cart and wishlist.

Cart updates are read-modify-write on the single cart document; two racing
requests for the same user can lose an increment.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field

from catalog import serialize_product
from database import get_db, parse_object_id, serialize_doc, utcnow
from schemas import Cart, RequestBody
from security import Principal, require_customer

router = APIRouter(prefix="/api", tags=["cart"])


class AddToCartBody(RequestBody):
    product_id: str
    quantity: int = Field(1, ge=1)


class SetQuantityBody(RequestBody):
    quantity: int = Field(..., ge=1)


def _require_product(db, product_id: str) -> dict:
    product = db["product"].find_one({"_id": parse_object_id(product_id)})
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _products_by_id(db, product_ids: List[str]) -> dict:
    oids = [parse_object_id(pid) for pid in product_ids]
    if not oids:
        return {}
    return {str(p["_id"]): p for p in db["product"].find({"_id": {"$in": oids}})}


def populate_cart(db, cart) -> dict:
    if not cart:
        return {"items": []}
    products = _products_by_id(db, [item["productId"] for item in cart.get("items", [])])
    out = serialize_doc(cart)
    out["items"] = [
        {
            "productId": item["productId"],
            "quantity": item["quantity"],
            "product": serialize_product(products[item["productId"]]) if item["productId"] in products else None,
        }
        for item in cart.get("items", [])
    ]
    return out


def populate_wishlist(db, wishlist) -> dict:
    if not wishlist:
        return {"products": []}
    products = _products_by_id(db, wishlist.get("products", []))
    out = serialize_doc(wishlist)
    out["products"] = [serialize_product(products[pid]) for pid in wishlist.get("products", []) if pid in products]
    out["productIds"] = list(wishlist.get("products", []))
    return out


def _save_cart(db, cart: dict) -> dict:
    doc = Cart(user_id=cart["userId"], items=cart["items"]).model_dump(by_alias=True)
    now = utcnow()
    db["cart"].update_one(
        {"userId": doc["userId"]},
        {"$set": {"items": doc["items"], "updatedAt": now}, "$setOnInsert": {"createdAt": now}},
        upsert=True,
    )
    return db["cart"].find_one({"userId": cart["userId"]})


# ----------------------- Cart service -----------------------
def get_cart(db, user_id: str) -> dict:
    return populate_cart(db, db["cart"].find_one({"userId": user_id}))


def add_to_cart(db, user_id: str, product_id: str, quantity: int = 1) -> dict:
    _require_product(db, product_id)
    cart = db["cart"].find_one({"userId": user_id}) or {"userId": user_id, "items": []}

    existing = next((item for item in cart["items"] if item["productId"] == product_id), None)
    if existing:
        existing["quantity"] += quantity
    else:
        cart["items"].append({"productId": product_id, "quantity": quantity})
    return populate_cart(db, _save_cart(db, cart))


def set_quantity(db, user_id: str, product_id: str, quantity: int) -> dict:
    cart = db["cart"].find_one({"userId": user_id})
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")
    item = next((item for item in cart["items"] if item["productId"] == product_id), None)
    if not item:
        raise HTTPException(status_code=404, detail="Item not found in cart")
    item["quantity"] = quantity
    return populate_cart(db, _save_cart(db, cart))


def remove_item(db, user_id: str, product_id: str) -> dict:
    cart = db["cart"].find_one({"userId": user_id})
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")
    cart["items"] = [item for item in cart["items"] if item["productId"] != product_id]
    return populate_cart(db, _save_cart(db, cart))


def clear_cart(db, user_id: str) -> None:
    db["cart"].update_one({"userId": user_id}, {"$set": {"items": [], "updatedAt": utcnow()}})


# ----------------------- Wishlist service -----------------------
def get_wishlist(db, user_id: str) -> dict:
    return populate_wishlist(db, db["wishlist"].find_one({"userId": user_id}))


def add_to_wishlist(db, user_id: str, product_id: str) -> dict:
    _require_product(db, product_id)
    now = utcnow()
    db["wishlist"].update_one(
        {"userId": user_id},
        {"$addToSet": {"products": product_id}, "$set": {"updatedAt": now}, "$setOnInsert": {"createdAt": now}},
        upsert=True,
    )
    return get_wishlist(db, user_id)


def remove_from_wishlist(db, user_id: str, product_id: str) -> dict:
    res = db["wishlist"].update_one(
        {"userId": user_id},
        {"$pull": {"products": product_id}, "$set": {"updatedAt": utcnow()}},
    )
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Wishlist not found")
    return get_wishlist(db, user_id)


# ----------------------- Routes -----------------------
@router.get("/cart")
def read_cart(principal: Principal = Depends(require_customer)):
    return get_cart(get_db(), principal.id)


@router.post("/cart")
def post_cart(body: AddToCartBody, principal: Principal = Depends(require_customer)):
    return add_to_cart(get_db(), principal.id, body.product_id, body.quantity)


@router.put("/cart/{product_id}")
def put_cart_item(product_id: str, body: SetQuantityBody, principal: Principal = Depends(require_customer)):
    return set_quantity(get_db(), principal.id, product_id, body.quantity)


@router.delete("/cart/{product_id}")
def delete_cart_item(product_id: str, principal: Principal = Depends(require_customer)):
    return remove_item(get_db(), principal.id, product_id)


@router.delete("/cart")
def delete_cart(principal: Principal = Depends(require_customer)):
    db = get_db()
    clear_cart(db, principal.id)
    return get_cart(db, principal.id)


@router.get("/wishlist")
def read_wishlist(principal: Principal = Depends(require_customer)):
    return get_wishlist(get_db(), principal.id)


@router.post("/wishlist/{product_id}")
def post_wishlist(product_id: str, principal: Principal = Depends(require_customer)):
    return add_to_wishlist(get_db(), principal.id, product_id)


@router.delete("/wishlist/{product_id}")
def delete_wishlist_item(product_id: str, principal: Principal = Depends(require_customer)):
    return remove_from_wishlist(get_db(), principal.id, product_id)
