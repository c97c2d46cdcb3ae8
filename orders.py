import logging
import time
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import Field

from cart import clear_cart
from database import create_document, get_db, parse_object_id, serialize_doc
from schemas import Order, OrderItem, RequestBody, ShippingAddress
from security import Principal, require_customer

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


class OrderCreateBody(RequestBody):
    items: List[OrderItem] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0)
    shipping_address: Optional[ShippingAddress] = None
    payment_method: Literal["COD", "Card", "UPI"] = "COD"


def generate_order_number() -> str:
    return "RM" + str(int(time.time() * 1000))


def place_order(db, user_id: str, body: OrderCreateBody) -> dict:
    """Persist the order, then empty the cart. The two writes are independent."""
    order = Order(
        user_id=user_id,
        order_number=generate_order_number(),
        items=body.items,
        total_amount=body.total_amount,
        shipping_address=body.shipping_address,
        payment_method=body.payment_method,
        status="pending",
    )
    order_id = create_document("order", order)
    clear_cart(db, user_id)
    logger.info("Order %s placed by user %s", order.order_number, user_id)
    return serialize_doc(db["order"].find_one({"_id": parse_object_id(order_id)}))


@router.get("")
def list_orders(principal: Principal = Depends(require_customer)):
    docs = get_db()["order"].find({"userId": principal.id}).sort("createdAt", -1)
    return [serialize_doc(d) for d in docs]


@router.get("/{order_id}")
def get_order(order_id: str, principal: Principal = Depends(require_customer)):
    order = get_db()["order"].find_one({"_id": parse_object_id(order_id), "userId": principal.id})
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return serialize_doc(order)


@router.post("", status_code=201)
def create_order(body: OrderCreateBody, principal: Principal = Depends(require_customer)):
    return place_order(get_db(), principal.id, body)
