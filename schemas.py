"""
Database Schemas for the Ramani Fashion store

Each Pydantic model corresponds to one MongoDB collection.
Collection name is the lowercase of the class name.
Fields are snake_case in Python and camelCase in Mongo and on the wire.
"""
from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]

# bcrypt only looks at the first 72 bytes and refuses anything longer
MAX_PASSWORD_BYTES = 72


def _check_password_bytes(value: str) -> str:
    if len(value.encode()) > MAX_PASSWORD_BYTES:
        raise ValueError(f"must be at most {MAX_PASSWORD_BYTES} bytes")
    return value


Password = Annotated[str, Field(min_length=6), AfterValidator(_check_password_bytes)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RequestBody(CamelModel):
    """Base for request payloads: unknown fields are rejected."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class Product(CamelModel):
    name: str
    description: str = ""
    price: float = Field(..., ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    category: str
    subcategory: Optional[str] = None
    fabric: Optional[str] = None
    color: Optional[str] = None
    occasion: Optional[str] = None
    pattern: Optional[str] = None
    work_type: Optional[str] = None
    blouse_piece: bool = False
    saree_length: Optional[str] = None
    stock_quantity: int = Field(0, ge=0)
    in_stock: bool = True
    images: List[str] = []
    rating: float = Field(0, ge=0, le=5)
    review_count: int = Field(0, ge=0)
    is_new_arrival: bool = False
    is_bestseller: bool = False
    is_trending: bool = False
    specifications: Dict[str, str] = {}


class User(CamelModel):
    name: str = Field(..., description="Full name")
    email: EmailStr
    password_hash: str = Field(..., description="bcrypt hash")
    phone: str
    phone_verified: bool = False


class CartItem(CamelModel):
    product_id: str
    quantity: int = Field(..., ge=1)


class Cart(CamelModel):
    user_id: str
    items: List[CartItem] = []


class OrderItem(CamelModel):
    product_id: str
    name: str
    price: float = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    image: Optional[str] = None


class ShippingAddress(CamelModel):
    name: str
    phone: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    pincode: str
    landmark: Optional[str] = None


class Order(CamelModel):
    user_id: str
    order_number: str
    items: List[OrderItem]
    total_amount: float = Field(..., ge=0)
    shipping_address: Optional[ShippingAddress] = None
    payment_method: Literal["COD", "Card", "UPI"] = "COD"
    status: OrderStatus = "pending"


class Address(ShippingAddress):
    user_id: str
    is_default: bool = False


class AdminUser(CamelModel):
    name: Optional[str] = None
    email: EmailStr
    password_hash: str
    mobile: str
    otp: Optional[str] = None
    otp_expires_at: Optional[datetime] = None


class Otp(CamelModel):
    phone: str
    otp: str
    verified: bool = False
    expires_at: datetime


class ContactSubmission(CamelModel):
    name: str
    mobile: str
    email: EmailStr
    subject: str
    category: str
    message: str = ""
