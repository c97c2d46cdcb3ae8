"""
Admin back-office routes.

Login is two server round trips: /auth/start checks the password and parks
a short-lived OTP on the admin record, /auth/verify trades that OTP for an
admin token. Both steps answer failures with the same generic message.
"""
import logging
from datetime import timedelta
from io import BytesIO
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import StreamingResponse
from pydantic import EmailStr, Field, ValidationError
from pymongo.errors import DuplicateKeyError

import config
from analytics import build_report
from catalog import serialize_product
from database import create_document, get_db, parse_object_id, serialize_doc, utcnow
from otp import OtpSender, get_otp_sender, mask_mobile
from schemas import AdminUser, OrderStatus, Password, Product, RequestBody
from security import ADMIN, Principal, get_optional_principal, hash_password, issue_token, require_admin, verify_password
from spreadsheet import SpreadsheetError, read_products, write_products

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


# ----------------------- Models -----------------------
class AdminSignupBody(RequestBody):
    name: Optional[str] = None
    email: EmailStr
    password: Password
    mobile: str = Field(..., min_length=10, max_length=15)


class AdminStartBody(RequestBody):
    email: EmailStr
    password: str


class AdminVerifyBody(RequestBody):
    email: EmailStr
    otp: str


class ProductCreateBody(Product):
    model_config = RequestBody.model_config


class ProductUpdateBody(RequestBody):
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    original_price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = None
    subcategory: Optional[str] = None
    fabric: Optional[str] = None
    color: Optional[str] = None
    occasion: Optional[str] = None
    pattern: Optional[str] = None
    work_type: Optional[str] = None
    blouse_piece: Optional[bool] = None
    saree_length: Optional[str] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    in_stock: Optional[bool] = None
    images: Optional[List[str]] = None
    rating: Optional[float] = Field(None, ge=0, le=5)
    review_count: Optional[int] = Field(None, ge=0)
    is_new_arrival: Optional[bool] = None
    is_bestseller: Optional[bool] = None
    is_trending: Optional[bool] = None
    specifications: Optional[Dict[str, str]] = None


class InventoryBody(RequestBody):
    stock_quantity: int = Field(..., ge=0)
    in_stock: bool


class OrderStatusBody(RequestBody):
    status: OrderStatus


def public_admin(admin: dict) -> dict:
    out = serialize_doc(admin)
    for key in ("passwordHash", "otp", "otpExpiresAt"):
        out.pop(key, None)
    return out


# ----------------------- Auth -----------------------
@router.post("/auth/signup", status_code=201)
def admin_signup(body: AdminSignupBody, principal: Optional[Principal] = Depends(get_optional_principal)):
    db = get_db()
    # the first admin bootstraps the back-office, later ones need an admin token
    if db["adminuser"].count_documents({}) > 0 and (principal is None or principal.role != ADMIN):
        raise HTTPException(status_code=403, detail="Admin access required")
    if db["adminuser"].find_one({"email": body.email}):
        raise HTTPException(status_code=400, detail="Email already registered")

    admin = AdminUser(name=body.name, email=body.email, password_hash=hash_password(body.password), mobile=body.mobile)
    try:
        admin_id = create_document("adminuser", admin)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email already registered")
    logger.info("Admin account %s created", admin_id)
    return public_admin(db["adminuser"].find_one({"_id": parse_object_id(admin_id)}))


@router.post("/auth/start")
def admin_login_start(body: AdminStartBody, sender: OtpSender = Depends(get_otp_sender)):
    db = get_db()
    admin = db["adminuser"].find_one({"email": body.email})
    if not admin or not verify_password(body.password, admin.get("passwordHash")):
        logger.warning("Failed admin password step for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    code = sender.generate()
    expires_at = utcnow() + timedelta(minutes=config.ADMIN_OTP_TTL_MINUTES)
    db["adminuser"].update_one({"_id": admin["_id"]}, {"$set": {"otp": code, "otpExpiresAt": expires_at}})
    sender.send(admin["mobile"], code)

    response = {"message": "OTP sent", "maskedMobile": mask_mobile(admin["mobile"])}
    if config.EXPOSE_TEST_OTP:
        response["otp"] = code
    return response


@router.post("/auth/verify")
def admin_login_verify(body: AdminVerifyBody):
    db = get_db()
    admin = db["adminuser"].find_one({"email": body.email})
    if (
        not admin
        or not admin.get("otp")
        or not admin.get("otpExpiresAt")
        or admin["otpExpiresAt"] <= utcnow()
        or admin["otp"] != body.otp
    ):
        logger.warning("Failed admin OTP step for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid or expired OTP")

    db["adminuser"].update_one({"_id": admin["_id"]}, {"$unset": {"otp": "", "otpExpiresAt": ""}})
    admin_id = str(admin["_id"])
    token = issue_token(Principal(id=admin_id, email=admin["email"], role=ADMIN))
    logger.info("Admin %s logged in", admin_id)
    return {"token": token, "admin": public_admin(admin)}


@router.get("/verify")
def admin_verify(principal: Principal = Depends(require_admin)):
    admin = get_db()["adminuser"].find_one({"_id": parse_object_id(principal.id)})
    if not admin:
        raise HTTPException(status_code=404, detail="Admin not found")
    return {"valid": True, "admin": public_admin(admin)}


# ----------------------- Products / inventory -----------------------
@router.post("/products", status_code=201)
def create_product(body: ProductCreateBody, _: Principal = Depends(require_admin)):
    product_id = create_document("product", body)
    logger.info("Product %s created", product_id)
    return serialize_product(get_db()["product"].find_one({"_id": parse_object_id(product_id)}))


def _update_product(product_id: str, update: dict) -> dict:
    db = get_db()
    oid = parse_object_id(product_id)
    update["updatedAt"] = utcnow()
    res = db["product"].update_one({"_id": oid}, {"$set": update})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_product(db["product"].find_one({"_id": oid}))


@router.patch("/products/{product_id}")
def update_product(product_id: str, body: ProductUpdateBody, _: Principal = Depends(require_admin)):
    product = _update_product(product_id, body.model_dump(exclude_none=True, by_alias=True))
    logger.info("Product %s updated", product_id)
    return product


@router.delete("/products/{product_id}")
def delete_product(product_id: str, _: Principal = Depends(require_admin)):
    res = get_db()["product"].delete_one({"_id": parse_object_id(product_id)})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Product not found")
    logger.info("Product %s deleted", product_id)
    return {"message": "Product deleted successfully"}


@router.get("/inventory")
def list_inventory(_: Principal = Depends(require_admin)):
    docs = get_db()["product"].find({}).sort("stockQuantity", 1)
    return [serialize_product(d) for d in docs]


@router.patch("/inventory/{product_id}")
def update_inventory(product_id: str, body: InventoryBody, _: Principal = Depends(require_admin)):
    return _update_product(product_id, body.model_dump(by_alias=True))


@router.post("/products/import")
async def import_products(file: UploadFile = File(...), _: Principal = Depends(require_admin)):
    content = await file.read()
    try:
        rows = read_products(BytesIO(content))
    except SpreadsheetError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    imported, errors = 0, []
    for row_number, fields, error in rows:
        if error:
            errors.append({"row": row_number, "error": error})
            continue
        try:
            product = Product.model_validate(fields)
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(p) for p in first["loc"])
            errors.append({"row": row_number, "error": f"{location}: {first['msg']}"})
            continue
        create_document("product", product)
        imported += 1

    logger.info("Imported %d products (%d rows rejected)", imported, len(errors))
    return {"imported": imported, "errors": errors}


@router.get("/products/export")
def export_products(_: Principal = Depends(require_admin)):
    products = list(get_db()["product"].find({}).sort("createdAt", 1))
    payload = write_products(products)
    return StreamingResponse(
        BytesIO(payload),
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": 'attachment; filename="products.xlsx"'},
    )


# ----------------------- Customers / orders / analytics -----------------------
@router.get("/customers")
def list_customers(_: Principal = Depends(require_admin)):
    db = get_db()
    order_stats = {
        row["_id"]: row
        for row in db["order"].aggregate(
            [{"$group": {"_id": "$userId", "totalOrders": {"$sum": 1}, "totalSpent": {"$sum": "$totalAmount"}}}]
        )
    }
    wishlists = {w["userId"]: len(w.get("products", [])) for w in db["wishlist"].find({})}

    customers = []
    for user in db["user"].find({}).sort("createdAt", -1):
        user_id = str(user["_id"])
        stats = order_stats.get(user_id, {})
        out = serialize_doc(user)
        out.pop("passwordHash", None)
        out["totalOrders"] = stats.get("totalOrders", 0)
        out["totalSpent"] = stats.get("totalSpent", 0)
        out["wishlistCount"] = wishlists.get(user_id, 0)
        customers.append(out)
    return customers


@router.get("/orders")
def list_all_orders(_: Principal = Depends(require_admin)):
    db = get_db()
    orders = list(db["order"].find({}).sort("createdAt", -1))
    user_ids = {o["userId"] for o in orders if o.get("userId")}
    users = {
        str(u["_id"]): {"id": str(u["_id"]), "name": u.get("name"), "email": u.get("email")}
        for u in db["user"].find({"_id": {"$in": [parse_object_id(uid) for uid in user_ids]}})
    }
    out = []
    for order in orders:
        doc = serialize_doc(order)
        doc["customer"] = users.get(order.get("userId"))
        out.append(doc)
    return out


@router.patch("/orders/{order_id}/status")
def update_order_status(order_id: str, body: OrderStatusBody, _: Principal = Depends(require_admin)):
    db = get_db()
    oid = parse_object_id(order_id)
    res = db["order"].update_one({"_id": oid}, {"$set": {"status": body.status, "updatedAt": utcnow()}})
    if res.matched_count == 0:
        raise HTTPException(status_code=404, detail="Order not found")
    logger.info("Order %s moved to %s", order_id, body.status)
    return serialize_doc(db["order"].find_one({"_id": oid}))


@router.get("/analytics")
def analytics(_: Principal = Depends(require_admin)):
    return build_report(get_db())
