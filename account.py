from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import EmailStr, Field

from database import create_document, get_db, get_documents, parse_object_id, serialize_doc, utcnow
from schemas import Address, ContactSubmission, RequestBody
from security import Principal, require_admin, require_customer

router = APIRouter(prefix="/api", tags=["account"])


class AddressBody(RequestBody):
    name: str
    phone: str
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    pincode: str
    landmark: Optional[str] = None
    is_default: bool = False


class AddressUpdateBody(RequestBody):
    name: Optional[str] = None
    phone: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None
    landmark: Optional[str] = None
    is_default: Optional[bool] = None


class ContactBody(RequestBody):
    name: str = Field(..., min_length=1)
    mobile: str = Field(..., min_length=1)
    email: EmailStr
    subject: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    message: str = ""


def clear_default_address(db, user_id: str):
    db["address"].update_many({"userId": user_id}, {"$set": {"isDefault": False}})


# ----------------------- Addresses -----------------------
@router.get("/addresses")
def list_addresses(principal: Principal = Depends(require_customer)):
    return [serialize_doc(d) for d in get_documents("address", {"userId": principal.id})]


@router.post("/addresses", status_code=201)
def create_address(body: AddressBody, principal: Principal = Depends(require_customer)):
    db = get_db()
    if body.is_default:
        clear_default_address(db, principal.id)
    address = Address(user_id=principal.id, **body.model_dump())
    address_id = create_document("address", address)
    return serialize_doc(db["address"].find_one({"_id": parse_object_id(address_id)}))


@router.put("/addresses/{address_id}")
def update_address(address_id: str, body: AddressUpdateBody, principal: Principal = Depends(require_customer)):
    db = get_db()
    selector = {"_id": parse_object_id(address_id), "userId": principal.id}
    if not db["address"].find_one(selector):
        raise HTTPException(status_code=404, detail="Address not found")

    update = body.model_dump(exclude_none=True, by_alias=True)
    if update.get("isDefault"):
        clear_default_address(db, principal.id)
    update["updatedAt"] = utcnow()
    db["address"].update_one(selector, {"$set": update})
    return serialize_doc(db["address"].find_one(selector))


@router.delete("/addresses/{address_id}")
def delete_address(address_id: str, principal: Principal = Depends(require_customer)):
    res = get_db()["address"].delete_one({"_id": parse_object_id(address_id), "userId": principal.id})
    if res.deleted_count == 0:
        raise HTTPException(status_code=404, detail="Address not found")
    return {"message": "Address deleted successfully"}


# ----------------------- Contact -----------------------
@router.post("/contact", status_code=201)
def submit_contact(body: ContactBody):
    submission_id = create_document("contactsubmission", ContactSubmission(**body.model_dump()))
    doc = get_db()["contactsubmission"].find_one({"_id": parse_object_id(submission_id)})
    return {"message": "Contact form submitted successfully", "submission": serialize_doc(doc)}


@router.get("/admin/contact")
def list_contact_submissions(_: Principal = Depends(require_admin)):
    docs = get_db()["contactsubmission"].find({}).sort("createdAt", -1)
    return [serialize_doc(d) for d in docs]
