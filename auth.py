import logging
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import EmailStr, Field
from pymongo.errors import DuplicateKeyError

import config
from database import create_document, get_db, parse_object_id, serialize_doc, utcnow
from otp import OtpSender, get_otp_sender
from schemas import Otp, Password, RequestBody, User
from security import CUSTOMER, Principal, hash_password, issue_token, require_customer, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


# ----------------------- Models -----------------------
class SendOtpBody(RequestBody):
    phone: str = Field(..., min_length=10, max_length=15)


class VerifyOtpBody(RequestBody):
    phone: str
    otp: str


class RegisterBody(RequestBody):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: Password
    phone: str


class LoginBody(RequestBody):
    email: EmailStr
    password: str


def public_user(user: dict) -> dict:
    out = serialize_doc(user)
    out.pop("passwordHash", None)
    return out


def _token_response(user: dict) -> dict:
    user_id = str(user["_id"])
    token = issue_token(Principal(id=user_id, email=user["email"], role=CUSTOMER))
    return {"token": token, "user": {"id": user_id, "name": user["name"], "email": user["email"]}}


def find_live_otp(db, phone: str):
    return db["otp"].find_one({"phone": phone, "expiresAt": {"$gt": utcnow()}})


# ----------------------- OTP -----------------------
@router.post("/send-otp")
def send_otp(body: SendOtpBody, sender: OtpSender = Depends(get_otp_sender)):
    db = get_db()
    code = sender.generate()
    db["otp"].delete_many({"phone": body.phone})
    record = Otp(
        phone=body.phone,
        otp=code,
        verified=False,
        expires_at=utcnow() + timedelta(minutes=config.CUSTOMER_OTP_TTL_MINUTES),
    )
    create_document("otp", record)
    sender.send(body.phone, code)

    response = {"message": "OTP sent successfully"}
    if config.EXPOSE_TEST_OTP:
        response["otp"] = code
    return response


@router.post("/verify-otp")
def verify_otp(body: VerifyOtpBody):
    db = get_db()
    record = find_live_otp(db, body.phone)
    if not record or record.get("otp") != body.otp:
        logger.info("OTP verification failed for phone ending %s", body.phone[-4:])
        raise HTTPException(status_code=400, detail="Invalid or expired OTP")
    db["otp"].update_one({"_id": record["_id"]}, {"$set": {"verified": True, "updatedAt": utcnow()}})
    return {"message": "OTP verified successfully", "verified": True}


# ----------------------- Register / Login -----------------------
@router.post("/register", status_code=201)
def register(body: RegisterBody):
    db = get_db()
    record = find_live_otp(db, body.phone)
    if not record or not record.get("verified"):
        raise HTTPException(status_code=400, detail="Phone number not verified")
    if db["user"].find_one({"email": body.email}):
        raise HTTPException(status_code=400, detail="Email already registered")

    user = User(
        name=body.name,
        email=body.email,
        password_hash=hash_password(body.password),
        phone=body.phone,
        phone_verified=True,
    )
    try:
        user_id = create_document("user", user)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Email already registered")
    db["otp"].delete_one({"_id": record["_id"]})

    logger.info("Registered user %s", user_id)
    return _token_response(db["user"].find_one({"_id": parse_object_id(user_id)}))


@router.post("/login")
def login(body: LoginBody):
    user = get_db()["user"].find_one({"email": body.email})
    if not user or not verify_password(body.password, user.get("passwordHash")):
        logger.info("Failed login for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _token_response(user)


@router.get("/me")
def me(principal: Principal = Depends(require_customer)):
    user = get_db()["user"].find_one({"_id": parse_object_id(principal.id)})
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return public_user(user)
