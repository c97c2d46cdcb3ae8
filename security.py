"""
Token and password handling for both principal types.

Customers and admins share one token format (`id`, `email`, `role` claims)
but each role signs with its own secret. Customer tokens carry no `exp`;
admin tokens expire after ADMIN_TOKEN_TTL_HOURS.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

import config

logger = logging.getLogger(__name__)

CUSTOMER = "customer"
ADMIN = "admin"

ROLE_SECRETS = {
    CUSTOMER: config.JWT_SECRET,
    ADMIN: config.ADMIN_JWT_SECRET,
}

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    id: str
    email: str
    role: str


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode(), salt).decode()


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        return False


def issue_token(principal: Principal, now: Optional[datetime] = None) -> str:
    payload = {"id": principal.id, "email": principal.email, "role": principal.role}
    if principal.role == ADMIN:
        now = now or datetime.now(timezone.utc)
        payload["exp"] = now + timedelta(hours=config.ADMIN_TOKEN_TTL_HOURS)
    return jwt.encode(payload, ROLE_SECRETS[principal.role], algorithm=config.JWT_ALGO)


def decode_token(token: str) -> Principal:
    try:
        unverified = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=403, detail="Invalid token")

    role = unverified.get("role")
    secret = ROLE_SECRETS.get(role) if isinstance(role, str) else None
    if secret is None:
        raise HTTPException(status_code=403, detail="Invalid token")

    try:
        claims = jwt.decode(token, secret, algorithms=[config.JWT_ALGO])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=403, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=403, detail="Invalid token")

    if not claims.get("id"):
        raise HTTPException(status_code=403, detail="Invalid token payload")
    return Principal(id=claims["id"], email=claims.get("email", ""), role=claims["role"])


def get_principal(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Principal:
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Authentication required")
    return decode_token(credentials.credentials)


def get_optional_principal(credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)) -> Optional[Principal]:
    if credentials is None or not credentials.credentials:
        return None
    return decode_token(credentials.credentials)


def require_role(role: str):
    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.role != role:
            logger.info("Rejected %s token on %s route", principal.role, role)
            detail = "Admin access required" if role == ADMIN else "Customer access required"
            raise HTTPException(status_code=403, detail=detail)
        return principal

    return dependency


require_customer = require_role(CUSTOMER)
require_admin = require_role(ADMIN)
