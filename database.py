"""
MongoDB access helpers.

`db` is created once at import. Callers go through `get_db()` so the handle
can be swapped (tests point it at a mongomock database).
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from pydantic import BaseModel
from pymongo import ASCENDING, TEXT, MongoClient

import config

logger = logging.getLogger(__name__)

client = MongoClient(config.DATABASE_URL, serverSelectionTimeoutMS=5000)
db = client[config.DATABASE_NAME]


def get_db():
    return db


def utcnow() -> datetime:
    # Mongo hands datetimes back naive, so store them naive as well
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_dict(data: Union[BaseModel, dict]) -> dict:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    return dict(data)


def create_document(collection_name: str, data: Union[BaseModel, dict]) -> str:
    """Insert one document, stamping createdAt/updatedAt, and return its id."""
    doc = _as_dict(data)
    now = utcnow()
    doc.setdefault("createdAt", now)
    doc["updatedAt"] = now
    result = get_db()[collection_name].insert_one(doc)
    return str(result.inserted_id)


def get_documents(collection_name: str, filter_dict: Optional[dict] = None, limit: Optional[int] = None) -> List[dict]:
    cursor = get_db()[collection_name].find(filter_dict or {})
    if limit:
        cursor = cursor.limit(limit)
    return list(cursor)


def parse_object_id(value: str) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise HTTPException(status_code=400, detail="Invalid id")


def _serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc = dict(doc)
    _id = doc.pop("_id", None)
    if _id is not None:
        doc["id"] = str(_id)
    return {k: _serialize_value(v) for k, v in doc.items()}


def ensure_indexes():
    database = get_db()
    try:
        database["user"].create_index([("email", ASCENDING)], unique=True)
        database["adminuser"].create_index([("email", ASCENDING)], unique=True)
        database["cart"].create_index([("userId", ASCENDING)], unique=True)
        database["wishlist"].create_index([("userId", ASCENDING)], unique=True)
        database["order"].create_index([("userId", ASCENDING), ("createdAt", ASCENDING)])
        database["product"].create_index([("name", TEXT), ("description", TEXT)], name="product_text")
    except Exception as exc:
        logger.warning("Unable to ensure indexes: %s", exc)
