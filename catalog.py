"""
Catalog queries: filter/sort/page translation for the product listing.

Sorting by discount needs a computed field, so that path goes through an
aggregation pipeline instead of a plain find.
"""
import math
from dataclasses import dataclass
from typing import Optional

from fastapi import APIRouter, HTTPException, Query

import config
from database import get_db, parse_object_id, serialize_doc

router = APIRouter(prefix="/api", tags=["catalog"])

FACET_FIELDS = ("category", "fabric", "color", "occasion")


@dataclass
class ProductFilters:
    category: Optional[str] = None
    fabric: Optional[str] = None
    color: Optional[str] = None
    occasion: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    in_stock: Optional[bool] = None
    is_new_arrival: Optional[bool] = None
    is_bestseller: Optional[bool] = None
    is_trending: Optional[bool] = None
    search: Optional[str] = None


def _split(value: str) -> list:
    return [part.strip() for part in value.split(",") if part.strip()]


def build_product_query(filters: ProductFilters) -> dict:
    query = {}
    for field in FACET_FIELDS:
        raw = getattr(filters, field)
        if not raw:
            continue
        values = _split(raw)
        if len(values) > 1:
            query[field] = {"$in": values}
        elif values:
            query[field] = values[0]

    flags = {
        "inStock": filters.in_stock,
        "isNewArrival": filters.is_new_arrival,
        "isBestseller": filters.is_bestseller,
        "isTrending": filters.is_trending,
    }
    for field, wanted in flags.items():
        # only "true" narrows the listing
        if wanted:
            query[field] = True

    if filters.min_price is not None or filters.max_price is not None:
        query["price"] = {}
        if filters.min_price is not None:
            query["price"]["$gte"] = filters.min_price
        if filters.max_price is not None:
            query["price"]["$lte"] = filters.max_price

    if filters.search:
        query["$text"] = {"$search": filters.search}
    return query


def discount_percent(product: dict) -> float:
    original = product.get("originalPrice") or 0
    if original <= 0:
        return 0
    return (original - product.get("price", 0)) / original * 100


def serialize_product(doc: dict) -> dict:
    out = serialize_doc(doc)
    # halves round up, so 12.5 shows as 13
    out["discountPercent"] = math.floor(discount_percent(doc) + 0.5)
    return out


def discount_pipeline(query: dict, direction: int, skip: int, limit: int) -> list:
    original = {"$ifNull": ["$originalPrice", 0]}
    return [
        {"$match": query},
        {
            "$addFields": {
                "discountPercent": {
                    "$cond": [
                        {"$gt": [original, 0]},
                        {"$multiply": [{"$divide": [{"$subtract": [original, "$price"]}, original]}, 100]},
                        0,
                    ]
                }
            }
        },
        {"$sort": {"discountPercent": direction, "_id": 1}},
        {"$skip": skip},
        {"$limit": limit},
    ]


def list_products(db, filters: ProductFilters, sort: str = "createdAt", order: str = "desc", page: int = 1, limit: int = config.DEFAULT_PAGE_SIZE) -> dict:
    query = build_product_query(filters)
    direction = 1 if order == "asc" else -1
    skip = (page - 1) * limit

    if sort == "discount":
        docs = db["product"].aggregate(discount_pipeline(query, direction, skip, limit))
    else:
        docs = db["product"].find(query).sort([(sort, direction), ("_id", 1)]).skip(skip).limit(limit)

    total = db["product"].count_documents(query)
    return {
        "products": [serialize_product(d) for d in docs],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit),
        },
    }


def facet_values(db) -> dict:
    out = {}
    for field, key in zip(FACET_FIELDS, ("categories", "fabrics", "colors", "occasions")):
        out[key] = sorted(v for v in db["product"].distinct(field) if v)
    return out


# ----------------------- Routes -----------------------
@router.get("/products")
def get_products(
    category: Optional[str] = None,
    fabric: Optional[str] = None,
    color: Optional[str] = None,
    occasion: Optional[str] = None,
    minPrice: Optional[float] = None,
    maxPrice: Optional[float] = None,
    inStock: Optional[bool] = None,
    isNewArrival: Optional[bool] = None,
    isBestseller: Optional[bool] = None,
    isTrending: Optional[bool] = None,
    search: Optional[str] = None,
    sort: str = Query("createdAt", pattern="^[A-Za-z][A-Za-z0-9]*$"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1),
):
    filters = ProductFilters(
        category=category,
        fabric=fabric,
        color=color,
        occasion=occasion,
        min_price=minPrice,
        max_price=maxPrice,
        in_stock=inStock,
        is_new_arrival=isNewArrival,
        is_bestseller=isBestseller,
        is_trending=isTrending,
        search=search,
    )
    return list_products(get_db(), filters, sort=sort, order=order, page=page, limit=limit)


@router.get("/products/{product_id}")
def get_product(product_id: str):
    item = get_db()["product"].find_one({"_id": parse_object_id(product_id)})
    if not item:
        raise HTTPException(status_code=404, detail="Product not found")
    return serialize_product(item)


@router.get("/filters")
def get_filters():
    return facet_values(get_db())
