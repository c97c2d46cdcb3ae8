import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

import config
from account import router as account_router
from admin import router as admin_router
from auth import router as auth_router
from cart import router as cart_router
from catalog import router as catalog_router
from database import create_document, ensure_indexes, get_db
from orders import router as orders_router
from schemas import AdminUser, Product
from security import hash_password

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="Ramani Fashion API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog_router)
app.include_router(auth_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(account_router)
app.include_router(admin_router)


# ----------------------- Errors -----------------------
@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        message = f"{location}: {first.get('msg')}" if location else first.get("msg")
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.on_event("startup")
def on_startup():
    ensure_indexes()


# ----------------------- Health -----------------------
@app.get("/")
def root():
    return {"message": "Ramani Fashion API running"}


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": "✅ Set" if os.getenv("DATABASE_URL") else "❌ Not Set",
        "database_name": "✅ Set" if os.getenv("DATABASE_NAME") else "❌ Not Set",
        "connection_status": "Not Connected",
        "collections": [],
    }
    try:
        db = get_db()
        if db is not None:
            response["collections"] = db.list_collection_names()[:10]
            response["database"] = "✅ Connected & Working"
            response["connection_status"] = "Connected"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:80]}"
    return response


# ----------------------- Seed Demo Data -----------------------
DEMO_PRODUCTS = [
    {
        "name": "Kanjivaram Silk Saree",
        "description": "Handwoven pure silk with zari border.",
        "price": 4599,
        "originalPrice": 6999,
        "category": "Silk",
        "fabric": "Pure Silk",
        "color": "Red",
        "occasion": "Wedding",
        "stockQuantity": 12,
        "images": ["https://images.unsplash.com/photo-1610030469983-98e550d6193c"],
        "rating": 4.7,
        "reviewCount": 38,
        "isBestseller": True,
    },
    {
        "name": "Banarasi Georgette Saree",
        "description": "Lightweight georgette with Banarasi motifs.",
        "price": 2899,
        "originalPrice": 3499,
        "category": "Banarasi",
        "fabric": "Georgette",
        "color": "Pink",
        "occasion": "Festive",
        "stockQuantity": 20,
        "images": ["https://images.unsplash.com/photo-1583391733956-6c78276477e2"],
        "rating": 4.4,
        "reviewCount": 21,
        "isNewArrival": True,
    },
    {
        "name": "Chanderi Cotton Saree",
        "description": "Breathable cotton for everyday wear.",
        "price": 1299,
        "category": "Cotton",
        "fabric": "Cotton",
        "color": "Yellow",
        "occasion": "Casual",
        "stockQuantity": 6,
        "images": ["https://images.unsplash.com/photo-1617627143750-d86bc21e42bb"],
        "rating": 4.1,
        "reviewCount": 12,
        "isTrending": True,
    },
    {
        "name": "Printed Chiffon Saree",
        "description": "Floral print chiffon with satin border.",
        "price": 999,
        "originalPrice": 1999,
        "category": "Chiffon",
        "fabric": "Chiffon",
        "color": "Blue",
        "occasion": "Party",
        "stockQuantity": 0,
        "inStock": False,
        "images": ["https://images.unsplash.com/photo-1594463750939-ebb28c3f7f75"],
        "rating": 3.9,
        "reviewCount": 7,
    },
]


@app.post("/api/seed")
def seed():
    db = get_db()
    if db["product"].count_documents({}) > 0:
        return {"seeded": False, "message": "Products already exist"}
    for p in DEMO_PRODUCTS:
        create_document("product", Product(**p))
    if db["adminuser"].count_documents({}) == 0:
        admin = AdminUser(
            name="Admin",
            email=config.ADMIN_EMAIL,
            password_hash=hash_password(config.ADMIN_PASSWORD),
            mobile=config.ADMIN_MOBILE,
        )
        create_document("adminuser", admin)
    logger.info("Seeded %d demo products", len(DEMO_PRODUCTS))
    return {"seeded": True, "products": db["product"].count_documents({})}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
