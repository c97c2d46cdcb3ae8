import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ["EXPOSE_TEST_OTP"] = "true"

import mongomock
import pytest
from fastapi.testclient import TestClient

import database
from database import create_document
from main import app
from schemas import Product

TEST_OTP = "123456"


@pytest.fixture
def db(monkeypatch):
    mock_db = mongomock.MongoClient()["ramani_test"]
    monkeypatch.setattr(database, "db", mock_db)
    return mock_db


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def make_product(**overrides):
    fields = {
        "name": "Test Saree",
        "description": "A saree for tests",
        "price": 1500,
        "category": "Silk",
        "fabric": "Silk",
        "color": "Red",
        "occasion": "Wedding",
        "stockQuantity": 25,
    }
    fields.update(overrides)
    return create_document("product", Product(**fields))


def register_customer(client, email="asha@example.com", phone="9876500001", name="Asha", password="secret123"):
    assert client.post("/api/auth/send-otp", json={"phone": phone}).status_code == 200
    assert client.post("/api/auth/verify-otp", json={"phone": phone, "otp": TEST_OTP}).status_code == 200
    res = client.post(
        "/api/auth/register",
        json={"name": name, "email": email, "password": password, "phone": phone},
    )
    assert res.status_code == 201, res.json()
    return res.json()


def admin_login(client, email="owner@ramani.com", password="adminpass", mobile="9000012345"):
    res = client.post("/api/admin/auth/signup", json={"email": email, "password": password, "mobile": mobile})
    assert res.status_code == 201, res.json()
    start = client.post("/api/admin/auth/start", json={"email": email, "password": password})
    assert start.status_code == 200
    verify = client.post("/api/admin/auth/verify", json={"email": email, "otp": TEST_OTP})
    assert verify.status_code == 200
    return verify.json()["token"]


@pytest.fixture
def customer(client):
    data = register_customer(client)
    return {"token": data["token"], "id": data["user"]["id"], "headers": bearer(data["token"])}


@pytest.fixture
def admin_headers(client):
    return bearer(admin_login(client))
