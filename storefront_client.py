from typing import Optional

import requests


class StorefrontError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class StorefrontClient:
    """Thin JSON client for the storefront API.

    `session` defaults to a `requests.Session`; anything with the same
    request/get/post signature (e.g. FastAPI's TestClient) works too.
    """

    def __init__(self, base_url: str = "", token: Optional[str] = None, session=None, timeout: float = 10):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    def _headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, json=None):
        kwargs = {"json": json, "headers": self._headers()}
        if isinstance(self.session, requests.Session):
            kwargs["timeout"] = self.timeout
        response = self.session.request(method, self.base_url + path, **kwargs)
        if response.status_code >= 400:
            try:
                message = response.json().get("error", response.text)
            except ValueError:
                message = response.text
            raise StorefrontError(response.status_code, message)
        return response.json()

    def login(self, email: str, password: str) -> dict:
        data = self._request("POST", "/api/auth/login", {"email": email, "password": password})
        self.token = data["token"]
        return data

    def register(self, name: str, email: str, password: str, phone: str) -> dict:
        data = self._request(
            "POST",
            "/api/auth/register",
            {"name": name, "email": email, "password": password, "phone": phone},
        )
        self.token = data["token"]
        return data

    def get_cart(self) -> dict:
        return self._request("GET", "/api/cart")

    def add_to_cart(self, product_id: str, quantity: int = 1) -> dict:
        return self._request("POST", "/api/cart", {"productId": product_id, "quantity": quantity})

    def get_wishlist(self) -> dict:
        return self._request("GET", "/api/wishlist")

    def add_to_wishlist(self, product_id: str) -> dict:
        return self._request("POST", f"/api/wishlist/{product_id}")
