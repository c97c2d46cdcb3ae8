"""
Guest (signed-out) cart and wishlist, and the merge into the account at login.

Guest state lives in a `GuestSessionStore`, a key/value store the client
owns (browser storage, a file, memory). The merge is best effort: every
entry is tried once, failures are logged and skipped, and the local copies
are cleared at the end whatever the outcome.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from storefront_client import StorefrontError

logger = logging.getLogger(__name__)

CART_KEY = "cart"
WISHLIST_KEY = "wishlist"


class GuestSessionStore:
    def get(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError

    def clear(self, key: str) -> None:
        raise NotImplementedError


class InMemoryGuestSessionStore(GuestSessionStore):
    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data = dict(initial or {})

    def get(self, key):
        return self._data.get(key)

    def set(self, key, value):
        self._data[key] = value

    def clear(self, key):
        self._data.pop(key, None)


class GuestCart:
    """Cart and wishlist operations with the same semantics as the server."""

    def __init__(self, store: GuestSessionStore):
        self.store = store

    def cart_items(self) -> List[dict]:
        return list(self.store.get(CART_KEY) or [])

    def wishlist_items(self) -> List[str]:
        return list(self.store.get(WISHLIST_KEY) or [])

    def add_to_cart(self, product_id: str, quantity: int = 1) -> List[dict]:
        if quantity < 1:
            raise ValueError("quantity must be a positive integer")
        items = self.cart_items()
        for item in items:
            if item["productId"] == product_id:
                item["quantity"] += quantity
                break
        else:
            items.append({"productId": product_id, "quantity": quantity})
        self.store.set(CART_KEY, items)
        return items

    def set_quantity(self, product_id: str, quantity: int) -> List[dict]:
        if quantity < 1:
            raise ValueError("quantity must be a positive integer")
        items = self.cart_items()
        for item in items:
            if item["productId"] == product_id:
                item["quantity"] = quantity
        self.store.set(CART_KEY, items)
        return items

    def remove_from_cart(self, product_id: str) -> List[dict]:
        items = [item for item in self.cart_items() if item["productId"] != product_id]
        self.store.set(CART_KEY, items)
        return items

    def add_to_wishlist(self, product_id: str) -> List[str]:
        products = self.wishlist_items()
        if product_id not in products:
            products.append(product_id)
        self.store.set(WISHLIST_KEY, products)
        return products

    def remove_from_wishlist(self, product_id: str) -> List[str]:
        products = [pid for pid in self.wishlist_items() if pid != product_id]
        self.store.set(WISHLIST_KEY, products)
        return products


def migrate_guest_data(client, store: GuestSessionStore) -> dict:
    """Push guest wishlist then cart into the signed-in account.

    `client` is a StorefrontClient holding the fresh token.
    """
    guest = GuestCart(store)
    summary = {"wishlist": 0, "cart": 0, "failed": 0}

    for product_id in guest.wishlist_items():
        try:
            client.add_to_wishlist(product_id)
            summary["wishlist"] += 1
        except (StorefrontError, requests.RequestException) as exc:
            summary["failed"] += 1
            logger.warning("Skipping guest wishlist item %s: %s", product_id, exc)

    for item in guest.cart_items():
        try:
            client.add_to_cart(item["productId"], item["quantity"])
            summary["cart"] += 1
        except (StorefrontError, requests.RequestException) as exc:
            summary["failed"] += 1
            logger.warning("Skipping guest cart item %s: %s", item["productId"], exc)

    store.clear(WISHLIST_KEY)
    store.clear(CART_KEY)
    return summary
