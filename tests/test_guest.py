import pytest
from bson import ObjectId

from guest import CART_KEY, WISHLIST_KEY, GuestCart, InMemoryGuestSessionStore, migrate_guest_data
from storefront_client import StorefrontClient, StorefrontError
from tests.conftest import make_product


def test_guest_cart_increments_duplicates():
    guest = GuestCart(InMemoryGuestSessionStore())
    guest.add_to_cart("p1", 2)
    guest.add_to_cart("p1", 1)
    guest.add_to_cart("p2")
    assert guest.cart_items() == [{"productId": "p1", "quantity": 3}, {"productId": "p2", "quantity": 1}]


def test_guest_cart_rejects_non_positive_quantity():
    guest = GuestCart(InMemoryGuestSessionStore())
    with pytest.raises(ValueError):
        guest.add_to_cart("p1", 0)


def test_guest_cart_update_and_remove():
    guest = GuestCart(InMemoryGuestSessionStore())
    guest.add_to_cart("p1")
    guest.add_to_cart("p2")
    guest.set_quantity("p1", 4)
    guest.remove_from_cart("p2")
    assert guest.cart_items() == [{"productId": "p1", "quantity": 4}]


def test_guest_wishlist_is_a_set():
    guest = GuestCart(InMemoryGuestSessionStore())
    guest.add_to_wishlist("p2")
    guest.add_to_wishlist("p2")
    assert guest.wishlist_items() == ["p2"]
    guest.remove_from_wishlist("p2")
    assert guest.wishlist_items() == []


def test_merge_moves_guest_state_into_account(client, customer):
    p1 = make_product(name="p1")
    p2 = make_product(name="p2")
    store = InMemoryGuestSessionStore({CART_KEY: [{"productId": p1, "quantity": 2}], WISHLIST_KEY: [p2]})
    api = StorefrontClient(token=customer["token"], session=client)

    summary = migrate_guest_data(api, store)
    assert summary == {"wishlist": 1, "cart": 1, "failed": 0}
    assert store.get(CART_KEY) is None
    assert store.get(WISHLIST_KEY) is None

    # a second run has nothing left to push
    assert migrate_guest_data(api, store) == {"wishlist": 0, "cart": 0, "failed": 0}

    cart = api.get_cart()
    assert [(i["productId"], i["quantity"]) for i in cart["items"]] == [(p1, 2)]
    assert api.get_wishlist()["productIds"] == [p2]


def test_merge_skips_failures(client, customer):
    good = make_product()
    missing = str(ObjectId())
    store = InMemoryGuestSessionStore(
        {
            CART_KEY: [{"productId": missing, "quantity": 1}, {"productId": good, "quantity": 3}],
            WISHLIST_KEY: ["not-an-id", good],
        }
    )
    api = StorefrontClient(token=customer["token"], session=client)

    summary = migrate_guest_data(api, store)
    assert summary == {"wishlist": 1, "cart": 1, "failed": 2}
    assert store.get(CART_KEY) is None
    assert [(i["productId"], i["quantity"]) for i in api.get_cart()["items"]] == [(good, 3)]


def test_client_raises_with_error_message(client):
    api = StorefrontClient(session=client)
    with pytest.raises(StorefrontError) as info:
        api.get_cart()
    assert info.value.status_code == 401
    assert info.value.message == "Authentication required"


def test_client_login_keeps_token(client, customer):
    api = StorefrontClient(session=client)
    api.login("asha@example.com", "secret123")
    assert api.get_cart() == {"items": []}


class RecordingClient:
    def __init__(self):
        self.calls = []

    def add_to_wishlist(self, product_id):
        self.calls.append(("wishlist", product_id))

    def add_to_cart(self, product_id, quantity=1):
        self.calls.append(("cart", product_id, quantity))


def test_merge_pushes_wishlist_before_cart():
    store = InMemoryGuestSessionStore(
        {CART_KEY: [{"productId": "c1", "quantity": 2}, {"productId": "c2", "quantity": 1}], WISHLIST_KEY: ["w1", "w2"]}
    )
    api = RecordingClient()

    assert migrate_guest_data(api, store) == {"wishlist": 2, "cart": 2, "failed": 0}
    assert api.calls == [("wishlist", "w1"), ("wishlist", "w2"), ("cart", "c1", 2), ("cart", "c2", 1)]
