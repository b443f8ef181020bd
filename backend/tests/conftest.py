"""Pytest configuration and fixtures"""
import copy
import os
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

import pytest

# Set test environment variables
os.environ.setdefault("FIREBASE_PROJECT_ID", "test-project")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from storefront.core.errors import (  # noqa: E402
    ERROR_ACCOUNT_EXISTS,
    ERROR_ADDRESS_NOT_FOUND,
    ERROR_PRODUCT_NOT_FOUND,
    ERROR_USER_NOT_FOUND,
    AlreadyExists,
    NotFound,
)
from storefront.repositories.users import cart_without  # noqa: E402
from storefront.schemas.product import Product  # noqa: E402
from storefront.schemas.user import User  # noqa: E402
from storefront.services.cart_aggregator import CartAggregator  # noqa: E402
from storefront.services.cart_service import CartService  # noqa: E402


class InMemoryProductStore:
    """Stands in for ProductStore; records every lookup."""

    def __init__(self, products: Optional[Dict[str, Dict[str, Any]]] = None):
        self.docs = dict(products or {})
        self.calls: List[str] = []
        self.timeouts: List[float] = []

    def find_by_id(self, product_id: str, *, timeout: float) -> Product:
        self.calls.append(product_id)
        self.timeouts.append(timeout)
        if product_id not in self.docs:
            raise NotFound(ERROR_PRODUCT_NOT_FOUND)
        return Product.from_doc(product_id, self.docs[product_id])


class InMemoryUserStore:
    """Stands in for UserStore with the same per-document semantics."""

    def __init__(self, users: Optional[Dict[str, Dict[str, Any]]] = None):
        self.docs: Dict[str, Dict[str, Any]] = {}
        for uid, data in (users or {}).items():
            self.docs[uid] = {"cart": [], "orders": [], "addresses": [], **data}
        self.calls: List[str] = []
        self.timeouts: List[float] = []

    def _record(self, call: str, timeout: float) -> None:
        self.calls.append(call)
        self.timeouts.append(timeout)

    def _doc(self, user_id: str) -> Dict[str, Any]:
        if user_id not in self.docs:
            raise NotFound(ERROR_USER_NOT_FOUND)
        return self.docs[user_id]

    def find_by_id(self, user_id: str, *, timeout: float) -> User:
        self._record("find_by_id", timeout)
        return User.from_doc(user_id, copy.deepcopy(self._doc(user_id)))

    def exists_with(self, field: str, value: Any, *, timeout: float) -> bool:
        self._record("exists_with", timeout)
        return any(d.get(field) == value for d in self.docs.values())

    def create(
        self,
        data: Dict[str, Any],
        *,
        timeout: float,
        user_id: Optional[str] = None,
        unique: Sequence[str] = (),
    ) -> str:
        self._record("create", timeout)
        if any(d.get(f) == data[f] for f in unique for d in self.docs.values()):
            raise AlreadyExists(ERROR_ACCOUNT_EXISTS)
        uid = user_id or uuid4().hex
        self.docs[uid] = {**data, "cart": [], "orders": [], "addresses": []}
        return uid

    def append_to_cart(self, user_id: str, line: Dict[str, Any], *, timeout: float) -> None:
        self._record("append_to_cart", timeout)
        self._doc(user_id)["cart"].append(copy.deepcopy(line))

    def remove_from_cart(self, user_id: str, product_id: str, *, timeout: float) -> int:
        self._record("remove_from_cart", timeout)
        doc = self._doc(user_id)
        kept = cart_without(doc["cart"], product_id)
        removed = len(doc["cart"]) - len(kept)
        doc["cart"] = kept
        return removed

    def checkout(self, user_id: str, build_order, *, timeout: float) -> Dict[str, Any]:
        self._record("checkout", timeout)
        doc = self._doc(user_id)
        order_doc = build_order(User.from_doc(user_id, copy.deepcopy(doc)))
        doc["orders"].append(order_doc)
        doc["cart"] = []
        return order_doc

    def append_order(self, user_id: str, order_doc: Dict[str, Any], *, timeout: float) -> None:
        self._record("append_order", timeout)
        self._doc(user_id)["orders"].append(copy.deepcopy(order_doc))

    def add_address(self, user_id: str, address: Dict[str, Any], *, timeout: float) -> None:
        self._record("add_address", timeout)
        self._doc(user_id)["addresses"].append(copy.deepcopy(address))

    def remove_address(self, user_id: str, address_id: str, *, timeout: float) -> None:
        self._record("remove_address", timeout)
        doc = self._doc(user_id)
        kept = [a for a in doc["addresses"] if a.get("id") != address_id]
        if len(kept) == len(doc["addresses"]):
            raise NotFound(ERROR_ADDRESS_NOT_FOUND)
        doc["addresses"] = kept


@pytest.fixture
def sample_products():
    """Sample product documents"""
    return {
        "prod-10": {"name": "Desk Lamp", "price": 10.0, "image": "https://cdn.test/lamp.png"},
        "prod-25": {"name": "Mechanical Keyboard", "price": 25.5, "image": None},
        "prod-099": {"title": "Sticker Pack", "price": 0.99, "images": ["https://cdn.test/sticker.png"]},
    }


@pytest.fixture
def product_store(sample_products):
    return InMemoryProductStore(sample_products)


@pytest.fixture
def user_store():
    return InMemoryUserStore({
        "user-1": {"first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com", "phone": "555 123 4567"},
        "user-2": {"first_name": "Alan", "last_name": "Turing", "email": "alan@example.com", "phone": "555 987 6543"},
    })


@pytest.fixture
def cart_service(product_store, user_store):
    return CartService(product_store, user_store, write_timeout=5.0, checkout_timeout=100.0)


@pytest.fixture
def cart_aggregator(user_store):
    return CartAggregator(user_store, timeout=100.0)
