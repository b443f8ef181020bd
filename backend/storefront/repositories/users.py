"""
User repository - every cart / order / address mutation on `users/{id}`.

All state of a user lives in one document, so each operation below is either a single
atomic `update()` (ArrayUnion appends) or one Firestore transaction (filter + write,
checkout). There is never a read-modify-write of the whole document outside a transaction.

Transactions run under one `Deadline`: the body checks it right after the transaction has
begun and again just before returning, so an expired budget rolls back instead of
committing late. The commit RPC itself is issued by `firestore.transactional` without a
per-call timeout.
"""
import hashlib
from typing import Any, Callable, Dict, List, Optional, Sequence

from google.api_core import exceptions as gexc
from google.cloud import firestore as gcf
from google.cloud.firestore_v1 import FieldFilter
from pydantic import ValidationError

from storefront.core.deadline import Deadline
from storefront.core.errors import (
    ERROR_ACCOUNT_EXISTS,
    ERROR_ADDRESS_NOT_FOUND,
    ERROR_USER_NOT_FOUND,
    AlreadyExists,
    NotFound,
    SchemaMismatch,
)
from storefront.repositories.base import FirestoreRepository, run_transaction, store_call
from storefront.schemas.user import User

OrderBuilder = Callable[[User], Dict[str, Any]]


# ---------- pure helpers (shared by the transactions below) ----------
def _to_user(snap) -> User:
    if not snap.exists:
        raise NotFound(ERROR_USER_NOT_FOUND)
    try:
        return User.from_doc(snap.id, snap.to_dict() or {})
    except ValidationError as exc:
        raise SchemaMismatch(f"user {snap.id} has an unexpected shape") from exc


def cart_without(cart: List[Dict[str, Any]], product_id: str) -> List[Dict[str, Any]]:
    """Cart lines that do not reference `product_id` (order preserved)."""
    return [line for line in cart if line.get("product_id") != product_id]


def checkout_patch(order_doc: Dict[str, Any]) -> Dict[str, Any]:
    """One update that records the order and empties the cart together."""
    return {
        "orders": gcf.ArrayUnion([order_doc]),
        "cart": [],
        "updated_at": gcf.SERVER_TIMESTAMP,
    }


def lookup_id(field: str, value: Any) -> str:
    """Document id reserving `value` of a unique user field (emails may contain `/`)."""
    return hashlib.sha256(f"{field}:{value}".encode("utf-8")).hexdigest()


# ---------- transactions ----------
def _read_user(transaction, ref, deadline: Deadline, operation: str) -> User:
    timeout = deadline.remaining(operation)
    return _to_user(ref.get(transaction=transaction, retry=None, timeout=timeout))


@gcf.transactional
def _remove_lines(transaction, ref, product_id: str, deadline: Deadline) -> int:
    user = _read_user(transaction, ref, deadline, "cart remove")
    kept = cart_without(user.cart, product_id)
    removed = len(user.cart) - len(kept)
    if removed:
        transaction.update(ref, {"cart": kept, "updated_at": gcf.SERVER_TIMESTAMP})
    deadline.remaining("cart remove")
    return removed


@gcf.transactional
def _checkout(transaction, ref, build_order: OrderBuilder, deadline: Deadline) -> Dict[str, Any]:
    user = _read_user(transaction, ref, deadline, "checkout")
    order_doc = build_order(user)
    transaction.update(ref, checkout_patch(order_doc))
    deadline.remaining("checkout")
    return order_doc


@gcf.transactional
def _remove_address(transaction, ref, address_id: str, deadline: Deadline) -> None:
    user = _read_user(transaction, ref, deadline, "address remove")
    kept = [a for a in user.addresses if a.get("id") != address_id]
    if len(kept) == len(user.addresses):
        raise NotFound(ERROR_ADDRESS_NOT_FOUND)
    transaction.update(ref, {"addresses": kept, "updated_at": gcf.SERVER_TIMESTAMP})
    deadline.remaining("address remove")


class UserStore(FirestoreRepository):
    """User documents with their embedded cart, order history and addresses."""
    collection_name = "users"
    lookup_collection_name = "user_lookups"

    def lookup(self, field: str, value: Any):
        name = self.settings.collection(self.lookup_collection_name)
        return self.client.collection(name).document(lookup_id(field, value))

    def find_by_id(self, user_id: str, *, timeout: float) -> User:
        with store_call("user lookup", ERROR_USER_NOT_FOUND):
            snap = self.document(user_id).get(retry=None, timeout=timeout)
        return _to_user(snap)

    def exists_with(self, field: str, value: Any, *, timeout: float) -> bool:
        with store_call(f"user lookup by {field}"):
            docs = (
                self.collection
                .where(filter=FieldFilter(field, "==", value))
                .limit(1)
                .get(retry=None, timeout=timeout)
            )
        return bool(docs)

    def create(
        self,
        data: Dict[str, Any],
        *,
        timeout: float,
        user_id: Optional[str] = None,
        unique: Sequence[str] = (),
    ) -> str:
        """
        Insert a new user document; cart / orders / addresses start empty.

        Each field named in `unique` is reserved by creating a `user_lookups` document in
        the same batch, so two concurrent signups with the same value cannot both commit.
        """
        ref = self.document(user_id) if user_id else self.collection.document()
        doc = {**data, "cart": [], "orders": [], "addresses": []}

        batch = self.client.batch()
        batch.create(ref, doc)
        for field in unique:
            batch.create(self.lookup(field, data[field]), {"field": field, "user_id": ref.id})

        with store_call("user create"):
            try:
                batch.commit(retry=None, timeout=timeout)
            except gexc.Conflict as exc:
                raise AlreadyExists(ERROR_ACCOUNT_EXISTS) from exc
        return ref.id

    # ---------- cart ----------
    def append_to_cart(self, user_id: str, line: Dict[str, Any], *, timeout: float) -> None:
        with store_call("cart append", ERROR_USER_NOT_FOUND):
            self.document(user_id).update(
                {"cart": gcf.ArrayUnion([line]), "updated_at": gcf.SERVER_TIMESTAMP},
                retry=None,
                timeout=timeout,
            )

    def remove_from_cart(self, user_id: str, product_id: str, *, timeout: float) -> int:
        """Drop every cart line for `product_id`; returns how many were removed (0 is fine)."""
        with store_call("cart remove", ERROR_USER_NOT_FOUND):
            return run_transaction(
                "cart remove", _remove_lines, self.transaction(),
                self.document(user_id), product_id, Deadline(timeout),
            )

    # ---------- orders ----------
    def checkout(self, user_id: str, build_order: OrderBuilder, *, timeout: float) -> Dict[str, Any]:
        """
        Build an order from the cart as read inside the transaction, append it to
        `orders` and clear `cart` in the same write.
        """
        with store_call("checkout", ERROR_USER_NOT_FOUND):
            return run_transaction(
                "checkout", _checkout, self.transaction(),
                self.document(user_id), build_order, Deadline(timeout),
            )

    def append_order(self, user_id: str, order_doc: Dict[str, Any], *, timeout: float) -> None:
        with store_call("order append", ERROR_USER_NOT_FOUND):
            self.document(user_id).update(
                {"orders": gcf.ArrayUnion([order_doc]), "updated_at": gcf.SERVER_TIMESTAMP},
                retry=None,
                timeout=timeout,
            )

    # ---------- addresses ----------
    def add_address(self, user_id: str, address: Dict[str, Any], *, timeout: float) -> None:
        with store_call("address append", ERROR_USER_NOT_FOUND):
            self.document(user_id).update(
                {"addresses": gcf.ArrayUnion([address]), "updated_at": gcf.SERVER_TIMESTAMP},
                retry=None,
                timeout=timeout,
            )

    def remove_address(self, user_id: str, address_id: str, *, timeout: float) -> None:
        with store_call("address remove", ERROR_USER_NOT_FOUND):
            run_transaction(
                "address remove", _remove_address, self.transaction(),
                self.document(user_id), address_id, Deadline(timeout),
            )
