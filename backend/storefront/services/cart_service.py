"""
storefront/services/cart_service.py
Cart lifecycle: add / remove lines, checkout the whole cart, instant single-product buy.

Behavior
- Add appends a NEW line every time (same product twice → two lines, no quantity merge).
- Remove drops every line for the product; removing something that is not there is a no-op.
- Checkout moves the cart into a new order and empties it in one atomic write.
  An empty cart checks out to an order with no items and a zero total.
- Instant buy builds a one-line order straight from the product; the cart is not touched.

Identifiers are validated before any store call. Each operation gets one Deadline and every
store call receives only the time that is left. Store failures propagate unchanged
(no retries here, the caller decides).
"""
import time
from typing import Callable

from storefront.core.deadline import Deadline
from storefront.core.logging import get_logger, sanitize_id
from storefront.repositories.products import ProductStore
from storefront.repositories.users import UserStore
from storefront.schemas.cart import CartItem
from storefront.schemas.order import Order
from storefront.schemas.user import User
from storefront.services.aggregation import cart_total, to_money
from storefront.utils.ids import require_id

logger = get_logger("storefront.cart")


def order_from_cart(user: User) -> dict:
    """Order snapshot of the user's current cart (used inside the checkout transaction)."""
    return Order.snapshot(user.cart, cart_total(user.id, user.cart)).to_doc()


class CartService:
    def __init__(
        self,
        products: ProductStore,
        users: UserStore,
        *,
        write_timeout: float,
        checkout_timeout: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.products = products
        self.users = users
        self.write_timeout = write_timeout
        self.checkout_timeout = checkout_timeout
        self.clock = clock

    def add_to_cart(self, product_id: str, user_id: str) -> CartItem:
        pid = require_id(product_id, "product")
        uid = require_id(user_id, "user")
        deadline = Deadline(self.write_timeout, self.clock)

        product = self.products.find_by_id(pid, timeout=deadline.remaining("add to cart"))
        self.users.find_by_id(uid, timeout=deadline.remaining("add to cart"))

        line = CartItem.from_product(product)
        self.users.append_to_cart(uid, line.to_doc(), timeout=deadline.remaining("add to cart"))
        logger.info("cart add user=%s product=%s price=%s", sanitize_id(uid), sanitize_id(pid), line.price)
        return line

    def remove_item(self, product_id: str, user_id: str) -> int:
        pid = require_id(product_id, "product")
        uid = require_id(user_id, "user")
        deadline = Deadline(self.write_timeout, self.clock)

        removed = self.users.remove_from_cart(uid, pid, timeout=deadline.remaining("cart remove"))
        if removed:
            logger.info("cart remove user=%s product=%s lines=%d", sanitize_id(uid), sanitize_id(pid), removed)
        else:
            logger.info("cart remove user=%s product=%s: not in cart", sanitize_id(uid), sanitize_id(pid))
        return removed

    def buy_from_cart(self, user_id: str) -> Order:
        uid = require_id(user_id, "user")
        deadline = Deadline(self.checkout_timeout, self.clock)

        order_doc = self.users.checkout(uid, order_from_cart, timeout=deadline.remaining("checkout"))
        order = Order(**order_doc)
        logger.info(
            "checkout user=%s order=%s lines=%d total=%s",
            sanitize_id(uid), order.order_id, len(order.items), order.total_price,
        )
        return order

    def instant_buy(self, user_id: str, product_id: str) -> Order:
        uid = require_id(user_id, "user")
        pid = require_id(product_id, "product")
        deadline = Deadline(self.write_timeout, self.clock)

        product = self.products.find_by_id(pid, timeout=deadline.remaining("instant buy"))
        line = CartItem.from_product(product)
        order = Order.snapshot([line.to_doc()], to_money(product.price))
        self.users.append_order(uid, order.to_doc(), timeout=deadline.remaining("instant buy"))
        logger.info(
            "instant buy user=%s product=%s order=%s total=%s",
            sanitize_id(uid), sanitize_id(pid), order.order_id, order.total_price,
        )
        return order
