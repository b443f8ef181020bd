from storefront.core.logging import get_logger, sanitize_id
from storefront.repositories.users import UserStore
from storefront.schemas.cart import CartSummary
from storefront.services.aggregation import cart_total
from storefront.utils.ids import require_id

logger = get_logger("storefront.cart")


class CartAggregator:
    """Computes a user's cart total with the match → unwind → group pipeline."""

    def __init__(self, users: UserStore, *, timeout: float):
        self.users = users
        self.timeout = timeout

    def get_cart_summary(self, user_id: str) -> CartSummary:
        uid = require_id(user_id, "user")
        user = self.users.find_by_id(uid, timeout=self.timeout)
        total = cart_total(user.id, user.cart)
        logger.debug("cart summary user=%s lines=%d total=%s", sanitize_id(uid), len(user.cart), total)
        return CartSummary(user_id=user.id, total=float(total), items=user.cart)
