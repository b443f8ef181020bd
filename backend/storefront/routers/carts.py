"""
storefront/routers/carts.py
Cart and checkout endpoints. Identifiers arrive as query parameters.

| Endpoint              | Query params        | Success                         |
|-----------------------|---------------------|---------------------------------|
| POST /add-to-cart     | id (product), userID| 200 confirmation message        |
| POST /remove-item     | id (product), userID| 200 confirmation message        |
| GET  /cart            | id (user)           | 200 total + cart lines          |
| POST /checkout        | id (user)           | 200 confirmation + order id     |
| POST /instant-buy     | userid, pid         | 200 confirmation + order id     |

Missing parameters answer 400 (404 for GET /cart). Every failure body is
`{"error": <kind>, "message": <text>}` (see `storefront.main`).
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query

from storefront.core.deps import get_cart_aggregator, get_cart_service
from storefront.core.errors import ERROR_PRODUCT_ID_EMPTY, ERROR_USER_ID_EMPTY, InvalidInput
from storefront.schemas.cart import CartSummary
from storefront.schemas.order import OrderPlaced
from storefront.services.cart_aggregator import CartAggregator
from storefront.services.cart_service import CartService
from storefront.utils.ids import clean_id

router = APIRouter(tags=["Cart"])

MSG_ADDED = "Successfully added to the cart"
MSG_REMOVED = "Successfully removed from cart"
MSG_ORDER_PLACED = "Successfully placed the order"


def _required(value: Optional[str], message: str, status_code: int = 400) -> str:
    v = clean_id(value)
    if not v:
        raise InvalidInput(message, status_code=status_code)
    return v


@router.post("/add-to-cart")
def add_to_cart(
    id: Optional[str] = Query(None, description="Product ID"),
    userID: Optional[str] = Query(None, description="User ID"),
    service: CartService = Depends(get_cart_service),
):
    """Append one line for the product to the user's cart (no quantity merge)."""
    product_id = _required(id, ERROR_PRODUCT_ID_EMPTY)
    user_id = _required(userID, ERROR_USER_ID_EMPTY)
    service.add_to_cart(product_id, user_id)
    return {"message": MSG_ADDED}


@router.post("/remove-item")
def remove_item(
    id: Optional[str] = Query(None, description="Product ID"),
    userID: Optional[str] = Query(None, description="User ID"),
    service: CartService = Depends(get_cart_service),
):
    """Remove every cart line for the product. Not in cart → still 200."""
    product_id = _required(id, ERROR_PRODUCT_ID_EMPTY)
    user_id = _required(userID, ERROR_USER_ID_EMPTY)
    service.remove_item(product_id, user_id)
    return {"message": MSG_REMOVED}


@router.get("/cart", response_model=CartSummary)
def get_cart(
    id: Optional[str] = Query(None, description="User ID"),
    aggregator: CartAggregator = Depends(get_cart_aggregator),
):
    """Current cart total and the cart lines as stored."""
    user_id = _required(id, "invalid id", status_code=404)
    return aggregator.get_cart_summary(user_id)


@router.post("/checkout", response_model=OrderPlaced)
def buy_from_cart(
    id: Optional[str] = Query(None, description="User ID"),
    service: CartService = Depends(get_cart_service),
):
    """Turn the whole cart into an order and empty the cart."""
    user_id = _required(id, ERROR_USER_ID_EMPTY)
    order = service.buy_from_cart(user_id)
    return OrderPlaced(message=MSG_ORDER_PLACED, order_id=order.order_id, total_price=order.total_price)


@router.post("/instant-buy", response_model=OrderPlaced)
def instant_buy(
    userid: Optional[str] = Query(None, description="User ID"),
    pid: Optional[str] = Query(None, description="Product ID"),
    service: CartService = Depends(get_cart_service),
):
    """Order a single product directly; the cart is left as it is."""
    user_id = _required(userid, ERROR_USER_ID_EMPTY)
    product_id = _required(pid, ERROR_PRODUCT_ID_EMPTY)
    order = service.instant_buy(user_id, product_id)
    return OrderPlaced(message=MSG_ORDER_PLACED, order_id=order.order_id, total_price=order.total_price)
