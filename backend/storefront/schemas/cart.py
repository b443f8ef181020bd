"""
storefront/schemas/cart.py - Pydantic models for Cart.

The cart is not a document of its own: it is the `cart` array embedded in `users/{id}`.
Each add appends a separate line (no quantity merge), so every line gets its own `line_id`.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from storefront.schemas.product import Product


class CartItem(BaseModel):
    line_id: str = Field(default_factory=lambda: uuid4().hex, description="Unique id of this cart line")
    product_id: str = Field(..., description="ID of the product")
    product_name: str = Field('', description="Name of the product at the time of adding")
    price: float = Field(..., ge=0, description="Price at the time of adding to cart")
    image: Optional[str] = Field(None, description="Product image reference")
    added_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_product(cls, product: Product) -> "CartItem":
        return cls(
            product_id=product.id,
            product_name=product.name,
            price=product.price,
            image=product.image,
        )

    def to_doc(self) -> Dict[str, Any]:
        return self.model_dump()


class CartSummary(BaseModel):
    user_id: str
    total: float = Field(0.0, description="Sum of the cart line prices")
    items: List[Dict[str, Any]] = Field(default_factory=list, description="Cart lines as stored")
