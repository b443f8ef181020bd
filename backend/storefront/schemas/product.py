"""
storefront/schemas/product.py - Pydantic model for Product documents.

Products are read-only from the cart subsystem's point of view.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class Product(BaseModel):
    """A `products/{id}` document."""
    id: str = Field(..., description="Product ID (Firestore document id)")
    name: str = Field('', description="Product name")
    price: float = Field(..., ge=0, description="Current unit price")
    image: Optional[str] = Field(None, description="Image reference (URL or storage path)")
    rating: Optional[float] = Field(None, description="Average rating, if any")

    @classmethod
    def from_doc(cls, doc_id: str, data: Dict[str, Any]) -> "Product":
        # older documents use `title` / `images` like the catalog admin writes them
        name = data.get("name") or data.get("title") or ""
        image = data.get("image")
        if image is None and isinstance(data.get("images"), list) and data["images"]:
            image = str(data["images"][0])
        return cls(
            id=doc_id,
            name=name,
            price=data.get("price"),
            image=image,
            rating=data.get("rating"),
        )
