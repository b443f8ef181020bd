# storefront/schemas/order.py
from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List
from uuid import uuid4

from pydantic import BaseModel, Field


class Order(BaseModel):
    """
    Snapshot appended to `users/{id}.orders` at checkout. Never edited afterwards.
    """
    order_id: str = Field(default_factory=lambda: uuid4().hex)
    items: List[Dict[str, Any]] = Field(default_factory=list)
    total_price: float = 0.0
    discount: float = 0.0  # placeholder, no discount logic yet
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def snapshot(cls, items: List[Dict[str, Any]], total: Decimal) -> "Order":
        now = datetime.now(timezone.utc)
        return cls(
            items=[dict(it) for it in items],
            total_price=float(total),
            created_at=now,
            updated_at=now,
        )

    def to_doc(self) -> Dict[str, Any]:
        return self.model_dump()


class OrderPlaced(BaseModel):
    message: str
    order_id: str
    total_price: float
