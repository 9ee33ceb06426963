from __future__ import annotations

from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from orders_api.schemas.common import MAX_DB_INT, CamelModel, UtcDatetime


class OrderItemRequest(CamelModel):
    product_id: int = Field(..., gt=0, le=MAX_DB_INT)
    quantity: int = Field(..., gt=0, le=MAX_DB_INT)


class OrderRequest(CamelModel):
    customer_id: int = Field(..., gt=0, le=MAX_DB_INT)
    items: List[OrderItemRequest]

    @field_validator("items")
    @classmethod
    def _items_required(cls, value: List[OrderItemRequest]) -> List[OrderItemRequest]:
        if not value:
            raise ValueError("items required")
        return value


class OrderItemResponse(CamelModel):
    product_id: int
    product_description: Optional[str] = None
    quantity: int
    unit_price: Decimal


class OrderResponse(CamelModel):
    id: int
    customer_id: int
    created_at: UtcDatetime
    status: str
    total: Decimal
    items: List[OrderItemResponse]
