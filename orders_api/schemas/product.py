from __future__ import annotations

from decimal import Decimal

from pydantic import Field, field_validator

from orders_api.models.product import DESCRIPTION_MAX_LENGTH
from orders_api.schemas.common import CamelModel, UtcDatetime


class ProductRequest(CamelModel):
    description: str = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    # NUMERIC(18,2): at most 16 integer digits and whole cents
    price: Decimal = Field(..., gt=0, max_digits=18, decimal_places=2)

    @field_validator("description", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class ProductResponse(CamelModel):
    id: int
    description: str
    price: Decimal
    created_at: UtcDatetime
