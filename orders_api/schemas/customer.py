from __future__ import annotations

from pydantic import EmailStr, Field, field_validator

from orders_api.models.customer import NAME_MAX_LENGTH
from orders_api.schemas.common import CamelModel, UtcDatetime


class CustomerRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    email: EmailStr

    @field_validator("name", "email", mode="before")
    @classmethod
    def _strip(cls, value):
        return value.strip() if isinstance(value, str) else value


class CustomerResponse(CamelModel):
    id: int
    name: str
    email: str
    created_at: UtcDatetime
