from __future__ import annotations

from datetime import datetime
from typing import Annotated, Generic, List, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from orders_api.models.base import as_utc

T = TypeVar("T")

# Ids and quantities are stored in 32-bit INTEGER columns.
MAX_DB_INT = 2_147_483_647

UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PageResponse(CamelModel, Generic[T]):
    total: int
    page: int
    page_size: int
    items: List[T]
