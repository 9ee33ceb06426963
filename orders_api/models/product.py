from __future__ import annotations

from decimal import Decimal

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, Numeric, String, false, func

from orders_api.core.database import Base
from orders_api.models.base import EntityMixin, domain_rule, to_money, utcnow

DESCRIPTION_MAX_LENGTH = 120


class Product(EntityMixin, Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    description = Column(String(DESCRIPTION_MAX_LENGTH), nullable=False)
    price = Column(Numeric(18, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    is_deleted = Column(Boolean, default=False, server_default=false(), nullable=False)

    @classmethod
    def create(cls, description: str, price: Decimal | int | str) -> "Product":
        product = cls(is_deleted=False)
        product.update(description, price)
        return product

    def update(self, description: str, price: Decimal | int | str) -> None:
        domain_rule(not (description or "").strip(), "description is required")
        amount = to_money(price)
        domain_rule(amount.is_signed(), "invalid price")

        self.description = description.strip()
        self.price = amount

    def toggle_deleted(self) -> bool:
        self.is_deleted = not bool(self.is_deleted)
        return self.is_deleted


Index(
    "uq_products_description_active",
    Product.description,
    unique=True,
    sqlite_where=Product.is_deleted == false(),
    postgresql_where=Product.is_deleted == false(),
)
