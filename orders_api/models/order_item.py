from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import Column, ForeignKey, Integer, Numeric
from sqlalchemy.orm import relationship

from orders_api.core.database import Base
from orders_api.models.base import EntityMixin, domain_rule, to_money

if TYPE_CHECKING:
    from orders_api.models.product import Product


class OrderItem(EntityMixin, Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), index=True, nullable=False)
    quantity = Column(Integer, nullable=False)
    # Price of the product when the order was placed; later price changes do not touch it.
    unit_price = Column(Numeric(18, 2), nullable=False)

    order = relationship("Order", back_populates="items")
    product = relationship("Product", lazy="joined")

    @classmethod
    def snapshot(cls, product: "Product", quantity: int) -> "OrderItem":
        domain_rule(quantity is None or quantity <= 0, "quantity must be greater than zero")
        return cls(
            product_id=product.id,
            product=product,
            quantity=quantity,
            unit_price=to_money(product.price),
        )

    @property
    def line_amount(self) -> Decimal:
        return Decimal(self.quantity) * to_money(self.unit_price)

    @property
    def product_description(self) -> str | None:
        return self.product.description if self.product is not None else None
