from __future__ import annotations

import enum
from decimal import Decimal
from typing import Iterable

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, Numeric, String, func
from sqlalchemy.orm import relationship

from orders_api.core.database import Base
from orders_api.models.base import EntityMixin, domain_rule, to_money, utcnow
from orders_api.models.order_item import OrderItem
from orders_api.models.product import Product


class OrderStatus(str, enum.Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"


def compute_total(items: Iterable[OrderItem]) -> Decimal:
    return to_money(sum((item.line_amount for item in items), Decimal("0")))


class Order(EntityMixin, Base):
    __tablename__ = "orders"
    __table_args__ = (Index("ix_orders_customer_created", "customer_id", "created_at"),)

    id = Column(Integer, primary_key=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    status = Column(String(20), default=OrderStatus.PENDING.value, nullable=False)
    total = Column(Numeric(18, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    customer = relationship("Customer", back_populates="orders")
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItem.id",
        lazy="selectin",
    )

    @classmethod
    def place(
        cls,
        customer_id: int,
        lines: Iterable[tuple[Product, int]],
        status: OrderStatus = OrderStatus.PENDING,
    ) -> "Order":
        """Build an order from resolved products, snapshotting each price.

        Lines are kept in request order and never merged, even when the same
        product appears twice. The total is derived from the items here and
        nowhere else.
        """
        items = [OrderItem.snapshot(product, quantity) for product, quantity in lines]
        domain_rule(not items, "items required")
        return cls(
            customer_id=customer_id,
            status=OrderStatus(status).value,
            items=items,
            total=compute_total(items),
        )
