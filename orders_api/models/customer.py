from __future__ import annotations

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, false, func
from sqlalchemy.orm import relationship

from orders_api.core.database import Base
from orders_api.models.base import EntityMixin, domain_rule, utcnow

NAME_MAX_LENGTH = 120
EMAIL_MAX_LENGTH = 254


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


class Customer(EntityMixin, Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True)
    name = Column(String(NAME_MAX_LENGTH), nullable=False)
    email = Column(String(EMAIL_MAX_LENGTH), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    is_deleted = Column(Boolean, default=False, server_default=false(), nullable=False)

    orders = relationship("Order", back_populates="customer")

    @classmethod
    def create(cls, name: str, email: str) -> "Customer":
        customer = cls(is_deleted=False)
        customer.update(name, email)
        return customer

    def update(self, name: str, email: str) -> None:
        domain_rule(not (name or "").strip(), "name is required")
        domain_rule(not (email or "").strip(), "email is required")

        self.name = name.strip()
        self.email = normalize_email(email)

    def toggle_deleted(self) -> bool:
        self.is_deleted = not bool(self.is_deleted)
        return self.is_deleted


# Email is unique only among customers that are not soft-deleted.
Index(
    "uq_customers_email_active",
    Customer.email,
    unique=True,
    sqlite_where=Customer.is_deleted == false(),
    postgresql_where=Customer.is_deleted == false(),
)
