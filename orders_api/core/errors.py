"""Exception hierarchy for the orders API.

Every error the application raises on purpose derives from ``OrdersApiError``;
``orders_api.core.exception_handlers`` maps each subclass to an HTTP status.
"""
from __future__ import annotations

from typing import Iterable


class OrdersApiError(Exception):
    """Base exception for all orders API errors."""

    title = "Request failed"


class DomainValidationError(OrdersApiError, ValueError):
    """Raised when an entity is built or updated with invalid data."""

    title = "One or more validation errors occurred."

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(OrdersApiError):
    """Raised when a referenced entity is absent or soft-deleted."""

    title = "Resource not found"


class CustomerNotFoundError(NotFoundError):
    def __init__(self, customer_id: int):
        self.customer_id = customer_id
        super().__init__(f"Customer not found: {customer_id}")


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_ids: int | Iterable[int]):
        if isinstance(product_ids, int):
            product_ids = [product_ids]
        self.product_ids = sorted(product_ids)
        joined = ", ".join(str(product_id) for product_id in self.product_ids)
        label = "Product" if len(self.product_ids) == 1 else "Products"
        super().__init__(f"{label} not found: {joined}")


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        self.order_id = order_id
        super().__init__(f"Order not found: {order_id}")


class ConflictError(OrdersApiError):
    """Raised when a write would violate a uniqueness rule."""

    title = "Conflict"


class DuplicateEmailError(ConflictError):
    title = "E-mail already registered"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"A customer with e-mail {email} already exists")


class DuplicateProductError(ConflictError):
    title = "Product already registered"

    def __init__(self, description: str):
        self.description = description
        super().__init__(f"A product with description {description!r} already exists")


class OrderCreationCancelledError(OrdersApiError):
    """Raised when the client goes away before the order is committed."""

    title = "Order creation cancelled"

    def __init__(self):
        super().__init__("Client disconnected before the order was committed")
