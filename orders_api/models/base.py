from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from orders_api.core.errors import DomainValidationError

MONEY_QUANTUM = Decimal("0.01")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive values (SQLite drops the offset) or convert aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_money(value: Any) -> Decimal:
    """Quantize a value to two decimal places using commercial rounding.

    Floats go through ``str`` first so ``99.9`` becomes ``99.90`` and not the
    binary expansion of the float.
    """
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise DomainValidationError("invalid amount") from exc
    if not amount.is_finite():
        raise DomainValidationError("invalid amount")
    return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


def domain_rule(condition: bool, message: str) -> None:
    if condition:
        raise DomainValidationError(message)


class EntityMixin:
    """Shared entity helpers.

    ``rehydrate`` builds an instance from stored values without running the
    create/update validation; only the id gets a defensive check.
    """

    @staticmethod
    def validate_id(entity_id: int | None) -> None:
        domain_rule(entity_id is not None and entity_id < 0, "invalid id")

    @classmethod
    def rehydrate(cls, **values: Any):
        cls.validate_id(values.get("id"))
        instance = cls()
        for key, value in values.items():
            setattr(instance, key, value)
        return instance
