from decimal import Decimal
from pathlib import Path

import pytest

from orders_api.core import config, startup_checks
from orders_api.models.customer import Customer
from orders_api.models.order import Order
from orders_api.models.product import Product
from orders_api.services.seed import seed_database


def test_seed_database_fills_empty_tables(db_session):
    created = seed_database(db_session)

    assert created == {"customers": 3, "products": 30, "orders": 3}
    assert db_session.query(Product).filter(Product.description == "product 30").one().price == Decimal("40.00")

    orders = db_session.query(Order).order_by(Order.id).all()
    assert [order.status for order in orders] == ["Confirmed", "Pending", "Pending"]
    assert [order.total for order in orders] == [Decimal("105.00"), Decimal("108.00"), Decimal("33.00")]


def test_seed_database_is_idempotent(db_session):
    seed_database(db_session)

    assert seed_database(db_session) == {"customers": 0, "products": 0, "orders": 0}
    assert db_session.query(Customer).count() == 3
    assert db_session.query(Order).count() == 3


def test_validate_runtime_environment_refuses_sqlite_in_production(monkeypatch):
    monkeypatch.setattr(config, "IS_PROD", True)
    monkeypatch.setattr(config, "DATABASE_URL", "sqlite:///./prod.db")

    with pytest.raises(RuntimeError, match="SQLite is forbidden"):
        startup_checks.validate_runtime_environment()


def test_validate_runtime_environment_requires_jwt_secret_in_production(monkeypatch):
    monkeypatch.setattr(config, "IS_PROD", True)
    monkeypatch.setattr(config, "DATABASE_URL", "postgresql://db/orders")
    monkeypatch.setattr(config, "JWT_SECRET_KEY", "")

    with pytest.raises(RuntimeError, match="JWT_SECRET_KEY"):
        startup_checks.validate_runtime_environment()


def test_validate_runtime_environment_allows_sqlite_outside_production(monkeypatch):
    monkeypatch.setattr(config, "IS_PROD", False)
    monkeypatch.setattr(config, "DATABASE_URL", "sqlite:///./dev.db")

    startup_checks.validate_runtime_environment()


def test_apply_migrations_skipped_when_disabled(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "AUTO_APPLY_MIGRATIONS", False)

    startup_checks.apply_migrations(alembic_config_path=tmp_path / "missing.ini")


def test_apply_migrations_requires_alembic_config(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "AUTO_APPLY_MIGRATIONS", True)

    with pytest.raises(RuntimeError, match="alembic config not found"):
        startup_checks.apply_migrations(alembic_config_path=tmp_path / "missing.ini")


def test_ensure_migrations_applied_skipped_in_test_environment():
    startup_checks.ensure_migrations_applied(engine=None, alembic_config_path=Path("missing.ini"))
