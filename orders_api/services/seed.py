from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from orders_api.models.customer import Customer
from orders_api.models.order import Order, OrderStatus
from orders_api.models.product import Product

logger = logging.getLogger(__name__)
SEED_PREFIX = "[SEED]"

SEED_CUSTOMERS = [
    ("Bruno", "bruno@exemplo.com"),
    ("Vinicius", "vinicius@exemplo.com"),
    ("Heitor", "heitor@exemplo.com"),
]
SEED_PRODUCT_COUNT = 30


def seed_database(db: Session) -> dict[str, int]:
    """Fill empty tables with sample data; tables that already have rows are left alone."""
    created = {"customers": 0, "products": 0, "orders": 0}
    try:
        if db.query(Customer.id).first() is None:
            db.add_all(Customer.create(name, email) for name, email in SEED_CUSTOMERS)
            created["customers"] = len(SEED_CUSTOMERS)

        if db.query(Product.id).first() is None:
            db.add_all(
                Product.create(f"product {i}", Decimal(10 + i))
                for i in range(1, SEED_PRODUCT_COUNT + 1)
            )
            created["products"] = SEED_PRODUCT_COUNT

        db.flush()

        if db.query(Order.id).first() is None:
            customer = db.query(Customer).order_by(Customer.id).first()
            first, second = db.query(Product).order_by(Product.id).limit(2).all()
            db.add_all(
                [
                    Order.place(customer.id, [(first, 3), (second, 6)], status=OrderStatus.CONFIRMED),
                    Order.place(customer.id, [(second, 9)]),
                    Order.place(customer.id, [(first, 3)]),
                ]
            )
            created["orders"] = 3

        db.commit()
    except Exception:
        db.rollback()
        logger.exception("%s seeding failed", SEED_PREFIX)
        raise

    logger.info(
        "%s done customers=%s products=%s orders=%s",
        SEED_PREFIX,
        created["customers"],
        created["products"],
        created["orders"],
    )
    return created
