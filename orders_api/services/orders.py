"""Order placement and order queries.

``create_order`` is the only write path for orders. It resolves the customer
and every product before touching the session, builds the order with price
snapshots, and writes the order row plus its item rows in a single
transaction. Any failure rolls the whole unit back.
"""
from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.orm import Session

from orders_api.core.errors import OrderCreationCancelledError, OrderNotFoundError, ProductNotFoundError
from orders_api.models.base import as_utc
from orders_api.models.order import Order, OrderStatus
from orders_api.models.product import Product
from orders_api.services.customers import get_customer
from orders_api.services.products import products_query

logger = logging.getLogger(__name__)


def _resolve_products(db: Session, product_ids: Iterable[int]) -> Dict[int, Product]:
    wanted = set(product_ids)
    rows = products_query(db).filter(Product.id.in_(wanted)).all() if wanted else []
    found = {product.id: product for product in rows}
    missing = wanted - found.keys()
    if missing:
        raise ProductNotFoundError(missing)
    return found


def create_order(
    db: Session,
    customer_id: int,
    lines: Sequence[tuple[int, int]],
    *,
    status: OrderStatus = OrderStatus.PENDING,
    cancelled: Optional[threading.Event] = None,
) -> Order:
    """Place an order for ``customer_id`` from ``(product_id, quantity)`` lines.

    Raises ``CustomerNotFoundError``/``ProductNotFoundError`` before anything
    is written. ``cancelled`` is checked after the rows are flushed and before
    the commit; when set, the transaction is rolled back.
    """
    customer = get_customer(db, customer_id)
    products = _resolve_products(db, (product_id for product_id, _ in lines))

    order = Order.place(
        customer.id,
        [(products[product_id], quantity) for product_id, quantity in lines],
        status=status,
    )

    db.add(order)
    try:
        db.flush()
        if cancelled is not None and cancelled.is_set():
            raise OrderCreationCancelledError()
        db.commit()
    except Exception:
        db.rollback()
        logger.warning("Order creation rolled back customer_id=%s", customer.id)
        raise

    db.refresh(order)
    logger.info(
        "Order created id=%s customer_id=%s items=%s total=%s",
        order.id,
        order.customer_id,
        len(order.items),
        order.total,
    )
    return order


def get_order(db: Session, order_id: int) -> Order:
    # Orders stay readable after their customer or products are soft-deleted.
    order = db.query(Order).filter(Order.id == order_id).first()
    if order is None:
        raise OrderNotFoundError(order_id)
    return order


def list_orders(
    db: Session,
    *,
    customer_id: Optional[int] = None,
    created_from: Optional[datetime] = None,
    created_to: Optional[datetime] = None,
) -> List[Order]:
    query = db.query(Order)
    if customer_id is not None:
        query = query.filter(Order.customer_id == customer_id)
    created_from = as_utc(created_from)
    created_to = as_utc(created_to)
    if created_from is not None:
        query = query.filter(Order.created_at >= created_from)
    if created_to is not None:
        query = query.filter(Order.created_at <= created_to)
    return query.order_by(Order.created_at.desc(), Order.id.desc()).all()
