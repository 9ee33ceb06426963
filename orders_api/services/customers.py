from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from orders_api.core.errors import CustomerNotFoundError, DuplicateEmailError
from orders_api.models.customer import Customer, normalize_email
from orders_api.services.listing import Page, like_pattern, paginate

logger = logging.getLogger(__name__)


def customers_query(db: Session, *, include_deleted: bool = False) -> Query:
    query = db.query(Customer)
    if not include_deleted:
        query = query.filter(Customer.is_deleted.is_(False))
    return query


def get_customer(db: Session, customer_id: int, *, include_deleted: bool = False) -> Customer:
    customer = customers_query(db, include_deleted=include_deleted).filter(Customer.id == customer_id).first()
    if customer is None:
        raise CustomerNotFoundError(customer_id)
    return customer


def _ensure_email_available(db: Session, email: str, *, exclude_id: Optional[int] = None) -> None:
    query = customers_query(db).filter(Customer.email == normalize_email(email))
    if exclude_id is not None:
        query = query.filter(Customer.id != exclude_id)
    if db.query(query.exists()).scalar():
        raise DuplicateEmailError(normalize_email(email))


def _commit(db: Session, customer: Customer) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmailError(customer.email) from exc
    except Exception:
        db.rollback()
        raise


def create_customer(db: Session, name: str, email: str) -> Customer:
    customer = Customer.create(name, email)
    _ensure_email_available(db, customer.email)

    db.add(customer)
    _commit(db, customer)
    db.refresh(customer)
    logger.info("Customer created id=%s", customer.id)
    return customer


def update_customer(db: Session, customer_id: int, name: str, email: str) -> Customer:
    customer = get_customer(db, customer_id)
    _ensure_email_available(db, email, exclude_id=customer.id)

    customer.update(name, email)
    _commit(db, customer)
    logger.info("Customer updated id=%s", customer.id)
    return customer


def toggle_customer_deleted(db: Session, customer_id: int) -> Customer:
    customer = get_customer(db, customer_id, include_deleted=True)
    if customer.is_deleted:
        # Restoring must not collide with an active customer that took the email meanwhile.
        _ensure_email_available(db, customer.email, exclude_id=customer.id)

    customer.toggle_deleted()
    _commit(db, customer)
    logger.info("Customer soft-delete toggled id=%s is_deleted=%s", customer.id, customer.is_deleted)
    return customer


def list_customers(db: Session, *, search: Optional[str], page: int, page_size: int) -> Page:
    query = customers_query(db)
    pattern = like_pattern(search)
    if pattern:
        query = query.filter(
            or_(
                Customer.name.ilike(pattern, escape="\\"),
                Customer.email.ilike(pattern, escape="\\"),
            )
        )
    return paginate(query, page=page, page_size=page_size, order_by=[Customer.id.desc()])
