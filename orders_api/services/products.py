from __future__ import annotations

import logging
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Query, Session

from orders_api.core.errors import DuplicateProductError, ProductNotFoundError
from orders_api.models.product import Product
from orders_api.services.listing import Page, like_pattern, paginate

logger = logging.getLogger(__name__)

PRODUCT_SORTS = {
    "price_asc": (Product.price.asc(),),
    "price_desc": (Product.price.desc(),),
    "desc_asc": (Product.description.asc(),),
    "desc_desc": (Product.description.desc(),),
}


def products_query(db: Session, *, include_deleted: bool = False) -> Query:
    query = db.query(Product)
    if not include_deleted:
        query = query.filter(Product.is_deleted.is_(False))
    return query


def get_product(db: Session, product_id: int, *, include_deleted: bool = False) -> Product:
    product = products_query(db, include_deleted=include_deleted).filter(Product.id == product_id).first()
    if product is None:
        raise ProductNotFoundError(product_id)
    return product


def _ensure_description_available(db: Session, description: str, *, exclude_id: Optional[int] = None) -> None:
    clean_description = (description or "").strip()
    query = products_query(db).filter(Product.description == clean_description)
    if exclude_id is not None:
        query = query.filter(Product.id != exclude_id)
    if db.query(query.exists()).scalar():
        raise DuplicateProductError(clean_description)


def _commit(db: Session, product: Product) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateProductError(product.description) from exc
    except Exception:
        db.rollback()
        raise


def create_product(db: Session, description: str, price: Decimal) -> Product:
    product = Product.create(description, price)
    _ensure_description_available(db, product.description)

    db.add(product)
    _commit(db, product)
    db.refresh(product)
    logger.info("Product created id=%s price=%s", product.id, product.price)
    return product


def update_product(db: Session, product_id: int, description: str, price: Decimal) -> Product:
    product = get_product(db, product_id)
    _ensure_description_available(db, description, exclude_id=product.id)

    product.update(description, price)
    _commit(db, product)
    logger.info("Product updated id=%s price=%s", product.id, product.price)
    return product


def toggle_product_deleted(db: Session, product_id: int) -> Product:
    product = get_product(db, product_id, include_deleted=True)
    if product.is_deleted:
        _ensure_description_available(db, product.description, exclude_id=product.id)

    product.toggle_deleted()
    _commit(db, product)
    logger.info("Product soft-delete toggled id=%s is_deleted=%s", product.id, product.is_deleted)
    return product


def resolve_sort(sort: Optional[str]) -> tuple:
    """Map a sort key to ORDER BY clauses; unknown keys fall back to id order.

    ``id`` is always the last key so equal prices or descriptions keep a
    stable order across pages.
    """
    primary = PRODUCT_SORTS.get((sort or "").strip().lower(), ())
    return (*primary, Product.id.asc())


def list_products(
    db: Session,
    *,
    search: Optional[str],
    min_price: Optional[Decimal],
    max_price: Optional[Decimal],
    sort: Optional[str],
    page: int,
    page_size: int,
) -> Page:
    query = products_query(db)
    pattern = like_pattern(search)
    if pattern:
        query = query.filter(Product.description.ilike(pattern, escape="\\"))
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)
    return paginate(query, page=page, page_size=page_size, order_by=resolve_sort(sort))
