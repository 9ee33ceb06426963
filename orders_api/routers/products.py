from __future__ import annotations

from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from orders_api.core.database import get_db
from orders_api.deps import EntityId, get_current_user, require_admin
from orders_api.schemas.common import PageResponse
from orders_api.schemas.product import ProductRequest, ProductResponse
from orders_api.services import products as product_service
from orders_api.services.auth import CurrentUser
from orders_api.services.listing import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(prefix="/api/products", tags=["products"])


@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductRequest,
    response: Response,
    _user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product = product_service.create_product(db, payload.description, payload.price)
    response.headers["Location"] = f"/api/products/{product.id}"
    return product


@router.get("", response_model=PageResponse[ProductResponse])
def list_products(
    min_price: Optional[Decimal] = Query(default=None, alias="minPrice"),
    max_price: Optional[Decimal] = Query(default=None, alias="maxPrice"),
    search: Optional[str] = Query(default=None),
    sort: Optional[str] = Query(default=None, description="price_asc | price_desc | desc_asc | desc_desc"),
    page: int = Query(default=DEFAULT_PAGE, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pageSize"),
    db: Session = Depends(get_db),
):
    return product_service.list_products(
        db,
        search=search,
        min_price=min_price,
        max_price=max_price,
        sort=sort,
        page=page,
        page_size=page_size,
    )


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: EntityId, db: Session = Depends(get_db)):
    return product_service.get_product(db, product_id)


@router.put("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_product(
    product_id: EntityId,
    payload: ProductRequest,
    _user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    product_service.update_product(db, product_id, payload.description, payload.price)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: EntityId,
    _admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    product_service.toggle_product_deleted(db, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
