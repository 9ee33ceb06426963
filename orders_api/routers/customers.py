from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from orders_api.core.database import get_db
from orders_api.deps import EntityId, get_current_user, require_admin
from orders_api.schemas.common import PageResponse
from orders_api.schemas.customer import CustomerRequest, CustomerResponse
from orders_api.services import customers as customer_service
from orders_api.services.auth import CurrentUser
from orders_api.services.listing import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerRequest,
    response: Response,
    _user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    customer = customer_service.create_customer(db, payload.name, payload.email)
    response.headers["Location"] = f"/api/customers/{customer.id}"
    return customer


@router.get("", response_model=PageResponse[CustomerResponse])
def list_customers(
    search: Optional[str] = Query(default=None),
    page: int = Query(default=DEFAULT_PAGE, ge=1),
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE, alias="pageSize"),
    db: Session = Depends(get_db),
):
    return customer_service.list_customers(db, search=search, page=page, page_size=page_size)


@router.get("/{customer_id}", response_model=CustomerResponse)
def get_customer(customer_id: EntityId, db: Session = Depends(get_db)):
    return customer_service.get_customer(db, customer_id)


@router.put("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def update_customer(
    customer_id: EntityId,
    payload: CustomerRequest,
    _user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    customer_service.update_customer(db, customer_id, payload.name, payload.email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(
    customer_id: EntityId,
    _admin: CurrentUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    # toggles: a second DELETE restores the customer
    customer_service.toggle_customer_deleted(db, customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
