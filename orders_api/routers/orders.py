from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from orders_api.core.database import get_db
from orders_api.deps import EntityId, get_current_user
from orders_api.schemas.common import MAX_DB_INT
from orders_api.schemas.order import OrderRequest, OrderResponse
from orders_api.services import orders as order_service
from orders_api.services.auth import CurrentUser

router = APIRouter(prefix="/api/orders", tags=["orders"])

logger = logging.getLogger(__name__)

DISCONNECT_POLL_SECONDS = 0.1


async def _watch_disconnect(request: Request, cancelled: threading.Event) -> None:
    while not cancelled.is_set():
        if await request.is_disconnected():
            logger.info("Client disconnected during order creation")
            cancelled.set()
            return
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)


@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    payload: OrderRequest,
    request: Request,
    response: Response,
    _user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    cancelled = threading.Event()
    watcher = asyncio.create_task(_watch_disconnect(request, cancelled))
    try:
        order = await run_in_threadpool(
            order_service.create_order,
            db,
            payload.customer_id,
            [(item.product_id, item.quantity) for item in payload.items],
            cancelled=cancelled,
        )
    finally:
        watcher.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await watcher

    response.headers["Location"] = f"/api/orders/{order.id}"
    return order


@router.get("", response_model=List[OrderResponse])
def list_orders(
    customer_id: Optional[int] = Query(default=None, ge=1, le=MAX_DB_INT, alias="customerId"),
    created_from: Optional[datetime] = Query(default=None, alias="from"),
    created_to: Optional[datetime] = Query(default=None, alias="to"),
    db: Session = Depends(get_db),
):
    return order_service.list_orders(
        db,
        customer_id=customer_id,
        created_from=created_from,
        created_to=created_to,
    )


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: EntityId, db: Session = Depends(get_db)):
    return order_service.get_order(db, order_id)
