from __future__ import annotations

from fastapi import APIRouter, Depends

from orders_api.core.metrics import request_metrics
from orders_api.deps import require_admin
from orders_api.services.auth import CurrentUser

router = APIRouter(prefix="/internal", tags=["internal"])


@router.get("/metrics")
def get_internal_metrics(_admin: CurrentUser = Depends(require_admin)):
    return {"endpoints": request_metrics.snapshot()}
