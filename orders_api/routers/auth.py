# orders_api/routers/auth.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordRequestForm

from orders_api.schemas.auth import LoginPayload, TokenResponse
from orders_api.services.auth import authenticate, create_access_token

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _issue_token(username: str, password: str, *, bearer_challenge: bool = False) -> TokenResponse:
    account = authenticate(username, password)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"} if bearer_challenge else None,
        )
    return TokenResponse(access_token=create_access_token(account))


@router.post("/login", response_model=TokenResponse)
def login(
    username: Optional[str] = Query(default=None),
    password: Optional[str] = Query(default=None),
    payload: Optional[LoginPayload] = Body(default=None),
):
    # query string wins; JSON body kept for clients that post credentials
    if payload is not None:
        username = username or payload.username
        password = password or payload.password

    if not (username or "").strip() or not password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="username and password are required")

    return _issue_token(username, password)


@router.post("/token", response_model=TokenResponse)
def token(form_data: OAuth2PasswordRequestForm = Depends()):
    """Endpoint used by the Swagger UI "Authorize" button (form-data username/password)."""
    return _issue_token(form_data.username, form_data.password, bearer_challenge=True)
