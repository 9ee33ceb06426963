# orders_api/deps.py
from __future__ import annotations

import logging
from typing import Annotated, Iterable

from fastapi import Depends, HTTPException, Path, Request, status
from fastapi.security import OAuth2PasswordBearer

from orders_api.schemas.common import MAX_DB_INT
from orders_api.services.auth import CurrentUser, decode_access_token

# Swagger "Authorize" (OAuth2 password flow) posts to this endpoint
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token")

logger = logging.getLogger(__name__)

# {id} path parameters must fit the 32-bit INTEGER primary keys
EntityId = Annotated[int, Path(ge=1, le=MAX_DB_INT)]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(request: Request, token: str = Depends(oauth2_scheme)) -> CurrentUser:
    """Read and validate the bearer token; no database lookup, accounts are fixed."""
    try:
        payload = decode_access_token(token)
    except ValueError:
        raise _unauthorized("Invalid or expired token")

    username = payload.get("sub")
    if not isinstance(username, str) or not username.strip():
        raise _unauthorized("Invalid token (missing subject)")

    user = CurrentUser(username=username, role=str(payload.get("role") or ""))
    request.state.user = user
    return user


def require_role(roles: Iterable[str]):
    allowed = {role.strip().lower() for role in roles}

    def _dependency(
        request: Request,
        user: CurrentUser = Depends(get_current_user),
    ) -> CurrentUser:
        if user.role.strip().lower() not in allowed:
            logger.warning(
                "Access denied (role_denied): user=%s role=%s endpoint=%s %s",
                user.username,
                user.role,
                request.method,
                request.url.path,
            )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient permissions")
        return user

    return _dependency


require_admin = require_role(["admin"])
