from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from orders_api.core import config

logger = logging.getLogger(__name__)

ROLE_ADMIN = "Admin"
ROLE_USER = "User"


@dataclass(frozen=True)
class Account:
    username: str
    password_hash: str
    role: str


@dataclass(frozen=True)
class CurrentUser:
    username: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role.lower() == ROLE_ADMIN.lower()


# =========================
# PASSWORD (bcrypt)
# =========================
def _normalize_password_for_bcrypt(password: str) -> bytes:
    """bcrypt only looks at the first 72 bytes; longer input is truncated."""
    return (password or "").encode("utf-8")[:72]


def hash_password(password: str) -> str:
    hashed = bcrypt.hashpw(_normalize_password_for_bcrypt(password), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_normalize_password_for_bcrypt(plain_password), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


# =========================
# ACCOUNTS
# =========================
@lru_cache(maxsize=1)
def get_accounts() -> Dict[str, Account]:
    """Fixed accounts, hashed once per process."""
    accounts = [
        Account(config.ADMIN_USERNAME, hash_password(config.ADMIN_PASSWORD), ROLE_ADMIN),
        Account(config.USER_USERNAME, hash_password(config.USER_PASSWORD), ROLE_USER),
    ]
    return {account.username: account for account in accounts}


def authenticate(username: str, password: str) -> Optional[Account]:
    account = get_accounts().get((username or "").strip())
    if account is None or not verify_password(password, account.password_hash):
        logger.info("Login rejected for username=%s", username)
        return None
    return account


# =========================
# JWT HELPERS
# =========================
def create_access_token(
    account: Account,
    expires_minutes: Optional[int] = None,
) -> str:
    now = datetime.now(timezone.utc)
    exp = now + timedelta(minutes=expires_minutes if expires_minutes is not None else config.JWT_EXPIRE_MINUTES)

    payload: Dict[str, Any] = {
        "sub": account.username,
        "role": account.role,
        "iss": config.JWT_ISSUER,
        "aud": config.JWT_AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
    }
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    """Return the JWT payload or raise ValueError when the token is invalid or expired."""
    try:
        return jwt.decode(
            token,
            config.JWT_SECRET_KEY,
            algorithms=[config.JWT_ALGORITHM],
            audience=config.JWT_AUDIENCE,
            issuer=config.JWT_ISSUER,
        )
    except JWTError as e:
        raise ValueError("Invalid or expired token") from e
