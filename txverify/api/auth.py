"""Caller authentication for the verification API.

Two credential types are accepted in the ``Authorization: Bearer`` header:
- JWTs signed with ``JWT_SECRET_KEY`` (``sub`` is the caller id)
- API keys (``txv_sk_`` + 32 hex chars) checked against ``API_KEYS`` records,
  each ``<lookup prefix>:<bcrypt hash>``
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Annotated

import bcrypt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from ..config import Settings, get_settings
from ..logging_config import log_auth_event

# Bearer token scheme; missing credentials are reported by get_current_caller
security = HTTPBearer(auto_error=False)

# API Key prefix
API_KEY_PREFIX = "txv_sk_"


def generate_api_key() -> str:
    """Generate an API key in format: txv_sk_ + 32 hex chars."""
    return f"{API_KEY_PREFIX}{secrets.token_hex(16)}"


def get_api_key_prefix(key: str) -> str:
    """Lookup prefix stored next to the hash: ``txv_sk_`` plus 5 hex chars."""
    return key[:12]


def hash_api_key(key: str, rounds: int = 12) -> str:
    """Hash an API key using bcrypt."""
    return bcrypt.hashpw(key.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def api_key_record(key: str, rounds: int = 12) -> str:
    """``API_KEYS`` entry for a key: its lookup prefix and bcrypt hash."""
    return f"{get_api_key_prefix(key)}:{hash_api_key(key, rounds=rounds)}"


def verify_api_key(plain_key: str, hashed: str) -> bool:
    """Verify an API key against its hash."""
    try:
        return bcrypt.checkpw(plain_key.encode(), hashed.encode())
    except ValueError:
        # Malformed hash in configuration
        return False


def is_api_key(token: str) -> bool:
    """Check if a token is an API key (vs JWT)."""
    return token.startswith(API_KEY_PREFIX)


def create_access_token(
    caller_id: str,
    settings: Settings,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token for a caller."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode = {
        "sub": caller_id,
        "exp": expire,
        "iat": now,
        "type": "access",
    }
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_token(token: str, settings: Settings) -> dict:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise _unauthorized("Invalid or expired token")


def authenticate_api_key(key: str, settings: Settings) -> str | None:
    """Return the caller id owning ``key``, or None.

    Only records whose prefix matches are hashed, so an unknown key costs no
    bcrypt work at all.
    """
    prefix = get_api_key_prefix(key)
    for caller_id, record in settings.api_keys.items():
        stored_prefix, _, hashed = record.partition(":")
        if not hashed or stored_prefix != prefix:
            continue
        if verify_api_key(key, hashed):
            return caller_id
    return None


class CallerContext:
    """Authenticated caller identity."""

    def __init__(self, caller_id: str, auth_method: str = "jwt"):
        self.caller_id = caller_id
        self.auth_method = auth_method


async def get_current_caller(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
    request: Request,
) -> CallerContext:
    """Resolve the caller from the bearer credential.

    The caller id is stored on ``request.state`` so the rate limiter can key
    on it.
    """
    if not credentials or not credentials.credentials:
        log_auth_event("missing_credentials")
        raise _unauthorized("Not authenticated - provide Authorization header")

    token = credentials.credentials
    if is_api_key(token):
        caller_id = authenticate_api_key(token, settings)
        if not caller_id:
            log_auth_event("invalid_api_key")
            raise _unauthorized("Invalid API key")
        context = CallerContext(caller_id, auth_method="api_key")
    else:
        payload = decode_token(token, settings)
        caller_id = payload.get("sub")
        if not caller_id or payload.get("type") != "access":
            log_auth_event("invalid_token_payload")
            raise _unauthorized("Invalid token payload")
        context = CallerContext(caller_id, auth_method="jwt")

    request.state.caller_id = context.caller_id
    log_auth_event("success", caller_id=context.caller_id)
    return context


# Type alias for dependency injection
CurrentCaller = Annotated[CallerContext, Depends(get_current_caller)]
