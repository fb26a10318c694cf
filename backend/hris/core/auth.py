"""Supabase access-token helpers: claim decoding and optional local verification."""

from __future__ import annotations

import logging
import time
from typing import Any

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

logger = logging.getLogger(__name__)

SUPABASE_AUDIENCE = "authenticated"
_ALGORITHMS = ["HS256"]


class TokenError(Exception):
    """Raised when an access token cannot be decoded or verified."""


def get_unverified_claims(token: str) -> dict[str, Any]:
    try:
        return jwt.get_unverified_claims(token)
    except JWTError as e:
        raise TokenError(f"Invalid token: {e}") from e


def verify_token(token: str, secret: str) -> dict[str, Any]:
    if not secret:
        raise TokenError("Missing JWT secret")

    options = {
        "verify_signature": True,
        "verify_aud": True,
        "verify_exp": True,
        "require_exp": True,
        "require_sub": True,
    }

    try:
        return jwt.decode(
            token,
            secret,
            algorithms=_ALGORITHMS,
            audience=SUPABASE_AUDIENCE,
            options=options,
        )
    except ExpiredSignatureError as e:
        raise TokenError("Token is expired") from e
    except (JWTClaimsError, JWTError) as e:
        raise TokenError(f"Invalid token: {e}") from e


def token_expires_at(token: str) -> int | None:
    try:
        claims = get_unverified_claims(token)
    except TokenError:
        return None
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, int | float):
        return None
    return int(exp)


def is_expired(expires_at: int | None, now: float | None = None) -> bool:
    if expires_at is None:
        return False
    current = time.time() if now is None else now
    return current >= expires_at


def extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None
