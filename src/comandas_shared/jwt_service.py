"""
JWT helpers for tokens issued by the restaurant backend.

The frontend never validates signatures: the backend is the authority and
rejects bad tokens with 401. Claims are only read to recover profile data the
login response may have omitted.
"""

from __future__ import annotations

from typing import Any

import jwt

from comandas_shared.logging_config import get_logger

logger = get_logger(__name__)

# Claim names the backend has used for the user id, in lookup order
USER_ID_CLAIMS = ("id", "id_usuario", "idUsuario", "userId", "user_id", "sub")


class JWTError(Exception):
    """Base exception for JWT errors."""

    def __init__(self, message: str, status: int = 401):
        self.message = message
        self.status = status
        super().__init__(message)


class InvalidTokenError(JWTError):
    """Token is invalid or malformed."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, 401)


def read_claims(token: str) -> dict[str, Any]:
    """
    Decode the token payload without verifying signature or expiry.

    Raises:
        InvalidTokenError: If the token is not a well-formed JWT
    """
    if not token:
        raise InvalidTokenError("Empty token")
    try:
        return jwt.decode(
            token,
            options={"verify_signature": False, "verify_exp": False},
            algorithms=["HS256", "HS384", "HS512", "RS256"],
        )
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(f"Invalid token: {e}") from e


def extract_user_id_from_claims(claims: dict[str, Any]) -> str | None:
    """Return the first non-empty user id claim, as a string."""
    for claim in USER_ID_CLAIMS:
        value = claims.get(claim)
        if value is not None and str(value).strip():
            return str(value).strip()
    return None


def extract_user_id(token: str | None) -> str | None:
    if not token:
        return None
    try:
        claims = read_claims(token)
    except InvalidTokenError as e:
        logger.warning(f"Could not read user id from token: {e.message}")
        return None
    return extract_user_id_from_claims(claims)
