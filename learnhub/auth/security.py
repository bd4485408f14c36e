"""JWT helpers.

Tokens are issued by the platform's identity provider; this service only
verifies them. ``create_access_token`` mints compatible tokens for local
scripts and tests.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from learnhub.config.settings import get_settings


def create_access_token(
    data: dict[str, Any],
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT access token.

    Args:
        data: Payload data (typically {"sub": user_id, "email": email, "role": role})
        expires_delta: Token lifetime (default from settings)

    Returns:
        Encoded JWT string
    """
    settings = get_settings()

    to_encode = data.copy()
    now = datetime.now(UTC)
    expire = now + (
        expires_delta or timedelta(minutes=settings.auth_access_token_expire_minutes)
    )

    to_encode.update({"exp": expire, "iat": now, "type": "access"})
    if settings.auth_audience and "aud" not in to_encode:
        to_encode["aud"] = settings.auth_audience

    return jwt.encode(
        to_encode,
        settings.auth_secret_key,
        algorithm=settings.auth_algorithm,
    )


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode and validate an access token.

    Validates:
    - JWT signature
    - Expiration time
    - Audience, when one is configured
    - Token type == "access"
    - Presence of sub and role claims

    Raises:
        JWTError: If token is invalid, expired, or malformed
    """
    settings = get_settings()

    payload = jwt.decode(
        token,
        settings.auth_secret_key,
        algorithms=[settings.auth_algorithm],
        audience=settings.auth_audience,
        options={"verify_aud": settings.auth_audience is not None},
    )

    if payload.get("type") != "access":
        msg = "Invalid token type: expected 'access'"
        raise JWTError(msg)

    if not payload.get("sub") or not payload.get("role"):
        msg = "Token missing sub or role claim"
        raise JWTError(msg)

    return payload
