"""JWT bearer tokens for API and WebSocket authentication.

The subject claim carries the user id (as a string, per RFC 7519); role and
username ride along for display only and are re-read from the database on
every request.
"""

from datetime import timedelta
from typing import Any, cast

from jose import JWTError, jwt

from app.core.config import get_settings
from app.shared.utils.datetime import utc_now


def create_access_token(
    user_id: int,
    extra_claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token for user_id.

    Args:
        user_id: Authenticated user's id (stored in ``sub``).
        extra_claims: Optional non-authoritative claims (e.g. username, role).
        expires_delta: Optional TTL; else uses settings.access_token_expire_minutes.

    Returns:
        Encoded JWT string.
    """
    settings = get_settings()
    ttl = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    claims = dict(extra_claims or {})
    claims.update({"sub": str(user_id), "exp": utc_now() + ttl})
    encoded = jwt.encode(
        claims,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Raises:
        ValueError: If the token is invalid, expired, or missing exp/sub.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    return payload


def user_id_from_token(token: str) -> int:
    """Return the user id in a valid token's subject.

    Raises:
        ValueError: If the token is invalid or its subject is not a user id.
    """
    sub = verify_token(token).get("sub")
    try:
        return int(sub)
    except (TypeError, ValueError) as e:
        raise ValueError("Token subject is not a user id") from e
