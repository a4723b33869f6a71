"""JWT issue / verify for StakeX sessions.

Tokens are HS256 with the server-side JWT_SECRET; there is deliberately no
default secret, Settings refuses to start without one. The payload carries
the user id in ``sub`` and the token kind in ``type`` so that a refresh token
can never be presented as an access token.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from config.settings import settings
from src.sx_common.errors import InvalidCredentialsError, InvalidRefreshTokenError

ACCESS = "access"
REFRESH = "refresh"

_LIFETIMES = {
    ACCESS: timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    REFRESH: timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS),
}


def _issue(user_id: str, kind: str) -> str:
    now = datetime.now(UTC)
    claims = {"sub": user_id, "type": kind, "iat": now, "exp": now + _LIFETIMES[kind]}
    return str(jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM))


def create_access_token(user_id: str) -> str:
    return _issue(user_id, ACCESS)


def create_refresh_token(user_id: str) -> str:
    return _issue(user_id, REFRESH)


def access_token_ttl_seconds() -> int:
    return int(_LIFETIMES[ACCESS].total_seconds())


def decode_token(token: str, expected_type: str) -> dict[str, str]:
    """Return the claims of a valid token of the expected kind.

    Raises InvalidCredentialsError for a bad access token and
    InvalidRefreshTokenError for a bad refresh token.
    """
    error = InvalidCredentialsError if expected_type == ACCESS else InvalidRefreshTokenError
    try:
        claims: dict[str, str] = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError:
        raise error() from None
    if claims.get("type") != expected_type or not claims.get("sub"):
        raise error()
    return claims
