"""JWT token creation and verification utilities.

Handles stateless JWT tokens issued by the backend for account authentication.
Tokens contain the account id in the 'sub' claim.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from loguru import logger

from sweatsync.config.settings import Settings, settings


def create_access_token(account_id: int, app_settings: Settings | None = None) -> str:
    """Create a JWT access token for an account.

    Args:
        account_id: Account ID to encode in token
        app_settings: Settings carrying the signing key (defaults to process settings)

    Returns:
        JWT token string
    """
    if account_id is None:
        raise ValueError("account_id cannot be None")
    cfg = app_settings or settings

    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(account_id),
        "exp": now + timedelta(hours=cfg.auth_token_expire_hours),
        "iat": now,
        "iss": "sweatsync-backend",
    }
    return jwt.encode(
        payload,
        cfg.auth_secret_key,
        algorithm=cfg.auth_algorithm,
    )


def decode_access_token(token: str, app_settings: Settings | None = None) -> int:
    """Decode and verify a JWT access token.

    Args:
        token: JWT token string
        app_settings: Settings carrying the signing key (defaults to process settings)

    Returns:
        Account ID from token 'sub' claim

    Raises:
        ValueError: If token is invalid or expired
    """
    cfg = app_settings or settings
    try:
        payload = jwt.decode(
            token,
            cfg.auth_secret_key,
            algorithms=[cfg.auth_algorithm],
        )
    except JWTError as e:
        logger.warning(f"JWT decode failed: {e}")
        raise ValueError("Invalid or expired token") from e

    subject = payload.get("sub")
    if not subject:
        raise ValueError("Token missing account ID")
    try:
        return int(subject)
    except (TypeError, ValueError) as e:
        raise ValueError("Token carries a malformed account ID") from e
