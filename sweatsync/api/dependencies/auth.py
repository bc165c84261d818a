"""FastAPI authentication dependency for JWT-based auth.

Provides get_current_account, which extracts and verifies the bearer token
from the Authorization header and loads the account it names.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from loguru import logger
from pydantic import BaseModel

from sweatsync.api.dependencies.services import get_settings, get_store
from sweatsync.core.auth_jwt import decode_access_token
from sweatsync.users.account_repository import AccountRepository

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login", auto_error=False)


class AuthenticatedAccount(BaseModel):
    """Verified identity handed to every core operation."""

    id: int
    username: str


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_account(request: Request, token: str | None = Depends(oauth2_scheme)) -> AuthenticatedAccount:
    """FastAPI dependency to get the authenticated account from a JWT.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired, or names
            an account that no longer exists
    """
    if not token:
        logger.warning(f"[AUTH] Missing bearer token, Path: {request.url.path}, Method: {request.method}")
        raise _unauthorized("Access token required")

    try:
        account_id = decode_access_token(token, get_settings(request))
    except ValueError as e:
        logger.warning(f"[AUTH] Auth failed: {e}, Path: {request.url.path}, Method: {request.method}")
        raise _unauthorized("Invalid or expired token") from e

    with get_store(request).session("find_account_by_id", account_id) as session:
        account = AccountRepository.find_by_id(session, account_id)
        if account is None:
            logger.warning(f"[AUTH] Auth failed: account not found account_id={account_id}, Path: {request.url.path}")
            raise _unauthorized("Account not found")
        return AuthenticatedAccount(id=account.id, username=account.username)
