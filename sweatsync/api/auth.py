"""Authentication endpoints for JWT-based auth.

Provides username/password registration and login, plus endpoints that echo
the authenticated identity.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from loguru import logger
from pydantic import BaseModel

from sweatsync.api.dependencies.auth import AuthenticatedAccount, get_current_account
from sweatsync.api.dependencies.services import get_settings, get_store
from sweatsync.core.auth_jwt import create_access_token
from sweatsync.core.errors import AccountNotFoundError
from sweatsync.core.password import MAX_PASSWORD_LENGTH, MIN_PASSWORD_LENGTH, hash_password, verify_password
from sweatsync.users.account_repository import AccountRepository

router = APIRouter(prefix="/api/auth", tags=["auth"])


class CredentialsRequest(BaseModel):
    """Register/login request model. Missing values are reported as 400."""

    username: str = ""
    password: str = ""


def _auth_response(request: Request, account_id: int, username: str, message: str) -> dict:
    token = create_access_token(account_id, get_settings(request))
    return {
        "message": message,
        "user": {"id": account_id, "username": username},
        "token": token,
        "token_type": "bearer",
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(body: CredentialsRequest, request: Request):
    """Create an account and return a token.

    Raises:
        HTTPException: 400 if username/password missing or password too short
        UsernameTakenError: 409 if the username already exists
    """
    username = body.username.strip()
    if not username or not body.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username and password are required")
    if len(body.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
        )
    if len(body.password) > MAX_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Password must be at most {MAX_PASSWORD_LENGTH} characters",
        )

    logger.info(f"[AUTH] Registration requested for username={username}")
    password_hash = hash_password(body.password)
    with get_store(request).session("create_account") as session:
        account = AccountRepository.create(session, username, password_hash)
        account_id = account.id

    logger.info(f"[AUTH] Account created: account_id={account_id}, username={username}")
    return _auth_response(request, account_id, username, "User created successfully")


@router.post("/login")
def login(body: CredentialsRequest, request: Request):
    """Verify credentials and return a token.

    Raises:
        HTTPException: 400 if fields are missing, 401 on bad credentials
    """
    username = body.username.strip()
    if not username or not body.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username and password are required")

    with get_store(request).session("find_account_by_username") as session:
        account = AccountRepository.find_by_username(session, username)
        credentials = (account.id, account.password_hash) if account else None

    if credentials is None or not verify_password(body.password, credentials[1]):
        logger.warning(f"[AUTH] Login failed for username={username}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info(f"[AUTH] Login successful for account_id={credentials[0]}")
    return _auth_response(request, credentials[0], username, "Login successful")


@router.get("/validate")
def validate_token(account: AuthenticatedAccount = Depends(get_current_account)):
    return {"id": account.id, "username": account.username}


@router.get("/me")
def me(request: Request, account: AuthenticatedAccount = Depends(get_current_account)):
    with get_store(request).session("find_account_by_id", account.id) as session:
        row = AccountRepository.find_by_id(session, account.id)
        if row is None:
            raise AccountNotFoundError(f"Account {account.id} not found")
        return {"user": {"id": row.id, "username": row.username, "created_at": row.created_at.isoformat()}}
