"""Repository for account data access."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sweatsync.core.errors import UsernameTakenError
from sweatsync.db.models import Account


class AccountRepository:
    """Repository for account data access."""

    @staticmethod
    def create(session: Session, username: str, password_hash: str) -> Account:
        """Insert a new account.

        Raises:
            UsernameTakenError: If the username is already registered
        """
        account = Account(username=username, password_hash=password_hash)
        session.add(account)
        try:
            session.flush()
        except IntegrityError as e:
            session.rollback()
            raise UsernameTakenError(username) from e
        return account

    @staticmethod
    def find_by_username(session: Session, username: str) -> Account | None:
        return session.execute(select(Account).where(Account.username == username)).scalar_one_or_none()

    @staticmethod
    def find_by_id(session: Session, account_id: int) -> Account | None:
        return session.get(Account, account_id)
