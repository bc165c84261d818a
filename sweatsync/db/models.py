from __future__ import annotations

from datetime import date, datetime, timezone

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all database models."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Account(Base):
    """Account table for authentication and ownership.

    Stores:
    - id: Autoincrement primary key
    - username: Unique login name
    - password_hash: bcrypt hash (never the raw password)
    - created_at: Timestamp when the account was registered

    Accounts are immutable after registration.
    """

    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)


class PlanDocument(Base):
    """Weekly workout plan uploaded by an account.

    Schema:
    - id: Autoincrement primary key
    - account_id: Owning account
    - name: Display name
    - schedule: JSON mapping of lowercase weekday name -> workout definition
    - active: Whether this is the plan the account currently trains from
    - created_at: Upload timestamp

    Constraints:
    - At most one active plan per account, enforced by a partial unique index
      on account_id restricted to active rows.

    The system default plan is file-backed and never stored here.
    """

    __tablename__ = "plan_documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    schedule: Mapped[dict] = mapped_column(JSON, nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)

    __table_args__ = (
        Index(
            "uq_plan_documents_one_active_per_account",
            "account_id",
            unique=True,
            sqlite_where=text("active = 1"),
            postgresql_where=text("active"),
        ),
    )


class CompletedWorkout(Base):
    """Immutable record of a workout the account actually performed.

    Schema:
    - id: Autoincrement primary key
    - account_id: Owning account
    - date: Calendar date the workout was done
    - payload: JSON {workout_name, exercises: [{name, sets, notes}]}, opaque to the store
    - completed_at: Submission timestamp
    - idempotency_key: Optional client key; replays with the same key return the stored row

    Rows are only ever inserted or deleted, never updated.
    """

    __tablename__ = "completed_workouts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    account_id: Mapped[int] = mapped_column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)
    idempotency_key: Mapped[str | None] = mapped_column(String(128), nullable=True)

    __table_args__ = (
        UniqueConstraint("account_id", "idempotency_key", name="uq_completed_workouts_account_idempotency_key"),
        Index("idx_completed_workouts_account_date", "account_id", "date"),
    )
