"""Repository functions for completed workout persistence.

Payloads are stored as opaque JSON; nothing here looks inside them.
"""

from datetime import date

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from sweatsync.db.models import CompletedWorkout


def insert_completed_workout(
    session: Session,
    *,
    account_id: int,
    workout_date: date,
    payload: dict,
    idempotency_key: str | None = None,
) -> CompletedWorkout:
    """Insert one completed workout row and flush to get its id."""
    workout = CompletedWorkout(
        account_id=account_id,
        date=workout_date,
        payload=payload,
        idempotency_key=idempotency_key,
    )
    session.add(workout)
    session.flush()
    return workout


def find_by_idempotency_key(session: Session, account_id: int, idempotency_key: str) -> CompletedWorkout | None:
    stmt = (
        select(CompletedWorkout)
        .where(CompletedWorkout.account_id == account_id)
        .where(CompletedWorkout.idempotency_key == idempotency_key)
    )
    return session.execute(stmt).scalar_one_or_none()


def find_by_id(session: Session, workout_id: int) -> CompletedWorkout | None:
    """Look a workout up by id regardless of owner. Callers enforce ownership."""
    return session.get(CompletedWorkout, workout_id)


def list_for_account(session: Session, account_id: int, limit: int) -> list[CompletedWorkout]:
    """List the account's workouts, most recent date first."""
    stmt = (
        select(CompletedWorkout)
        .where(CompletedWorkout.account_id == account_id)
        .order_by(
            CompletedWorkout.date.desc(),
            CompletedWorkout.completed_at.desc(),
            CompletedWorkout.id.desc(),
        )
        .limit(limit)
    )
    return list(session.execute(stmt).scalars().all())


def delete_for_account(session: Session, workout_id: int, account_id: int) -> int:
    """Delete a workout only if it belongs to the account.

    Returns:
        Number of rows removed (0 or 1)
    """
    stmt = (
        delete(CompletedWorkout)
        .where(CompletedWorkout.id == workout_id)
        .where(CompletedWorkout.account_id == account_id)
    )
    result = session.execute(stmt)
    return result.rowcount or 0
