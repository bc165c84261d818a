"""History access: list and delete an account's completed workouts.

Every query filters on the owning account id. That filter is a security
boundary, not a convenience.
"""

from __future__ import annotations

from loguru import logger

from sweatsync.core.errors import ValidationFailure, WorkoutAccessDeniedError, WorkoutNotFoundError
from sweatsync.db.store import Store
from sweatsync.workouts.repository import delete_for_account, find_by_id, list_for_account
from sweatsync.workouts.types import CompletedWorkoutRecord


class HistoryAccessor:
    def __init__(self, store: Store, default_limit: int = 10, max_limit: int = 100) -> None:
        self.store = store
        self.default_limit = default_limit
        self.max_limit = max_limit

    def list_workouts(self, account_id: int, limit: int | None = None) -> list[CompletedWorkoutRecord]:
        """List the account's workouts, most recent date first.

        Raises:
            ValidationFailure: If limit is outside 1..max_limit
        """
        limit = self.default_limit if limit is None else limit
        if limit < 1 or limit > self.max_limit:
            raise ValidationFailure(f"limit must be between 1 and {self.max_limit}")

        with self.store.session("list_completed_workouts", account_id) as session:
            records = [CompletedWorkoutRecord.from_row(row) for row in list_for_account(session, account_id, limit)]

        logger.debug(f"[HISTORY] Returning {len(records)} workouts for account_id={account_id} (limit={limit})")
        return records

    def delete_workout(self, account_id: int, workout_id: int) -> int:
        """Delete one of the account's workouts.

        Returns:
            Number of rows removed

        Raises:
            WorkoutNotFoundError: If no workout has this id (including one already deleted)
            WorkoutAccessDeniedError: If the workout belongs to another account
        """
        with self.store.session("delete_completed_workout", account_id) as session:
            workout = find_by_id(session, workout_id)
            if workout is None:
                logger.info(f"[HISTORY] Delete of missing workout id={workout_id} by account_id={account_id}")
                raise WorkoutNotFoundError(workout_id)
            if workout.account_id != account_id:
                logger.warning(
                    f"[HISTORY] account_id={account_id} attempted to delete workout id={workout_id} owned by another account"
                )
                raise WorkoutAccessDeniedError(workout_id)

            removed = delete_for_account(session, workout_id, account_id)
            if removed == 0:
                # Deleted concurrently between the lookup and the delete
                raise WorkoutNotFoundError(workout_id)

        logger.info(f"[HISTORY] Deleted workout id={workout_id} for account_id={account_id}")
        return removed
