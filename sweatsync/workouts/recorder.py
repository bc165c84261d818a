"""Workout completion recorder.

Validates a finished session and stores it as one Completed Workout row.
"""

from __future__ import annotations

from loguru import logger
from sqlalchemy.exc import IntegrityError

from sweatsync.core.errors import CompletionValidationError
from sweatsync.db.models import CompletedWorkout
from sweatsync.db.store import Store
from sweatsync.workouts.repository import find_by_idempotency_key, insert_completed_workout
from sweatsync.workouts.types import CompletedWorkoutRecord, CompletionRequest, build_payload


def _validate_completion(request: CompletionRequest) -> str:
    """Check required fields and return the workout name.

    Raises:
        CompletionValidationError: If date, workout name or exercises are missing
    """
    workout_name = request.workout.name.strip() if request.workout and request.workout.name else ""
    if request.date is None or not workout_name or not request.exercises:
        raise CompletionValidationError("Date, workout, and exercises are required")

    for index, exercise in enumerate(request.exercises):
        if not exercise.name.strip():
            raise CompletionValidationError(f"Exercise {index + 1} must have a name")
    return workout_name


class CompletionRecorder:
    """Persists completed workouts for an authenticated account."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def record(self, account_id: int, request: CompletionRequest) -> tuple[CompletedWorkoutRecord, bool]:
        """Validate and store a completed workout.

        Submissions are not deduplicated by content; several sessions on the
        same date are normal. When an idempotency key is supplied and a row
        with that key already exists for the account, that row is returned
        instead of inserting a second one. That also holds when a concurrent
        request with the same key commits between the lookup and the insert.

        Returns:
            Tuple of (stored record, whether a new row was created)

        Raises:
            CompletionValidationError: If required fields are missing (nothing is written)
            PersistenceError: If the store fails
        """
        workout_name = _validate_completion(request)
        exercises = request.exercises or []

        logger.info(
            f"[COMPLETE] Workout received for account_id={account_id}: date={request.date}, "
            f"workout='{workout_name}', exercises={len(exercises)}"
        )
        for exercise in exercises:
            if not exercise.sets:
                logger.warning(f"[COMPLETE] Exercise '{exercise.name}' has no recorded sets (account_id={account_id})")

        with self.store.session("insert_completed_workout", account_id) as session:
            if request.idempotency_key:
                existing = find_by_idempotency_key(session, account_id, request.idempotency_key)
                if existing is not None:
                    return self._replay(account_id, request.idempotency_key, existing), False

            try:
                row = insert_completed_workout(
                    session,
                    account_id=account_id,
                    workout_date=request.date,
                    payload=build_payload(workout_name, exercises),
                    idempotency_key=request.idempotency_key,
                )
            except IntegrityError:
                # A concurrent retry with the same key committed first
                session.rollback()
                existing = (
                    find_by_idempotency_key(session, account_id, request.idempotency_key)
                    if request.idempotency_key
                    else None
                )
                if existing is None:
                    raise
                return self._replay(account_id, request.idempotency_key, existing), False
            record = CompletedWorkoutRecord.from_row(row)

        logger.info(f"[COMPLETE] Saved workout id={record.id} for account_id={account_id}")
        return record, True

    @staticmethod
    def _replay(account_id: int, idempotency_key: str, existing: CompletedWorkout) -> CompletedWorkoutRecord:
        logger.info(
            f"[COMPLETE] Replay of idempotency_key={idempotency_key} for account_id={account_id}, "
            f"returning workout id={existing.id}"
        )
        return CompletedWorkoutRecord.from_row(existing)
