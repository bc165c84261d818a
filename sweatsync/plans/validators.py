"""Validators for uploaded plan documents.

Rules run in order and the first failure wins:
1. name is a non-empty string
2. schedule is a non-empty mapping
3. every schedule key is a weekday name (case-insensitive, normalized to lowercase)
4. every exercise has a name, a type of "reps" or "time", and at least one set

Nothing here touches the database.
"""

from typing import Any

from loguru import logger
from pydantic import ValidationError

from sweatsync.core.errors import PlanValidationError
from sweatsync.plans.types import WEEKDAYS, ValidatedPlan, WorkoutDefinition

VALID_EXERCISE_KINDS = ("reps", "time")


def _validate_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise PlanValidationError("Workout plan name is required and must be a non-empty string")
    return name.strip()


def _validate_schedule_shape(schedule: Any) -> dict:
    if not isinstance(schedule, dict):
        raise PlanValidationError("Invalid workout plan format. Must include a schedule object.")
    if not schedule:
        raise PlanValidationError("Workout plan must include at least one day in its schedule")
    return schedule


def _normalize_day_keys(schedule: dict) -> dict[str, Any]:
    normalized: dict[str, Any] = {}
    for key in schedule:
        day = key.strip().lower() if isinstance(key, str) else None
        if day not in WEEKDAYS:
            raise PlanValidationError(f"Invalid day '{key}' in schedule. Expected one of: {', '.join(WEEKDAYS)}")
        if day in normalized:
            raise PlanValidationError(f"Day '{day}' appears more than once in schedule")
        normalized[day] = schedule[key]
    return normalized


def _validate_exercise(day: str, index: int, exercise: Any) -> dict:
    position = f"Exercise {index + 1} on {day}"
    if not isinstance(exercise, dict):
        raise PlanValidationError(f"{position} must be an object")

    name = exercise.get("name")
    if not isinstance(name, str) or not name.strip():
        raise PlanValidationError(f"{position} must have a name")

    kind = exercise.get("type", exercise.get("kind"))
    if kind not in VALID_EXERCISE_KINDS:
        raise PlanValidationError(f"Exercise '{name}' on {day} has invalid type {kind!r}. Must be 'reps' or 'time'")

    sets = exercise.get("sets")
    if isinstance(sets, bool) or not isinstance(sets, int) or sets < 1:
        raise PlanValidationError(f"Exercise '{name}' on {day} must have a set count of at least 1")

    cleaned = {k: v for k, v in exercise.items() if k != "kind"}
    cleaned["name"] = name.strip()
    cleaned["type"] = kind
    return cleaned


def _validate_workout(day: str, workout: Any) -> dict | None:
    # A day mapped to null is an explicit rest day
    if workout is None:
        return None
    if not isinstance(workout, dict):
        raise PlanValidationError(f"Workout for {day} must be an object with an exercises list")

    exercises = workout.get("exercises")
    if not isinstance(exercises, list):
        raise PlanValidationError(f"Workout for {day} must include an exercises list")

    name = workout.get("name")
    if not isinstance(name, str) or not name.strip():
        name = day.capitalize()

    return {
        **workout,
        "name": name.strip(),
        "exercises": [_validate_exercise(day, i, exercise) for i, exercise in enumerate(exercises)],
    }


def validate_plan_document(name: Any, schedule: Any) -> ValidatedPlan:
    """Validate a candidate plan and return it in canonical form.

    Args:
        name: Candidate display name
        schedule: Candidate mapping of weekday -> workout definition

    Returns:
        ValidatedPlan with lowercase day keys

    Raises:
        PlanValidationError: On the first rule that fails
    """
    plan_name = _validate_name(name)
    raw_schedule = _validate_schedule_shape(schedule)
    by_day = _normalize_day_keys(raw_schedule)

    cleaned = {day: _validate_workout(day, workout) for day, workout in by_day.items()}

    try:
        validated = ValidatedPlan(
            name=plan_name,
            schedule={
                day: WorkoutDefinition.model_validate(workout) if workout is not None else None
                for day, workout in cleaned.items()
            },
        )
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise PlanValidationError(f"Invalid workout plan field '{location}': {first.get('msg')}") from e

    logger.debug(f"[PLAN] Validated plan '{plan_name}' with days={list(validated.schedule)}")
    return validated
