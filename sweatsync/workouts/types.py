"""Domain types for completed workouts.

A set records either reps and weight, or a duration in seconds, plus optional
notes. Durations submitted as "time" are stored and returned as "duration".
Form clients send blank strings for untouched inputs, so those are read as
missing values. Keys the models do not know are kept in the stored payload.
"""

from __future__ import annotations

import datetime as dt

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from sweatsync.db.models import CompletedWorkout

MAX_REPS = 1000
MAX_WEIGHT = 2000
MAX_DURATION_SECONDS = 3600


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CompletedSet(BaseModel):
    """One recorded set: {reps, weight} or {duration}, with optional notes."""

    model_config = ConfigDict(extra="allow")

    reps: int | None = Field(default=None, ge=0, le=MAX_REPS)
    weight: float | None = Field(default=None, ge=0, le=MAX_WEIGHT)
    duration: float | None = Field(default=None, validation_alias=AliasChoices("duration", "time"), ge=0, le=MAX_DURATION_SECONDS)
    notes: str | None = None

    @field_validator("reps", "weight", "duration", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def check_single_shape(self) -> CompletedSet:
        has_strength = self.reps is not None or self.weight is not None
        if has_strength and self.duration is not None:
            raise ValueError("a set records either reps/weight or duration, not both")
        return self


class CompletedExercise(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    sets: list[CompletedSet] = Field(default_factory=list)
    notes: str = ""

    @field_validator("notes", mode="before")
    @classmethod
    def none_notes_to_empty(cls, v: object) -> object:
        return "" if v is None else v

    @field_validator("sets", mode="before")
    @classmethod
    def none_sets_to_empty(cls, v: object) -> object:
        return [] if v is None else v


class WorkoutRef(BaseModel):
    """The planned workout a completion refers to. Only the name is kept."""

    name: str | None = None


class CompletionRequest(BaseModel):
    """Submitted workout session.

    Fields are optional at the schema level so that missing values are
    reported by the recorder with a specific reason.
    """

    model_config = ConfigDict(populate_by_name=True)

    date: dt.date | None = None
    workout: WorkoutRef | None = None
    exercises: list[CompletedExercise] | None = None
    idempotency_key: str | None = Field(default=None, alias="idempotencyKey", max_length=128)

    @field_validator("date", mode="before")
    @classmethod
    def blank_date(cls, v: object) -> object:
        return _blank_to_none(v)


class CompletedWorkoutRecord(BaseModel):
    """A stored completed workout with its payload deserialized."""

    id: int
    date: dt.date
    workout_name: str
    exercises: list[CompletedExercise]
    completed_at: dt.datetime
    idempotency_key: str | None = None

    @classmethod
    def from_row(cls, row: CompletedWorkout) -> CompletedWorkoutRecord:
        payload = row.payload or {}
        return cls(
            id=row.id,
            date=row.date,
            workout_name=payload.get("workout_name", ""),
            exercises=[CompletedExercise.model_validate(exercise) for exercise in payload.get("exercises", [])],
            completed_at=row.completed_at,
            idempotency_key=row.idempotency_key,
        )


def build_payload(workout_name: str, exercises: list[CompletedExercise]) -> dict:
    """Serialize a completion into the JSON payload stored with the row."""
    return {
        "workout_name": workout_name,
        "exercises": [exercise.model_dump(exclude_none=True) for exercise in exercises],
    }
