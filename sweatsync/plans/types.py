"""Domain types for weekly workout plans.

The schedule inside a plan document is always stored and returned in this
canonical shape, so consumers never guess where exercises live.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer

ExerciseKind = Literal["reps", "time"]
PlanSource = Literal["user", "default"]
DayStatus = Literal["scheduled", "rest_day"]

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def weekday_name(day: date) -> str:
    """Lowercase English weekday name for a calendar date."""
    return WEEKDAYS[day.weekday()]


class ExerciseDefinition(BaseModel):
    """Planned exercise: target sets x reps-or-duration.

    Attributes:
        name: Exercise name
        sets: Target set count (>= 1)
        kind: "reps" or "time" (serialized as "type")
        target_reps: Free-form rep target, e.g. 8 or "8-12"
        target_time: Free-form duration target, e.g. "30s"
        notes: Coaching notes

    Keys not listed here (rest periods, tempo, links) are kept as uploaded.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    sets: int = Field(ge=1)
    kind: ExerciseKind = Field(alias="type")
    target_reps: int | str | None = None
    target_time: int | str | None = None
    notes: str = ""

    @field_validator("notes", mode="before")
    @classmethod
    def none_notes_to_empty(cls, v: object) -> object:
        return "" if v is None else v

    @model_serializer(mode="wrap")
    def drop_unset_targets(self, handler):
        data = handler(self)
        for key in ("target_reps", "target_time"):
            if data.get(key) is None:
                data.pop(key, None)
        return data


class WorkoutDefinition(BaseModel):
    """A named, ordered list of planned exercises. Extra keys such as focus are kept."""

    model_config = ConfigDict(extra="allow")

    name: str
    exercises: list[ExerciseDefinition] = Field(default_factory=list)


Schedule = dict[str, WorkoutDefinition | None]


class ValidatedPlan(BaseModel):
    """Plan that passed upload validation, with lowercase day keys."""

    name: str
    schedule: Schedule

    def schedule_json(self) -> dict:
        """Schedule as plain JSON for storage."""
        return {
            day: workout.model_dump(by_alias=True, exclude_none=True) if workout is not None else None
            for day, workout in self.schedule.items()
        }


class ResolvedPlan(BaseModel):
    """The plan that is authoritative for an account right now."""

    source: PlanSource
    plan_name: str
    plan_id: int | None = None
    schedule: Schedule


class ResolvedDay(BaseModel):
    """The workout scheduled for one calendar day, or a rest day.

    status is "rest_day" when the resolved schedule has nothing for the
    weekday; workout is None in that case.
    """

    status: DayStatus
    date: date
    day_name: str
    source: PlanSource
    plan_name: str
    workout: WorkoutDefinition | None = None
    message: str | None = None


class PlanSummary(BaseModel):
    id: int
    name: str
    active: bool
    created_at: datetime
