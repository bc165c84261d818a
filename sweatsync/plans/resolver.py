"""Plan resolution: which plan document is authoritative for an account and day.

An account's active plan wins. Without one (or when loading it fails) the
system default plan is used. Resolution never mutates state.
"""

from __future__ import annotations

from datetime import date, datetime
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from sweatsync.core.errors import PersistenceError
from sweatsync.db.store import Store
from sweatsync.plans.default_plan import load_default_plan
from sweatsync.plans.repository import find_active_plan
from sweatsync.plans.types import ResolvedDay, ResolvedPlan, WorkoutDefinition, weekday_name


class PlanResolver:
    """Resolves the active plan and the workout scheduled for a day."""

    def __init__(self, store: Store, default_plan_path: Path | str) -> None:
        self.store = store
        self.default_plan_path = default_plan_path

    def _load_user_plan(self, account_id: int) -> ResolvedPlan | None:
        try:
            with self.store.session("find_active_plan", account_id) as session:
                plan = find_active_plan(session, account_id)
                if plan is None:
                    return None
                return ResolvedPlan(
                    source="user",
                    plan_name=plan.name,
                    plan_id=plan.id,
                    schedule={
                        day: WorkoutDefinition.model_validate(workout) if workout else None
                        for day, workout in plan.schedule.items()
                    },
                )
        except (PersistenceError, ValidationError) as e:
            logger.warning(f"[PLAN] Could not load plan for account_id={account_id}, falling back to default: {e}")
            return None

    def resolve_plan(self, account_id: int) -> ResolvedPlan:
        """Return the account's active plan, or the default plan.

        Raises:
            DefaultPlanUnavailableError: If the fallback default plan cannot be loaded
        """
        user_plan = self._load_user_plan(account_id)
        if user_plan is not None:
            return user_plan

        default = load_default_plan(self.default_plan_path)
        return ResolvedPlan(source="default", plan_name=default.name, schedule=default.schedule)

    def resolve_day(self, account_id: int, target_day: date) -> ResolvedDay:
        """Return the workout scheduled for target_day.

        A weekday missing from the schedule (or mapped to null) is a rest
        day, not an error.
        """
        plan = self.resolve_plan(account_id)
        day_name = weekday_name(target_day)
        workout = plan.schedule.get(day_name)

        if workout is None:
            logger.info(f"[PLAN] No workout on {day_name} for account_id={account_id} (source={plan.source})")
            return ResolvedDay(
                status="rest_day",
                date=target_day,
                day_name=day_name,
                source=plan.source,
                plan_name=plan.plan_name,
                message="No workout scheduled for today",
            )

        logger.info(
            f"[PLAN] Resolved '{workout.name}' on {day_name} for account_id={account_id} "
            f"(source={plan.source}, exercises={len(workout.exercises)})"
        )
        return ResolvedDay(
            status="scheduled",
            date=target_day,
            day_name=day_name,
            source=plan.source,
            plan_name=plan.plan_name,
            workout=workout,
        )


def today_in(zone) -> date:
    """Calendar date of 'now' in the given tzinfo."""
    return datetime.now(zone).date()
