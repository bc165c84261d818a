"""Plan upload: validate a candidate plan and make it the account's only active plan."""

from __future__ import annotations

from typing import Any

from loguru import logger

from sweatsync.db.store import Store
from sweatsync.plans.repository import deactivate_all_plans, insert_active_plan, list_plans
from sweatsync.plans.types import PlanSummary
from sweatsync.plans.validators import validate_plan_document


def extract_plan_candidate(body: dict[str, Any]) -> tuple[Any, Any]:
    """Pull (name, schedule) out of an upload body.

    Accepts both {"name", "planData": {"schedule"}} and {"name", "schedule"}.
    """
    name = body.get("name")
    plan_data = body.get("planData", body.get("plan_data"))
    if isinstance(plan_data, dict):
        if not name:
            name = plan_data.get("name")
        return name, plan_data.get("schedule")
    return name, body.get("schedule")


class PlanUploadService:
    """Validates uploads and activates them exclusively for their owner."""

    def __init__(self, store: Store) -> None:
        self.store = store

    def upload(self, account_id: int, name: Any, schedule: Any) -> PlanSummary:
        """Validate and activate a plan.

        Deactivation and insertion run in one transaction while holding the
        account's activation lock. If the insert fails the transaction rolls
        back and the previously active plan stays active.

        Raises:
            PlanValidationError: If the candidate is invalid (nothing is written)
            PersistenceError: If the store fails
        """
        logger.info(f"[UPLOAD_PLAN] Processing plan upload for account_id={account_id}")
        plan = validate_plan_document(name, schedule)

        with self.store.activation_lock(account_id), self.store.session("activate_plan", account_id) as session:
            deactivated = deactivate_all_plans(session, account_id)
            stored = insert_active_plan(session, account_id=account_id, name=plan.name, schedule=plan.schedule_json())
            summary = PlanSummary(id=stored.id, name=stored.name, active=stored.active, created_at=stored.created_at)

        logger.info(
            f"[UPLOAD_PLAN] Activated plan id={summary.id} '{summary.name}' for account_id={account_id} "
            f"(deactivated {deactivated} previous plan(s), days={list(plan.schedule)})"
        )
        return summary

    def list_plans(self, account_id: int) -> list[PlanSummary]:
        with self.store.session("list_plans", account_id) as session:
            return [
                PlanSummary(id=p.id, name=p.name, active=p.active, created_at=p.created_at)
                for p in list_plans(session, account_id)
            ]
