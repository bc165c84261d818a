"""Workout API routes.

Plan lookup, plan upload, workout completion and history. Every route needs
an authenticated account; handlers only delegate to the core components.
"""

from __future__ import annotations

import datetime as dt
from typing import Any

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, Request, Response, status
from loguru import logger

from sweatsync.api.dependencies.auth import AuthenticatedAccount, get_current_account
from sweatsync.api.dependencies.services import (
    get_completion_recorder,
    get_history_accessor,
    get_plan_resolver,
    get_plan_upload_service,
    get_settings,
)
from sweatsync.plans.resolver import PlanResolver, today_in
from sweatsync.plans.types import PlanSummary, ResolvedDay, ResolvedPlan
from sweatsync.plans.upload import PlanUploadService, extract_plan_candidate
from sweatsync.workouts.history import HistoryAccessor
from sweatsync.workouts.recorder import CompletionRecorder
from sweatsync.workouts.types import CompletionRequest

router = APIRouter(prefix="/api/workouts", tags=["workouts"])


@router.get("/plan", response_model=ResolvedPlan)
def get_plan(
    account: AuthenticatedAccount = Depends(get_current_account),
    resolver: PlanResolver = Depends(get_plan_resolver),
) -> ResolvedPlan:
    """Return the account's active plan, or the default plan when it has none."""
    return resolver.resolve_plan(account.id)


@router.get("/today", response_model=ResolvedDay)
def get_today(
    request: Request,
    day: dt.date | None = Query(None, alias="date", description="Calendar day to resolve (defaults to today)"),
    account: AuthenticatedAccount = Depends(get_current_account),
    resolver: PlanResolver = Depends(get_plan_resolver),
) -> ResolvedDay:
    """Return the workout scheduled for today (or for ?date=YYYY-MM-DD).

    A day without a workout returns status "rest_day" rather than an error.
    """
    target_day = day or today_in(get_settings(request).zone)
    return resolver.resolve_day(account.id, target_day)


@router.post("/upload-plan")
def upload_plan(
    body: dict[str, Any] = Body(...),
    account: AuthenticatedAccount = Depends(get_current_account),
    uploader: PlanUploadService = Depends(get_plan_upload_service),
):
    """Validate an uploaded plan and make it the account's only active plan.

    Accepts {"name", "planData": {"schedule"}} or {"name", "schedule"}.
    """
    name, schedule = extract_plan_candidate(body)
    summary = uploader.upload(account.id, name, schedule)
    return {"message": "Workout plan uploaded successfully", "plan": summary.model_dump(mode="json")}


@router.get("/plans", response_model=list[PlanSummary])
def list_plans(
    account: AuthenticatedAccount = Depends(get_current_account),
    uploader: PlanUploadService = Depends(get_plan_upload_service),
) -> list[PlanSummary]:
    return uploader.list_plans(account.id)


@router.post("/complete", status_code=status.HTTP_201_CREATED)
def complete_workout(
    body: CompletionRequest,
    response: Response,
    idempotency_key: str | None = Header(None, alias="Idempotency-Key", max_length=128),
    account: AuthenticatedAccount = Depends(get_current_account),
    recorder: CompletionRecorder = Depends(get_completion_recorder),
):
    """Save a completed workout.

    Repeating a request with the same Idempotency-Key returns the stored
    workout with 200 instead of saving a duplicate.
    """
    if idempotency_key and not body.idempotency_key:
        body = body.model_copy(update={"idempotency_key": idempotency_key})

    record, created = recorder.record(account.id, body)
    if not created:
        response.status_code = status.HTTP_200_OK
    return {
        "message": "Workout saved successfully" if created else "Workout already saved",
        "created": created,
        "workout": record.model_dump(mode="json", exclude_none=True),
    }


@router.get("/history")
def get_history(
    limit: int | None = Query(None, description="Maximum number of workouts to return"),
    account: AuthenticatedAccount = Depends(get_current_account),
    history: HistoryAccessor = Depends(get_history_accessor),
):
    """List the account's completed workouts, most recent first."""
    workouts = history.list_workouts(account.id, limit)
    return {"workouts": [w.model_dump(mode="json", exclude_none=True) for w in workouts]}


def _delete(account: AuthenticatedAccount, history: HistoryAccessor, workout_id: int) -> dict:
    removed = history.delete_workout(account.id, workout_id)
    return {"message": "Workout deleted successfully", "workout_id": workout_id, "deleted": removed}


@router.delete("/{workout_id}")
def delete_workout(
    workout_id: int,
    account: AuthenticatedAccount = Depends(get_current_account),
    history: HistoryAccessor = Depends(get_history_accessor),
):
    """Delete one of the account's workouts.

    404 if the id does not exist (or was already deleted), 403 if it belongs
    to another account.
    """
    return _delete(account, history, workout_id)


@router.post("/delete")
def delete_workout_legacy(
    body: dict[str, Any] = Body(...),
    account: AuthenticatedAccount = Depends(get_current_account),
    history: HistoryAccessor = Depends(get_history_accessor),
):
    """Body form of delete: {"workoutId": <id>}."""
    raw_id = body.get("workoutId", body.get("workout_id"))
    try:
        workout_id = int(raw_id)
    except (TypeError, ValueError):
        logger.warning(f"[HISTORY] Invalid workout id {raw_id!r} from account_id={account.id}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Valid workout ID is required") from None
    return _delete(account, history, workout_id)
