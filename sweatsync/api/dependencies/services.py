"""FastAPI dependencies that hand out the store handle and core components.

Everything hangs off app.state, which create_app() populates, so tests can
build an app around their own Store and Settings.
"""

from __future__ import annotations

from fastapi import Request

from sweatsync.config.settings import Settings
from sweatsync.db.store import Store
from sweatsync.plans.resolver import PlanResolver
from sweatsync.plans.upload import PlanUploadService
from sweatsync.workouts.history import HistoryAccessor
from sweatsync.workouts.recorder import CompletionRecorder


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_plan_resolver(request: Request) -> PlanResolver:
    return PlanResolver(get_store(request), get_settings(request).default_plan_path)


def get_plan_upload_service(request: Request) -> PlanUploadService:
    return PlanUploadService(get_store(request))


def get_completion_recorder(request: Request) -> CompletionRecorder:
    return CompletionRecorder(get_store(request))


def get_history_accessor(request: Request) -> HistoryAccessor:
    cfg = get_settings(request)
    return HistoryAccessor(get_store(request), default_limit=cfg.history_default_limit, max_limit=cfg.history_max_limit)
