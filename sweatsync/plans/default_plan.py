"""Static storage for the system default plan.

The default plan is a JSON file ({name, schedule}) that is used whenever an
account has no active plan of its own. It is read-only and never stored in
the database.
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from loguru import logger

from sweatsync.core.errors import DefaultPlanUnavailableError, PlanValidationError
from sweatsync.plans.types import ValidatedPlan
from sweatsync.plans.validators import validate_plan_document

DEFAULT_PLAN_NAME = "Current Plan"


@lru_cache(maxsize=8)
def _load_cached(path: str, mtime_ns: int) -> ValidatedPlan:
    logger.info(f"[PLAN] Loading default plan from {path}")
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise PlanValidationError("Default plan file must contain a JSON object")
    return validate_plan_document(raw.get("name") or DEFAULT_PLAN_NAME, raw.get("schedule"))


def load_default_plan(path: Path | str) -> ValidatedPlan:
    """Read and validate the default plan file.

    Parsed plans are cached per path and modification time, so editing the
    file takes effect without a restart.

    Raises:
        DefaultPlanUnavailableError: If the file is missing, unreadable, not
            JSON, or not a valid plan
    """
    plan_path = Path(path)
    try:
        return _load_cached(str(plan_path.resolve()), plan_path.stat().st_mtime_ns)
    except (OSError, json.JSONDecodeError, PlanValidationError) as e:
        logger.error(f"[PLAN] Default plan unavailable at {plan_path}: {e}")
        raise DefaultPlanUnavailableError(f"Failed to load default workout plan: {e}") from e
