"""Repository functions for plan document persistence.

Single responsibility: database operations only. Sequencing the
deactivate-then-insert activation is the caller's job (see upload.py).
"""

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from sweatsync.db.models import PlanDocument


def find_active_plan(session: Session, account_id: int) -> PlanDocument | None:
    """Return the account's active plan, or None."""
    stmt = (
        select(PlanDocument)
        .where(PlanDocument.account_id == account_id)
        .where(PlanDocument.active.is_(True))
        .order_by(PlanDocument.id.desc())
    )
    return session.execute(stmt).scalars().first()


def deactivate_all_plans(session: Session, account_id: int) -> int:
    """Mark every plan of the account inactive.

    Returns:
        Number of plans that were active before the call
    """
    stmt = (
        update(PlanDocument)
        .where(PlanDocument.account_id == account_id)
        .where(PlanDocument.active.is_(True))
        .values(active=False)
    )
    result = session.execute(stmt)
    session.flush()
    return result.rowcount or 0


def insert_active_plan(session: Session, *, account_id: int, name: str, schedule: dict) -> PlanDocument:
    """Insert a plan document with active=True and flush to get its id."""
    plan = PlanDocument(account_id=account_id, name=name, schedule=schedule, active=True)
    session.add(plan)
    session.flush()
    return plan


def list_plans(session: Session, account_id: int) -> list[PlanDocument]:
    """List the account's plans, newest first."""
    stmt = (
        select(PlanDocument)
        .where(PlanDocument.account_id == account_id)
        .order_by(PlanDocument.created_at.desc(), PlanDocument.id.desc())
    )
    return list(session.execute(stmt).scalars().all())
