"""Append-only escrow event log."""
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from milestone_escrow.models.escrow import Escrow, EscrowEvent
from milestone_escrow.utils.audit import to_json_safe
from milestone_escrow.utils.time import utcnow

logger = logging.getLogger(__name__)

PROJECT_CREATED = "ProjectCreated"
MILESTONE_ADDED = "MilestoneAdded"
MILESTONE_COMPLETED = "MilestoneCompleted"
MILESTONE_APPROVED = "MilestoneApproved"


def emit(db: Session, escrow: Escrow, kind: str, data: dict[str, Any]) -> EscrowEvent:
    """Record a notification for ``escrow``; events are never updated or removed."""

    event = EscrowEvent(escrow_id=escrow.id, kind=kind, data_json=to_json_safe(data), at=utcnow())
    db.add(event)
    logger.info("Escrow event emitted", extra={"escrow_id": escrow.id, "kind": kind})
    return event


def list_events(db: Session, escrow_id: int, *, kind: str | None = None) -> list[EscrowEvent]:
    stmt = select(EscrowEvent).where(EscrowEvent.escrow_id == escrow_id)
    if kind is not None:
        stmt = stmt.where(EscrowEvent.kind == kind)
    return list(db.scalars(stmt.order_by(EscrowEvent.id.asc())).all())


__all__ = [
    "MILESTONE_ADDED",
    "MILESTONE_APPROVED",
    "MILESTONE_COMPLETED",
    "PROJECT_CREATED",
    "emit",
    "list_events",
]
