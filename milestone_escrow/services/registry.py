"""Registry (factory) of escrows.

Catalog order is the insertion order of ``registry_entries`` (its
autoincrement key); no position is computed at write time.
"""
import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from milestone_escrow.models import Escrow, RegistryEntry
from milestone_escrow.schemas.escrow import EscrowCreate
from milestone_escrow.services import events
from milestone_escrow.services.escrow import commit_unless_nested, open_escrow
from milestone_escrow.utils.audit import log_audit
from milestone_escrow.utils.errors import InvalidIndex

logger = logging.getLogger(__name__)


def _catalog():
    return select(Escrow).join(RegistryEntry, RegistryEntry.escrow_id == Escrow.id).order_by(
        RegistryEntry.id.asc()
    )


def escrow_count(db: Session) -> int:
    return int(db.scalar(select(func.count(RegistryEntry.id))) or 0)


def create_escrow(db: Session, payload: EscrowCreate, *, caller: str) -> Escrow:
    """Create an escrow owned by ``caller`` and append it to the catalog.

    :class:`~milestone_escrow.utils.errors.AmountMismatch` from the escrow
    propagates unchanged and nothing is recorded.
    """

    escrow = open_escrow(db, payload, owner=caller)
    entry = RegistryEntry(escrow_id=escrow.id, owner=caller)
    db.add(entry)
    db.flush()
    events.emit(db, escrow, events.PROJECT_CREATED, {"escrow_id": escrow.id, "owner": caller})
    log_audit(
        db,
        actor=caller,
        action="REGISTRY_ESCROW_CREATED",
        entity="RegistryEntry",
        entity_id=entry.id,
        data={"escrow_id": escrow.id},
    )
    commit_unless_nested(db)
    logger.info("Escrow registered", extra={"escrow_id": escrow.id, "owner": caller})
    return escrow


def list_escrows(db: Session) -> list[Escrow]:
    """Return every escrow created through the registry, in creation order."""

    return list(db.scalars(_catalog()).all())


def escrow_at(db: Session, position: int) -> Escrow:
    escrow = None
    if position >= 0:
        escrow = db.scalars(_catalog().offset(position).limit(1)).first()
    if escrow is None:
        logger.warning("Registry position out of range", extra={"position": position})
        raise InvalidIndex(f"Registry position {position} is out of range.", position=position)
    return escrow


__all__ = ["create_escrow", "escrow_at", "escrow_count", "list_escrows"]
