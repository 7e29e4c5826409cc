"""Escrow domain services.

Each mutating operation runs its checks first, then applies its effects,
and only then interacts with the outside world (the capital transfer).
A failed check raises an :class:`~milestone_escrow.utils.errors.EscrowError`
before anything is written.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from milestone_escrow.config import get_settings
from milestone_escrow.models import Escrow, EscrowDeposit, Milestone, MilestoneStatus
from milestone_escrow.schemas.escrow import EscrowCreate
from milestone_escrow.schemas.milestone import MilestoneCompletion, MilestoneCreate
from milestone_escrow.services import events
from milestone_escrow.services.transfers import TransferGateway, send_to_developer
from milestone_escrow.utils.audit import log_audit
from milestone_escrow.utils.errors import (
    AlreadyCompleted,
    AlreadyPaid,
    AmountMismatch,
    EscrowNotFound,
    InsufficientCapital,
    InvalidAmount,
    InvalidIndex,
    NotCompleted,
    NotDeveloper,
    NotOwner,
)
from milestone_escrow.utils.time import utcnow

logger = logging.getLogger(__name__)

_DEPTH_KEY = "escrow_approval_depth"
ZERO = Decimal("0.00")


def _to_decimal(value: Any) -> Decimal:
    """
    Convertit proprement un montant en Decimal(2 décimales).
    Accepte Decimal, int, float, str. Lève ValueError si invalide.
    """
    if isinstance(value, Decimal):
        d = value
    else:
        try:
            # str() évite les artefacts binaires des floats
            d = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as e:
            raise ValueError(f"Invalid money amount: {value!r}") from e

    return d.quantize(Decimal("0.01"))


def _get_escrow_or_404(db: Session, escrow_id: int, *, for_update: bool = False) -> Escrow:
    stmt = select(Escrow).where(Escrow.id == escrow_id)
    if for_update:
        stmt = stmt.with_for_update()
    escrow = db.scalars(stmt).first()
    if escrow is None:
        raise EscrowNotFound(escrow_id=escrow_id)
    return escrow


def _milestone_at(escrow: Escrow, index: int) -> Milestone:
    count = escrow.milestone_count
    if index < 0 or index >= count:
        logger.warning(
            "Milestone index out of range",
            extra={"escrow_id": escrow.id, "index": index, "count": count},
        )
        raise InvalidIndex(f"Milestone index {index} is out of range.", index=index, count=count)
    return escrow.milestones[index]


def _require_owner(escrow: Escrow, caller: str) -> None:
    if caller != escrow.owner:
        logger.warning("Owner check failed", extra={"escrow_id": escrow.id, "caller": caller})
        raise NotOwner()


def _require_developer(escrow: Escrow, caller: str) -> None:
    if caller != escrow.developer:
        logger.warning("Developer check failed", extra={"escrow_id": escrow.id, "caller": caller})
        raise NotDeveloper()


def commit_unless_nested(db: Session) -> None:
    """Commit, unless running inside an approval's transfer.

    A service called back from a transfer gateway only flushes; the
    outermost approval decides whether its savepoint is kept.
    """
    if db.info.get(_DEPTH_KEY, 0):
        db.flush()
    else:
        db.commit()


def open_escrow(db: Session, payload: EscrowCreate, *, owner: str) -> Escrow:
    """Build and flush a new escrow without committing.

    Raises :class:`AmountMismatch` unless the deposit equals the declared
    total capital.
    """

    if payload.deposited_amount != payload.total_capital:
        logger.warning(
            "Escrow deposit does not match declared total",
            extra={
                "owner": owner,
                "total_capital": str(payload.total_capital),
                "deposited_amount": str(payload.deposited_amount),
            },
        )
        raise AmountMismatch(
            total_capital=str(payload.total_capital),
            deposited_amount=str(payload.deposited_amount),
        )

    total = _to_decimal(payload.total_capital)
    escrow = Escrow(
        owner=owner,
        developer=payload.developer,
        project_name=payload.project_name,
        project_description=payload.project_description,
        total_capital=total,
        uncommitted_capital=total,
    )
    escrow.deposits.append(EscrowDeposit(depositor=owner, amount=_to_decimal(payload.deposited_amount)))
    db.add(escrow)
    db.flush()
    log_audit(
        db,
        actor=owner,
        action="ESCROW_CREATED",
        entity="Escrow",
        entity_id=escrow.id,
        data={
            "developer": escrow.developer,
            "total_capital": escrow.total_capital,
        },
    )
    return escrow


def create_escrow(db: Session, payload: EscrowCreate, *, owner: str) -> Escrow:
    """Create a new escrow holding the deposited capital."""

    escrow = open_escrow(db, payload, owner=owner)
    commit_unless_nested(db)
    logger.info("Escrow created", extra={"escrow_id": escrow.id, "owner": owner})
    return escrow


def get_escrow(db: Session, escrow_id: int) -> Escrow:
    return _get_escrow_or_404(db, escrow_id)


def commit_milestone(
    db: Session, escrow_id: int, payload: MilestoneCreate, *, caller: str
) -> Milestone:
    """Allocate uncommitted capital to a new milestone appended at the end."""

    escrow = _get_escrow_or_404(db, escrow_id, for_update=True)
    _require_owner(escrow, caller)

    amount = _to_decimal(payload.amount)
    if amount == 0 and not get_settings().ALLOW_ZERO_AMOUNT_MILESTONES:
        logger.warning("Zero-amount milestone rejected", extra={"escrow_id": escrow.id})
        raise InvalidAmount()
    if amount > escrow.uncommitted_capital:
        logger.warning(
            "Milestone exceeds uncommitted capital",
            extra={
                "escrow_id": escrow.id,
                "amount": str(amount),
                "uncommitted_capital": str(escrow.uncommitted_capital),
            },
        )
        raise InsufficientCapital(
            requested=str(amount),
            available=str(escrow.uncommitted_capital),
        )

    index = escrow.milestone_count
    milestone = Milestone(
        idx=index,
        title=payload.title,
        tentative_date=payload.tentative_date,
        description=payload.description,
        amount=amount,
        committed_amount=amount,
        status=MilestoneStatus.PENDING,
    )
    escrow.milestones.append(milestone)
    escrow.uncommitted_capital = _to_decimal(escrow.uncommitted_capital) - amount
    db.flush()

    if amount == 0:
        logger.warning("Zero-amount milestone committed", extra={"escrow_id": escrow.id, "index": index})

    events.emit(
        db,
        escrow,
        events.MILESTONE_ADDED,
        {"index": index, "title": milestone.title, "amount": amount},
    )
    log_audit(
        db,
        actor=caller,
        action="MILESTONE_COMMITTED",
        entity="Escrow",
        entity_id=escrow.id,
        data={
            "index": index,
            "amount": amount,
            "uncommitted_capital": escrow.uncommitted_capital,
        },
    )
    commit_unless_nested(db)
    logger.info(
        "Milestone committed",
        extra={"escrow_id": escrow.id, "index": index, "amount": str(amount)},
    )
    return milestone


def complete_milestone(
    db: Session,
    escrow_id: int,
    index: int,
    payload: MilestoneCompletion,
    *,
    caller: str,
) -> Milestone:
    """Mark a milestone as completed. The proof only travels in the event."""

    escrow = _get_escrow_or_404(db, escrow_id, for_update=True)
    _require_developer(escrow, caller)
    milestone = _milestone_at(escrow, index)
    if milestone.completed:
        logger.warning("Milestone already completed", extra={"escrow_id": escrow.id, "index": index})
        raise AlreadyCompleted(index=index)

    milestone.status = MilestoneStatus.COMPLETED
    milestone.completed_at = utcnow()
    events.emit(db, escrow, events.MILESTONE_COMPLETED, {"index": index, "proof": payload.proof})
    log_audit(
        db,
        actor=caller,
        action="MILESTONE_COMPLETED",
        entity="Escrow",
        entity_id=escrow.id,
        data={"index": index},
    )
    commit_unless_nested(db)
    logger.info("Milestone completed", extra={"escrow_id": escrow.id, "index": index})
    return milestone


def approve_milestone(
    db: Session,
    escrow_id: int,
    index: int,
    *,
    caller: str,
    gateway: TransferGateway | None = None,
) -> Milestone:
    """Approve a completed milestone and release its amount to the developer.

    The amount is captured, the milestone is marked ``PAID`` with its amount
    zeroed, and all of it is flushed before the gateway runs, so an approval
    re-entered from the transfer fails with :class:`AlreadyPaid`. The effects
    and the transfer share one savepoint: if the gateway raises, everything
    since the checks is rolled back, including services the gateway called.
    """

    escrow = _get_escrow_or_404(db, escrow_id, for_update=True)
    _require_owner(escrow, caller)
    milestone = _milestone_at(escrow, index)
    if not milestone.completed:
        logger.warning("Milestone not completed", extra={"escrow_id": escrow.id, "index": index})
        raise NotCompleted(index=index)
    if milestone.paid:
        logger.warning("Milestone already paid", extra={"escrow_id": escrow.id, "index": index})
        raise AlreadyPaid(index=index)

    amount = _to_decimal(milestone.amount)
    savepoint = db.begin_nested()
    depth = db.info.get(_DEPTH_KEY, 0)
    db.info[_DEPTH_KEY] = depth + 1
    try:
        # effects
        milestone.status = MilestoneStatus.PAID
        milestone.amount = ZERO
        milestone.paid_at = utcnow()
        events.emit(db, escrow, events.MILESTONE_APPROVED, {"index": index, "amount": amount})
        log_audit(
            db,
            actor=caller,
            action="MILESTONE_APPROVED",
            entity="Escrow",
            entity_id=escrow.id,
            data={"index": index, "amount": amount},
        )
        db.flush()

        # interactions
        send_to_developer(db, escrow=escrow, milestone=milestone, amount=amount, gateway=gateway)
    except Exception:
        savepoint.rollback()
        logger.exception(
            "Transfer failed, approval rolled back",
            extra={"escrow_id": escrow_id, "index": index},
        )
        raise
    finally:
        db.info[_DEPTH_KEY] = depth

    savepoint.commit()
    commit_unless_nested(db)
    logger.info(
        "Milestone approved",
        extra={"escrow_id": escrow.id, "index": index, "amount": str(amount)},
    )
    return milestone


def milestone_count(db: Session, escrow_id: int) -> int:
    _get_escrow_or_404(db, escrow_id)
    stmt = select(func.count(Milestone.id)).where(Milestone.escrow_id == escrow_id)
    return int(db.scalar(stmt) or 0)


def get_milestone(db: Session, escrow_id: int, index: int) -> Milestone:
    return _milestone_at(_get_escrow_or_404(db, escrow_id), index)


def list_milestones(db: Session, escrow_id: int) -> list[Milestone]:
    _get_escrow_or_404(db, escrow_id)
    stmt = select(Milestone).where(Milestone.escrow_id == escrow_id).order_by(Milestone.idx.asc())
    return list(db.scalars(stmt).all())


__all__ = [
    "approve_milestone",
    "commit_unless_nested",
    "commit_milestone",
    "complete_milestone",
    "create_escrow",
    "get_escrow",
    "get_milestone",
    "list_milestones",
    "milestone_count",
    "open_escrow",
]
