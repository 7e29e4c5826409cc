"""Release of escrowed capital to developers."""
import logging
from collections.abc import Callable
from decimal import Decimal
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from milestone_escrow.models import Escrow, Milestone, Transfer, TransferStatus
from milestone_escrow.utils.audit import log_audit

logger = logging.getLogger(__name__)

# Moves the funds for a recorded transfer. Receives the session so that
# implementations can inspect (or re-enter) escrow state.
TransferGateway = Callable[[Session, Transfer], None]


def default_gateway(db: Session, transfer: Transfer) -> None:
    """Book-entry gateway: the transfer settles immediately."""

    transfer.reference = transfer.reference or f"TRF-{uuid4()}"
    transfer.status = TransferStatus.SENT


def send_to_developer(
    db: Session,
    *,
    escrow: Escrow,
    milestone: Milestone,
    amount: Decimal,
    gateway: TransferGateway | None = None,
) -> Transfer | None:
    """Send ``amount`` from ``escrow`` to its developer.

    The recipient is always the escrow's stored developer. Zero amounts move
    nothing and return ``None``.
    """

    if amount <= 0:
        logger.info(
            "Nothing to transfer for zero-amount milestone",
            extra={"escrow_id": escrow.id, "milestone_id": milestone.id},
        )
        return None

    transfer = Transfer(
        escrow_id=escrow.id,
        milestone_id=milestone.id,
        recipient=escrow.developer,
        amount=amount,
        status=TransferStatus.PENDING,
    )
    db.add(transfer)
    db.flush()
    logger.info(
        "Transfer initiated",
        extra={"escrow_id": escrow.id, "milestone_id": milestone.id, "amount": str(amount)},
    )

    (gateway or default_gateway)(db, transfer)

    log_audit(
        db,
        actor="system",
        action="TRANSFER_SENT",
        entity="Transfer",
        entity_id=transfer.id,
        data={
            "escrow_id": escrow.id,
            "milestone_id": milestone.id,
            "recipient": transfer.recipient,
            "amount": amount,
            "reference": transfer.reference,
        },
    )
    logger.info(
        "Transfer sent",
        extra={"transfer_id": transfer.id, "escrow_id": escrow.id, "status": transfer.status.value},
    )
    return transfer


def balance_of(db: Session, address: str) -> Decimal:
    """Return the capital released to ``address`` across all escrows."""

    stmt = (
        select(func.coalesce(func.sum(Transfer.amount), 0))
        .where(Transfer.recipient == address)
        .where(Transfer.status == TransferStatus.SENT)
    )
    value = db.scalar(stmt)
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(Decimal("0.01"))


def list_transfers(db: Session, escrow_id: int) -> list[Transfer]:
    stmt = select(Transfer).where(Transfer.escrow_id == escrow_id).order_by(Transfer.id.asc())
    return list(db.scalars(stmt).all())


__all__ = ["TransferGateway", "balance_of", "default_gateway", "list_transfers", "send_to_developer"]
