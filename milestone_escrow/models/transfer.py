"""Transfer model definitions."""
import enum
from decimal import Decimal

from sqlalchemy import CheckConstraint, Enum as SqlEnum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class TransferStatus(str, enum.Enum):
    """Possible statuses for a capital transfer."""

    PENDING = "PENDING"
    SENT = "SENT"


class Transfer(Base):
    """Capital released from an escrow to its developer."""

    __tablename__ = "transfers"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transfer_positive_amount"),
        Index("ix_transfers_recipient_status", "recipient", "status"),
    )

    escrow_id: Mapped[int] = mapped_column(ForeignKey("escrows.id"), nullable=False, index=True)
    milestone_id: Mapped[int] = mapped_column(ForeignKey("milestones.id"), nullable=False, unique=True)
    recipient: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    status: Mapped[TransferStatus] = mapped_column(
        SqlEnum(TransferStatus), nullable=False, default=TransferStatus.PENDING
    )
    reference: Mapped[str | None] = mapped_column(String(128), nullable=True, unique=True)

    milestone = relationship("Milestone")
