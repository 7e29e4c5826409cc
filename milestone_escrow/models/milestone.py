"""Milestone model definitions."""
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class MilestoneStatus(str, PyEnum):
    """Lifecycle of a milestone: PENDING -> COMPLETED -> PAID."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    PAID = "PAID"


class Milestone(Base):
    """A fixed-amount deliverable gating the release of committed capital."""

    __tablename__ = "milestones"
    __table_args__ = (
        UniqueConstraint("escrow_id", "idx", name="uq_milestone_idx"),
        CheckConstraint("amount >= 0", name="ck_milestone_non_negative_amount"),
        CheckConstraint("amount <= committed_amount", name="ck_milestone_amount_within_committed"),
        CheckConstraint("idx >= 0", name="ck_milestone_non_negative_idx"),
        CheckConstraint("tentative_date >= 0", name="ck_milestone_tentative_date_unsigned"),
    )

    escrow_id: Mapped[int] = mapped_column(ForeignKey("escrows.id"), nullable=False, index=True)
    idx: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    tentative_date: Mapped[int] = mapped_column(BigInteger, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # outstanding amount, zeroed once paid; committed_amount keeps the original figure
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    committed_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    status: Mapped[MilestoneStatus] = mapped_column(
        SqlEnum(MilestoneStatus), nullable=False, default=MilestoneStatus.PENDING
    )
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    escrow = relationship("Escrow", back_populates="milestones")

    @property
    def completed(self) -> bool:
        return self.status in (MilestoneStatus.COMPLETED, MilestoneStatus.PAID)

    @property
    def paid(self) -> bool:
        return self.status == MilestoneStatus.PAID
