"""Escrow related models."""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class Escrow(Base):
    """Capital custody and milestone ledger for a single project."""

    __tablename__ = "escrows"
    __table_args__ = (
        CheckConstraint("total_capital >= 0", name="ck_escrow_total_capital_non_negative"),
        CheckConstraint("uncommitted_capital >= 0", name="ck_escrow_uncommitted_non_negative"),
        CheckConstraint(
            "uncommitted_capital <= total_capital", name="ck_escrow_uncommitted_within_total"
        ),
        Index("ix_escrows_owner", "owner"),
        Index("ix_escrows_developer", "developer"),
    )

    owner: Mapped[str] = mapped_column(String(128), nullable=False)
    developer: Mapped[str] = mapped_column(String(128), nullable=False)
    project_name: Mapped[str] = mapped_column(String(200), nullable=False)
    project_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    total_capital: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    uncommitted_capital: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    milestones = relationship(
        "Milestone",
        back_populates="escrow",
        order_by="Milestone.idx",
        cascade="all, delete-orphan",
    )
    deposits = relationship("EscrowDeposit", back_populates="escrow", cascade="all, delete-orphan")
    events = relationship(
        "EscrowEvent",
        back_populates="escrow",
        order_by="EscrowEvent.id",
        cascade="all, delete-orphan",
    )

    @property
    def milestone_count(self) -> int:
        return len(self.milestones)


class EscrowDeposit(Base):
    """Capital placed in custody when the escrow is created."""

    __tablename__ = "escrow_deposits"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_escrow_deposit_non_negative_amount"),)

    escrow_id: Mapped[int] = mapped_column(ForeignKey("escrows.id"), nullable=False, index=True)
    depositor: Mapped[str] = mapped_column(String(128), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    escrow = relationship("Escrow", back_populates="deposits")


class EscrowEvent(Base):
    """Append-only notification emitted on each escrow state transition."""

    __tablename__ = "escrow_events"

    escrow_id: Mapped[int] = mapped_column(ForeignKey("escrows.id"), nullable=False, index=True)
    kind: Mapped[str] = mapped_column(String(50), nullable=False)
    data_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    escrow = relationship("Escrow", back_populates="events")
