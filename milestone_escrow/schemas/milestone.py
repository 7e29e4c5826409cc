"""Schemas for milestone entities."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from milestone_escrow.models.milestone import MilestoneStatus

# Largest timestamp the BIGINT column accepts.
MAX_TENTATIVE_DATE = 2**63 - 1


class MilestoneCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    tentative_date: int = Field(ge=0, le=MAX_TENTATIVE_DATE)
    description: str = ""
    amount: Decimal = Field(ge=Decimal("0"), max_digits=18, decimal_places=2)


class MilestoneCompletion(BaseModel):
    proof: str = ""


class MilestoneRead(BaseModel):
    id: int
    escrow_id: int
    index: int = Field(validation_alias="idx")
    title: str
    tentative_date: int
    description: str
    amount: Decimal
    committed_amount: Decimal
    status: MilestoneStatus
    completed: bool
    paid: bool
    completed_at: datetime | None
    paid_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class MilestoneCount(BaseModel):
    escrow_id: int
    count: int
