"""Schemas for released capital."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from milestone_escrow.models.transfer import TransferStatus


class TransferRead(BaseModel):
    id: int
    escrow_id: int
    milestone_id: int
    recipient: str
    amount: Decimal
    status: TransferStatus
    reference: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BalanceRead(BaseModel):
    address: str
    balance: Decimal
