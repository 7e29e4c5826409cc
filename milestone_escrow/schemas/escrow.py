"""Escrow schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class EscrowCreate(BaseModel):
    project_name: str = Field(min_length=1, max_length=200)
    project_description: str = ""
    developer: str = Field(min_length=1, max_length=128)
    total_capital: Decimal = Field(ge=Decimal("0"), max_digits=18, decimal_places=2)
    # Capital accompanying the call; must match total_capital exactly.
    deposited_amount: Decimal = Field(ge=Decimal("0"), max_digits=18, decimal_places=2)


class EscrowRead(BaseModel):
    id: int
    owner: str
    developer: str
    project_name: str
    project_description: str
    total_capital: Decimal
    uncommitted_capital: Decimal
    milestone_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EscrowEventRead(BaseModel):
    id: int
    escrow_id: int
    kind: str
    data_json: dict[str, Any]
    at: datetime

    model_config = ConfigDict(from_attributes=True)
