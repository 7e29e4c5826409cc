"""Account balance endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from milestone_escrow.db import get_db
from milestone_escrow.schemas.transfer import BalanceRead
from milestone_escrow.services import transfers as transfers_service

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.get("/{address}/balance", response_model=BalanceRead)
def read_balance(address: str, db: Session = Depends(get_db)) -> BalanceRead:
    """Return the capital released to ``address`` by milestone approvals."""

    return BalanceRead(address=address, balance=transfers_service.balance_of(db, address))
