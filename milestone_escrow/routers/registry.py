"""Registry endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from milestone_escrow.db import get_db
from milestone_escrow.models import Escrow
from milestone_escrow.schemas.escrow import EscrowCreate, EscrowRead
from milestone_escrow.schemas.registry import RegistryCount
from milestone_escrow.security import require_caller
from milestone_escrow.services import registry as registry_service

router = APIRouter(prefix="/registry", tags=["registry"])


@router.post("/escrows", response_model=EscrowRead, status_code=status.HTTP_201_CREATED)
def create_escrow(
    payload: EscrowCreate,
    db: Session = Depends(get_db),
    caller: str = Depends(require_caller),
) -> Escrow:
    return registry_service.create_escrow(db, payload, caller=caller)


@router.get("/escrows", response_model=list[EscrowRead])
def list_escrows(db: Session = Depends(get_db)) -> list[Escrow]:
    return registry_service.list_escrows(db)


@router.get("/escrows/count", response_model=RegistryCount)
def escrow_count(db: Session = Depends(get_db)) -> RegistryCount:
    return RegistryCount(count=registry_service.escrow_count(db))


@router.get("/escrows/{position}", response_model=EscrowRead)
def escrow_at(position: int, db: Session = Depends(get_db)) -> Escrow:
    return registry_service.escrow_at(db, position)
