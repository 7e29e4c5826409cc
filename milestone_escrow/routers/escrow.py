"""Escrow and milestone endpoints."""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from milestone_escrow.db import get_db
from milestone_escrow.models import Escrow, EscrowEvent, Milestone, Transfer
from milestone_escrow.schemas.escrow import EscrowCreate, EscrowEventRead, EscrowRead
from milestone_escrow.schemas.milestone import (
    MilestoneCompletion,
    MilestoneCount,
    MilestoneCreate,
    MilestoneRead,
)
from milestone_escrow.schemas.transfer import TransferRead
from milestone_escrow.security import require_caller
from milestone_escrow.services import escrow as escrow_service
from milestone_escrow.services import events as events_service
from milestone_escrow.services import transfers as transfers_service

router = APIRouter(
    prefix="/escrows",
    tags=["escrow"],
)


@router.post("", response_model=EscrowRead, status_code=status.HTTP_201_CREATED)
def create_escrow(
    payload: EscrowCreate,
    db: Session = Depends(get_db),
    caller: str = Depends(require_caller),
) -> Escrow:
    return escrow_service.create_escrow(db, payload, owner=caller)


@router.get("/{escrow_id}", response_model=EscrowRead)
def read_escrow(escrow_id: int, db: Session = Depends(get_db)) -> Escrow:
    return escrow_service.get_escrow(db, escrow_id)


@router.post(
    "/{escrow_id}/milestones",
    response_model=MilestoneRead,
    status_code=status.HTTP_201_CREATED,
)
def commit_milestone(
    escrow_id: int,
    payload: MilestoneCreate,
    db: Session = Depends(get_db),
    caller: str = Depends(require_caller),
) -> Milestone:
    return escrow_service.commit_milestone(db, escrow_id, payload, caller=caller)


@router.get("/{escrow_id}/milestones", response_model=list[MilestoneRead])
def list_milestones(escrow_id: int, db: Session = Depends(get_db)) -> list[Milestone]:
    return escrow_service.list_milestones(db, escrow_id)


@router.get("/{escrow_id}/milestones/count", response_model=MilestoneCount)
def milestone_count(escrow_id: int, db: Session = Depends(get_db)) -> MilestoneCount:
    return MilestoneCount(escrow_id=escrow_id, count=escrow_service.milestone_count(db, escrow_id))


@router.get("/{escrow_id}/milestones/{index}", response_model=MilestoneRead)
def read_milestone(escrow_id: int, index: int, db: Session = Depends(get_db)) -> Milestone:
    return escrow_service.get_milestone(db, escrow_id, index)


@router.post("/{escrow_id}/milestones/{index}/complete", response_model=MilestoneRead)
def complete_milestone(
    escrow_id: int,
    index: int,
    payload: MilestoneCompletion,
    db: Session = Depends(get_db),
    caller: str = Depends(require_caller),
) -> Milestone:
    return escrow_service.complete_milestone(db, escrow_id, index, payload, caller=caller)


@router.post("/{escrow_id}/milestones/{index}/approve", response_model=MilestoneRead)
def approve_milestone(
    escrow_id: int,
    index: int,
    db: Session = Depends(get_db),
    caller: str = Depends(require_caller),
) -> Milestone:
    return escrow_service.approve_milestone(db, escrow_id, index, caller=caller)


@router.get("/{escrow_id}/events", response_model=list[EscrowEventRead])
def list_events(
    escrow_id: int,
    kind: str | None = None,
    db: Session = Depends(get_db),
) -> list[EscrowEvent]:
    escrow_service.get_escrow(db, escrow_id)
    return events_service.list_events(db, escrow_id, kind=kind)


@router.get("/{escrow_id}/transfers", response_model=list[TransferRead])
def list_transfers(escrow_id: int, db: Session = Depends(get_db)) -> list[Transfer]:
    escrow_service.get_escrow(db, escrow_id)
    return transfers_service.list_transfers(db, escrow_id)
