"""ORM models package."""
from .audit import AuditLog
from .base import Base
from .escrow import Escrow, EscrowDeposit, EscrowEvent
from .milestone import Milestone, MilestoneStatus
from .registry import RegistryEntry
from .transfer import Transfer, TransferStatus

__all__ = [
    "AuditLog",
    "Base",
    "Escrow",
    "EscrowDeposit",
    "EscrowEvent",
    "Milestone",
    "MilestoneStatus",
    "RegistryEntry",
    "Transfer",
    "TransferStatus",
]
