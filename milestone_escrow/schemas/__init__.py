"""Schema package exports."""
from .escrow import EscrowCreate, EscrowEventRead, EscrowRead
from .milestone import MilestoneCompletion, MilestoneCount, MilestoneCreate, MilestoneRead
from .registry import RegistryCount
from .transfer import BalanceRead, TransferRead

__all__ = [
    "BalanceRead",
    "EscrowCreate",
    "EscrowEventRead",
    "EscrowRead",
    "MilestoneCompletion",
    "MilestoneCount",
    "MilestoneCreate",
    "MilestoneRead",
    "RegistryCount",
    "TransferRead",
]
