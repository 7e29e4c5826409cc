"""Registry catalog model."""
from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class RegistryEntry(Base):
    """Membership of an escrow in the append-only registry catalog.

    Rows are never updated or deleted; catalog order is ``id`` order.
    """

    __tablename__ = "registry_entries"

    escrow_id: Mapped[int] = mapped_column(ForeignKey("escrows.id"), nullable=False, unique=True)
    owner: Mapped[str] = mapped_column(String(128), nullable=False)

    escrow = relationship("Escrow")
