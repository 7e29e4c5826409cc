"""Audit logging helper utilities."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, Mapping

from sqlalchemy.orm import Session

from milestone_escrow.models.audit import AuditLog
from milestone_escrow.utils.time import utcnow


def to_json_safe(data: Any) -> Any:
    """Return a copy of ``data`` where Decimals are rendered as strings."""

    if isinstance(data, Mapping):
        return {key: to_json_safe(value) for key, value in data.items()}

    if isinstance(data, (list, tuple)):
        return [to_json_safe(item) for item in data]

    if isinstance(data, Decimal):
        return str(data)

    return data


def log_audit(
    db: Session,
    *,
    actor: str,
    action: str,
    entity: str,
    entity_id: int | None,
    data: dict | None = None,
) -> None:
    """Persist an audit entry in the shared AuditLog table."""

    db.add(
        AuditLog(
            actor=actor,
            action=action,
            entity=entity,
            entity_id=entity_id if entity_id is not None else 0,
            data_json=to_json_safe(data or {}),
            at=utcnow(),
        )
    )


__all__ = ["log_audit", "to_json_safe"]
