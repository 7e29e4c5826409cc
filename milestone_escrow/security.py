"""Caller identity dependency."""
from __future__ import annotations

from fastapi import Header, HTTPException, status

from milestone_escrow.config import CALLER_HEADER
from milestone_escrow.utils.errors import error_response


def require_caller(
    caller: str | None = Header(default=None, alias=CALLER_HEADER),
) -> str:
    """Return the address invoking the operation (``X-Caller-Address``)."""

    if caller is None or not caller.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("NO_CALLER", f"{CALLER_HEADER} header required."),
        )
    return caller.strip()


__all__ = ["require_caller"]
