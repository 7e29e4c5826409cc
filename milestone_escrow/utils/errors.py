"""Domain errors and helpers for standardized error responses."""
from typing import Any


def error_response(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Return a standardized error payload."""

    payload: dict[str, Any] = {"error": {"code": code, "message": message}}
    if details:
        payload["error"]["details"] = details
    return payload


class EscrowError(Exception):
    """Rejection of a requested escrow operation.

    Raised before any state is mutated, so the caller can re-issue a
    corrected request against an unchanged escrow.
    """

    code = "ESCROW_ERROR"
    status_code = 400
    default_message = "Escrow operation rejected."

    def __init__(self, message: str | None = None, **details: Any) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_response(self) -> dict[str, Any]:
        return error_response(self.code, self.message, self.details or None)


class AmountMismatch(EscrowError):
    code = "AMOUNT_MISMATCH"
    default_message = "Deposited amount must equal the declared total capital."


class InvalidAmount(EscrowError):
    code = "INVALID_AMOUNT"
    default_message = "Milestone amount must be greater than zero."


class NotOwner(EscrowError):
    code = "NOT_OWNER"
    status_code = 403
    default_message = "Only the escrow owner may perform this operation."


class NotDeveloper(EscrowError):
    code = "NOT_DEVELOPER"
    status_code = 403
    default_message = "Only the escrow developer may perform this operation."


class InsufficientCapital(EscrowError):
    code = "INSUFFICIENT_CAPITAL"
    status_code = 409
    default_message = "Milestone amount exceeds the uncommitted capital."


class InvalidIndex(EscrowError):
    code = "INVALID_INDEX"
    status_code = 404
    default_message = "Index is out of range."


class AlreadyCompleted(EscrowError):
    code = "ALREADY_COMPLETED"
    status_code = 409
    default_message = "Milestone is already completed."


class NotCompleted(EscrowError):
    code = "NOT_COMPLETED"
    status_code = 409
    default_message = "Milestone must be completed before approval."


class AlreadyPaid(EscrowError):
    code = "ALREADY_PAID"
    status_code = 409
    default_message = "Milestone has already been paid."


class EscrowNotFound(EscrowError):
    code = "ESCROW_NOT_FOUND"
    status_code = 404
    default_message = "Escrow not found."


__all__ = [
    "error_response",
    "EscrowError",
    "AmountMismatch",
    "InvalidAmount",
    "NotOwner",
    "NotDeveloper",
    "InsufficientCapital",
    "InvalidIndex",
    "AlreadyCompleted",
    "NotCompleted",
    "AlreadyPaid",
    "EscrowNotFound",
]
