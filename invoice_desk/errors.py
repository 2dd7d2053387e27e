from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

GENERIC_MESSAGE = "Something went wrong. Please try again."
NETWORK_MESSAGE = "Could not reach the server. Check your connection and try again."
LOGIN_PATH = "/login"


class InvoiceDeskError(Exception):
    """Base error. `message` is what the user gets to read."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# ---------- client-side, before any request ---------- #

class ValidationFailed(InvoiceDeskError):
    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationFailed":
        errors = exc.errors()
        if not errors:
            return cls("Invalid input.")
        first = errors[0]
        loc = ".".join(str(p) for p in first.get("loc", ()) if p != "__root__")
        msg = str(first.get("msg", "Invalid input."))
        # pydantic prefixes messages raised from validators
        if msg.startswith("Value error, "):
            msg = msg[len("Value error, "):]
        return cls(msg, field=loc or None)


class ActionNotAllowed(ValidationFailed):
    def __init__(self, action: str, status: str):
        super().__init__(f"Cannot {action.replace('_', ' ')} an invoice with status {status}.")
        self.action = action
        self.status = status


class PaymentExceedsRemaining(ValidationFailed):
    def __init__(self, message: str, max_amount):
        super().__init__(message, field="amount")
        self.max_amount = max_amount


# ---------- from the server / transport ---------- #

class AuthenticationRequired(InvoiceDeskError):
    def __init__(self, message: str = "Session expired. Please log in again."):
        super().__init__(message)
        self.redirect_to = LOGIN_PATH


class ApiError(InvoiceDeskError):
    def __init__(self, message: str, status_code: int, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class TransportError(InvoiceDeskError):
    def __init__(self, message: str = NETWORK_MESSAGE):
        super().__init__(message)


def user_message(exc: BaseException, default: str = GENERIC_MESSAGE) -> str:
    """Converts any error caught at an operation boundary into display text."""
    if isinstance(exc, InvoiceDeskError):
        return exc.message or default
    if isinstance(exc, ValidationError):
        return ValidationFailed.from_pydantic(exc).message
    return default
