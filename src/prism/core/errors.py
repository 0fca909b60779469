"""Closed error taxonomy surfaced to the transport layer.

Every error carries an `ErrorKind` whose value is the numeric code the
outer layer reports. `PrismError.to_payload()` gives the `{code, message}`
pair used in responses.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any


class ErrorKind(IntEnum):
    WRONG_ARGUMENTS = 805
    DATA_ABSENT = 811
    INVALID_ACTION_OBJECT = 812


_DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.WRONG_ARGUMENTS: "Wrong arguments",
    ErrorKind.DATA_ABSENT: "Data is absent in base",
    ErrorKind.INVALID_ACTION_OBJECT: "Invalid action object",
}


class PrismError(Exception):
    """Base class for all errors with a transport code."""

    kind: ErrorKind = ErrorKind.WRONG_ARGUMENTS

    def __init__(self, message: str | None = None) -> None:
        self.message = message or _DEFAULT_MESSAGES[self.kind]
        super().__init__(self.message)

    @property
    def code(self) -> int:
        return int(self.kind)

    def to_payload(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(PrismError):
    """Malformed or missing caller-supplied arguments."""

    kind = ErrorKind.WRONG_ARGUMENTS


class InvalidScaleError(ValidationError):
    """An asset carries a different number of fraction digits than required."""

    def __init__(self, decs: int, required: int) -> None:
        self.decs = decs
        self.required = required
        super().__init__(f"Wrong arguments: decs must be equal {required}, got {decs}")


class MalformedAssetError(ValidationError):
    """Asset text that does not parse as `<integer>.<fraction> <SYMBOL>`."""

    def __init__(self, text: Any, reason: str) -> None:
        self.text = text
        self.reason = reason
        super().__init__(f"Wrong arguments: malformed asset {text!r} ({reason})")


class DataAbsentError(PrismError):
    kind = ErrorKind.DATA_ABSENT


class InvalidActionObjectError(PrismError):
    kind = ErrorKind.INVALID_ACTION_OBJECT
