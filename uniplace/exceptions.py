"""
Domain errors raised by the service layer.

Endpoints translate these into HTTP responses; services never build
HTTP responses themselves.
"""

from typing import Optional


class UniPlaceError(Exception):
    """Base class for all UniPlace service errors."""


class ParseError(UniPlaceError):
    """Uploaded CSV is structurally malformed."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        location = []
        if self.line is not None:
            location.append(f"line {self.line}")
        if self.column is not None:
            location.append(f"column {self.column}")
        if location:
            return f"{self.message} ({', '.join(location)})"
        return self.message


class ValidationError(UniPlaceError):
    """User input rejected before any write was attempted."""


class StoreError(UniPlaceError):
    """A query or write against the database failed."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MailRelayError(UniPlaceError):
    """Mail relay unreachable or answered with a non-2xx status."""


class ReportEmptyError(UniPlaceError):
    """Requested report has no rows."""
