"""Error Hierarchy — typed exceptions for every SquirrelDB failure mode.

Invariants:
    - Every error has a kind (ErrorKind), code (str) and severity (ErrorSeverity)
    - Exactly three concrete error classes, one per ErrorKind
    - to_response() produces a structured envelope for callers that report errors

Design Decisions:
    - Single hierarchy with SquirrelError base: callers catch one type and branch on .kind
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Storage engine failures are InvalidType with the driver message embedded
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """The three failure kinds surfaced to callers."""
    MISSING_VALUE = "MISSING_VALUE"
    PARSE_EXCEPTION = "PARSE_EXCEPTION"
    INVALID_TYPE = "INVALID_TYPE"


class ErrorSeverity(str, Enum):
    """Error severity for observability."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Where an error happened, for logs and error envelopes."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    table: str | None = None
    record_id: str | None = None
    column: str | None = None
    operation: str | None = None
    debug_info: dict[str, Any] | None = None


class SquirrelError(Exception):
    """Base exception for all SquirrelDB errors."""

    def __init__(
        self,
        message: str,
        kind: ErrorKind,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.code = kind.value
        self.severity = severity
        self.context = context or ErrorContext()

    def to_response(self) -> dict:
        """Convert to a structured error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "table": self.context.table,
                    "record_id": self.context.record_id,
                    "column": self.context.column,
                    "operation": self.context.operation,
                },
            }
        }


class MissingValueError(SquirrelError):
    """A required field (id on write, the record on increment) is absent."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, ErrorKind.MISSING_VALUE, ErrorSeverity.ERROR, context)


class ParseExceptionError(SquirrelError):
    """Stored data could not be decoded back to an application value."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(message, ErrorKind.PARSE_EXCEPTION, ErrorSeverity.ERROR, context)


class InvalidTypeError(SquirrelError):
    """Argument shape, schema/type mismatch, unknown table or storage failure."""
    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
    ):
        super().__init__(message, ErrorKind.INVALID_TYPE, severity, context)
