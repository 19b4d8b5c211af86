"""Error Hierarchy — typed, categorized exceptions for all Taskboard failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Field errors carry (entity, field, kind, message) — the kind is one of ErrorKind
    - Domain errors (400/404/409) are raised synchronously and never retried
    - to_response() produces the structured envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with TaskboardError base: callers catch one type (uniform error shape)
    - FieldViolation is a plain value: validators return it, the shell raises it
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone

from taskboard.core.domain_types import ErrorKind


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    entity: str | None = None
    record_id: int | None = None
    field: str | None = None


@dataclass(frozen=True)
class FieldViolation:
    """A single rejected field value — the pure result of a failing validator."""
    entity: str
    field: str
    kind: ErrorKind
    message: str


class TaskboardError(Exception):
    """Base exception for all Taskboard errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized error envelope."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "entity": self.context.entity,
                    "record_id": self.context.record_id,
                    "field": self.context.field,
                },
            }
        }


# ─── Field Errors (400-level) ───────────────────────────────────

class FieldValidationError(TaskboardError):
    """A field value was rejected by its validator."""

    code = "VALIDATION_ERROR"

    def __init__(self, violation: FieldViolation, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.entity = violation.entity
        ctx.field = violation.field
        super().__init__(
            violation.message, self.code, ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.violation = violation
        self.entity = violation.entity
        self.field = violation.field
        self.kind = violation.kind

    @staticmethod
    def from_violation(
        violation: FieldViolation, context: ErrorContext | None = None,
    ) -> "FieldValidationError":
        """Build the subclass matching the violation kind."""
        cls = _ERROR_BY_KIND.get(violation.kind, FieldValidationError)
        return cls(violation, context)

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["kind"] = self.kind.value
        return response


class InvalidFormatError(FieldValidationError):
    """Value shape rejected by a regex, length or character-class rule."""
    code = "INVALID_FORMAT"


class OutOfRangeError(FieldValidationError):
    """Length, numeric or date bound violated."""
    code = "OUT_OF_RANGE"


class InvalidEnumError(FieldValidationError):
    """Value outside a closed set (null included)."""
    code = "INVALID_ENUM"


_ERROR_BY_KIND: dict[ErrorKind, type[FieldValidationError]] = {
    ErrorKind.INVALID_FORMAT: InvalidFormatError,
    ErrorKind.OUT_OF_RANGE: OutOfRangeError,
    ErrorKind.INVALID_ENUM: InvalidEnumError,
}


class ConflictError(TaskboardError):
    """Unique constraint violated — raised by the storage layer."""
    def __init__(
        self, entity: str, field: str | None, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity = entity
        ctx.field = field
        target = f"{entity}.{field}" if field else entity
        super().__init__(
            f"{target} already exists",
            "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )
        self.entity = entity
        self.field = field
        self.kind = ErrorKind.CONFLICT


class ResourceNotFoundError(TaskboardError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: int, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.entity = resource_type
        ctx.record_id = resource_id
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(TaskboardError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
