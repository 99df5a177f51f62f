"""Error Hierarchy — typed, categorized exceptions for all TontinePro failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (4xx) are per-request failures; none is fatal to the process
    - to_response() produces the REST envelope
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with TontineError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - Core check_* functions RETURN these instances; services raise them (ADR: pure core)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tontine_id: str | None = None
    payment_id: str | None = None
    actor_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None


class TontineError(Exception):
    """Base exception for all TontinePro errors."""

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
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "tontine_id": self.context.tontine_id,
                    "payment_id": self.context.payment_id,
                },
            }
        }


# ─── Domain Errors (4xx) ────────────────────────────────────────

class UnauthenticatedError(TontineError):
    """No verified principal was supplied by the identity provider."""
    def __init__(self, message: str = "Missing or invalid identity", context: ErrorContext | None = None):
        super().__init__(
            message, "UNAUTHENTICATED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


class ForbiddenError(TontineError):
    """Actor lacks the required role or ownership."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "FORBIDDEN", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 403,
        )


class ResourceNotFoundError(TontineError):
    """Requested id or invitation code does not resolve."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class InvalidStateError(TontineError):
    """Operation illegal for the current lifecycle or payment status."""
    def __init__(self, message: str, current_state: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_STATE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.current_state = current_state


class CapacityExceededError(TontineError):
    """Roster already holds `capacity` participants."""
    def __init__(self, capacity: int, context: ErrorContext | None = None):
        super().__init__(
            f"Tontine is full ({capacity}/{capacity} participants)",
            "CAPACITY_EXCEEDED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 409,
        )
        self.capacity = capacity


class InvalidOrderError(TontineError):
    """Reorder payload is not a permutation of the current rotation order."""
    def __init__(
        self,
        missing: list[str],
        unexpected: list[str],
        duplicates: list[str],
        context: ErrorContext | None = None,
    ):
        parts = []
        if missing:
            parts.append(f"missing: {', '.join(missing)}")
        if unexpected:
            parts.append(f"unexpected: {', '.join(unexpected)}")
        if duplicates:
            parts.append(f"duplicated: {', '.join(duplicates)}")
        super().__init__(
            f"New order is not a permutation of the current order ({'; '.join(parts)})",
            "INVALID_ORDER", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 422,
        )
        self.missing = missing
        self.unexpected = unexpected
        self.duplicates = duplicates


class ConflictError(TontineError):
    """Concurrent-mutation guard tripped."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class DuplicateKeyError(ConflictError):
    """Store-level unique constraint rejected an insert."""
    def __init__(self, key: str, context: ErrorContext | None = None):
        super().__init__(f"Duplicate value for unique key '{key}'", context)
        self.key = key


# ─── Infrastructure Errors (5xx) ────────────────────────────────

class DatabaseError(TontineError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
