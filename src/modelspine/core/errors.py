"""
Structured error types for modelspine.

Every failure the engine can report is a ``ModelSpineError`` subclass that
carries a category, a retryable flag, structured context (table, operation,
dialect, statement) and an optional chained cause.  Session and migration
operations return these inside ``Err`` rather than raising them, so callers
can branch on the concrete type.

Manifesto:
    - **Typed failures:** ``InvalidFieldError`` is not ``ConnectionError``
    - **Explicit retry semantics:** Nothing here retries; the flag only
      tells the caller whether a retry could help
    - **Rich context:** Errors know which table and statement failed
    - **Error chaining:** Driver exceptions survive as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       ModelSpineError                            │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ValidationError        ConfigError           DatabaseError     │
        │  (VALIDATION)           (CONFIG)              (DATABASE)        │
        │       │                      │                     │            │
        │  InvalidFieldError     UnsupportedOperation   ConnectionError   │
        │  TypeMismatchError                            NotFoundError     │
        │  SchemaError                                  MigrationError    │
        │                                                 │               │
        │                                  UnresolvedForeignKeyError      │
        │                                                                  │
        │  TransientError ── DatabaseConnectionError (connect() failed)   │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = InvalidFieldError("no column 'agee' on 'user'", field="agee")
    >>> error.category
    <ErrorCategory.VALIDATION: 'VALIDATION'>
    >>> error.with_context(table="user", operation="select").context.table
    'user'

Guardrails:
    ❌ DON'T: Raise bare ``Exception`` from engine code
    ✅ DO: Pick the narrowest subclass and pass ``cause=``

    ❌ DON'T: Treat ``NotFoundError`` as fatal
    ✅ DO: Inspect it; an update that matched no row is a normal outcome

Tags:
    error-handling, exception-hierarchy, modelspine, orm, database
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Error categories used for classification and log routing."""

    DATABASE = "DATABASE"         # Driver, network, constraint failures
    VALIDATION = "VALIDATION"     # Bad field names, values, descriptors
    CONFIG = "CONFIG"             # Unknown dialects, unsupported operations
    NETWORK = "NETWORK"           # Connection establishment
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only the fields relevant to a failure are set; ``to_dict()`` drops the
    rest so log lines stay small.

    Attributes:
        table: Table the failing operation targeted
        operation: Engine operation (``"insert"``, ``"migrate"``, ...)
        dialect: Dialect name the SQL was rendered for
        statement: SQL text that failed, if any
        metadata: Any additional key-value pairs
    """

    table: str | None = None
    operation: str | None = None
    dialect: str | None = None
    statement: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["table", "operation", "dialect", "statement"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ModelSpineError(Exception):
    """
    Base exception for all modelspine errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    callers get sensible defaults without passing them on every raise.

    Examples:
        >>> error = ModelSpineError("Something went wrong")
        >>> error.retryable
        False
        >>> try:
        ...     raise OSError("socket closed")
        ... except OSError as e:
        ...     error = ModelSpineError("query failed", cause=e)
        >>> error.cause
        OSError('socket closed')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ModelSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError("no row").with_context(table="user", operation="update")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(ModelSpineError):
    """
    Descriptor, field or value validation error.

    Never retryable: the model or the call site must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class InvalidFieldError(ValidationError):
    """A predicate or value references a column the model(s) in scope lack."""


class TypeMismatchError(ValidationError):
    """A value cannot be coerced to its field's kind."""


class SchemaError(ValidationError):
    """A field or model descriptor is internally inconsistent."""


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(ModelSpineError):
    """Configuration error (unknown dialect, bad URL, missing driver)."""

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class UnsupportedOperationError(ConfigError):
    """The active dialect cannot express the requested statement."""

    def __init__(self, message: str, *, dialect: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        if dialect is not None:
            self.context.dialect = dialect


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(ModelSpineError):
    """Failure while talking to, or reported by, the database."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class ConnectionError(DatabaseError):  # noqa: A001
    """Any failure surfaced by the external connection.

    Network faults, constraint violations and syntax errors all arrive
    here with the driver exception chained as ``cause``.
    """


class NotFoundError(DatabaseError):
    """An update or delete matched zero rows."""

    def __init__(self, message: str, *, key: Any = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.key = key

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.key is not None:
            result["key"] = repr(self.key)
        return result


class MigrationError(DatabaseError):
    """A migration batch stopped; ``applied`` lists tables created before it."""

    def __init__(
        self,
        message: str,
        *,
        table: str | None = None,
        statement: str | None = None,
        applied: list[str] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.table = table
        self.statement = statement
        self.applied = list(applied or [])
        self.context.table = table
        self.context.statement = statement
        self.context.operation = "migrate"


class UnresolvedForeignKeyError(MigrationError):
    """Foreign-key dependencies cannot be ordered (missing target or cycle)."""


# =============================================================================
# TRANSIENT ERRORS
# =============================================================================


class TransientError(ModelSpineError):
    """Temporary condition that may succeed if the caller tries again."""

    default_category = ErrorCategory.NETWORK
    default_retryable = True


class DatabaseConnectionError(TransientError):
    """Establishing the driver connection (or pool) failed."""

    default_category = ErrorCategory.DATABASE


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: BaseException) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, ModelSpineError):
        return error.retryable
    return False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ModelSpineError",
    "ValidationError",
    "InvalidFieldError",
    "TypeMismatchError",
    "SchemaError",
    "ConfigError",
    "UnsupportedOperationError",
    "DatabaseError",
    "ConnectionError",
    "NotFoundError",
    "MigrationError",
    "UnresolvedForeignKeyError",
    "TransientError",
    "DatabaseConnectionError",
    "is_retryable",
]
