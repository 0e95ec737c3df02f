"""modelspine core -- errors, results, logging, settings, dialects, adapters.

Architecture::

    Layer 1 -- Type System & Errors
        errors.py          Structured error hierarchy (ModelSpineError, ...)
        result.py          Result[T] envelope (Ok / Err / try_result)
        protocols.py       AsyncExecutor protocol + ExecuteResult

    Layer 2 -- Infrastructure
        logging.py         structlog configuration
        settings.py        pydantic-settings (DATABASE_URL, MODELSPINE_*)
        dialect.py         SQL dialect strategies (4 backends)
        adapters/          Async database adapters (SQLite, PostgreSQL, MySQL, Turso)
        migrations/        Migrator (dependency-ordered CREATE TABLE IF NOT EXISTS)

Only Layer 1 is re-exported here; import the rest from their modules.
"""

from modelspine.core.errors import (
    ConfigError,
    ConnectionError,
    DatabaseConnectionError,
    DatabaseError,
    ErrorCategory,
    ErrorContext,
    InvalidFieldError,
    MigrationError,
    ModelSpineError,
    NotFoundError,
    SchemaError,
    TransientError,
    TypeMismatchError,
    UnresolvedForeignKeyError,
    UnsupportedOperationError,
    ValidationError,
    is_retryable,
)
from modelspine.core.protocols import AsyncExecutor, ExecuteResult
from modelspine.core.result import Err, Ok, Result, collect_results, try_result

__all__ = [
    # Errors
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
    # Result
    "Result",
    "Ok",
    "Err",
    "try_result",
    "collect_results",
    # Protocols
    "AsyncExecutor",
    "ExecuteResult",
]
