"""Database types, connection configuration and URL parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from urllib.parse import unquote, urlsplit

from modelspine.core.errors import ConfigError


class DatabaseType(str, Enum):
    """Supported database types."""

    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    TURSO = "turso"


_DEFAULT_PORTS = {
    DatabaseType.POSTGRESQL: 5432,
    DatabaseType.MYSQL: 3306,
}


@dataclass
class DatabaseConfig:
    """
    Configuration for database connection.

    Different fields are used by different database types.
    """

    # Common
    db_type: DatabaseType = DatabaseType.SQLITE

    # SQLite
    path: str | None = None

    # PostgreSQL / MySQL
    host: str = "localhost"
    port: int | None = None
    database: str = ""
    username: str | None = None
    password: str | None = None

    # Turso (libSQL over HTTP)
    url: str | None = None
    auth_token: str | None = None

    # Connection
    pool_size: int = 5
    connect_timeout: float = 10.0

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.port is None:
            self.port = _DEFAULT_PORTS.get(self.db_type)

    @classmethod
    def from_url(cls, url: str, **overrides: Any) -> DatabaseConfig:
        """Parse a database URL.

        Accepted forms::

            sqlite://:memory:            sqlite:///relative.db
            sqlite:////abs/path.db       sqlite://main.db
            postgresql://u:p@host:5432/db   (also postgres://, postgresql+asyncpg://)
            mysql://u:p@host:3306/db
            libsql://db-org.turso.io     https://db-org.turso.io

        Raises:
            ConfigError: Unknown scheme or malformed URL.
        """
        if not url or not isinstance(url, str):
            raise ConfigError(f"Invalid database URL: {url!r}")

        scheme, sep, rest = url.partition(":")
        scheme = scheme.lower()
        if not sep:
            raise ConfigError(f"Database URL has no scheme: {url!r}")

        if scheme == "sqlite":
            path = rest[2:] if rest.startswith("//") else rest
            if path in ("", ":memory:", "/:memory:"):
                path = ":memory:"
            elif path.startswith("/"):
                path = path[1:]
            return cls(db_type=DatabaseType.SQLITE, path=path, **overrides)

        if scheme in ("postgresql", "postgres", "postgresql+asyncpg"):
            return cls._from_network_url(DatabaseType.POSTGRESQL, url, **overrides)

        if scheme in ("mysql", "mysql+mysqlconnector"):
            return cls._from_network_url(DatabaseType.MYSQL, url, **overrides)

        if scheme == "libsql":
            return cls(db_type=DatabaseType.TURSO, url="https:" + rest, **overrides)

        if scheme == "https" and (urlsplit(url).hostname or "").endswith(".turso.io"):
            return cls(db_type=DatabaseType.TURSO, url=url, **overrides)

        raise ConfigError(f"Unsupported database URL scheme: {scheme!r}")

    @classmethod
    def _from_network_url(cls, db_type: DatabaseType, url: str, **overrides: Any) -> DatabaseConfig:
        parts = urlsplit(url)
        try:
            port = parts.port
        except ValueError as e:
            raise ConfigError(f"Invalid port in database URL: {url!r}", cause=e) from e
        values: dict[str, Any] = {
            "db_type": db_type,
            "host": parts.hostname or "localhost",
            "port": port,
            "database": unquote(parts.path.lstrip("/")),
            "username": unquote(parts.username) if parts.username else None,
            "password": unquote(parts.password) if parts.password else None,
        }
        values.update(overrides)
        return cls(**values)

    def to_connection_string(self) -> str:
        """Generate connection string for the database type."""
        match self.db_type:
            case DatabaseType.SQLITE:
                return self.path or ":memory:"
            case DatabaseType.POSTGRESQL:
                return f"postgresql://{self._credentials()}{self.host}:{self.port}/{self.database}"
            case DatabaseType.MYSQL:
                return f"mysql://{self._credentials()}{self.host}:{self.port}/{self.database}"
            case DatabaseType.TURSO:
                if not self.url:
                    raise ConfigError("Turso configuration needs a url")
                return self.url
            case _:
                raise ConfigError(f"Connection string not supported for: {self.db_type}")

    def _credentials(self) -> str:
        if not self.username:
            return ""
        if self.password:
            return f"{self.username}:{self.password}@"
        return f"{self.username}@"


__all__ = [
    "DatabaseType",
    "DatabaseConfig",
]
