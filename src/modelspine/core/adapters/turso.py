"""Turso (libSQL) database adapter over the HTTP pipeline API.

Each statement is one ``POST /v2/pipeline`` carrying an ``execute``
request followed by ``close``.  Parameters are sent as named arguments
(``:p1``, ``:p2``, ...) with typed values, matching the placeholders the
Turso dialect renders.

Wire format::

    → {"requests": [
          {"type": "execute",
           "stmt": {"sql": "SELECT ... WHERE \\"age\\" < :p1",
                    "named_args": [{"name": ":p1",
                                    "value": {"type": "integer", "value": "30"}}]}},
          {"type": "close"}]}

    ← {"results": [
          {"type": "ok", "response": {"type": "execute", "result": {
              "cols": [{"name": "id"}, ...],
              "rows": [[{"type": "integer", "value": "1"}, ...]],
              "affected_row_count": 0,
              "last_insert_rowid": null}}},
          {"type": "ok", "response": {"type": "close"}}]}
"""

from __future__ import annotations

import base64
from collections.abc import Sequence
from typing import Any

from modelspine.core.errors import ConfigError, DatabaseConnectionError
from modelspine.core.protocols import ExecuteResult

from .base import DatabaseAdapter
from .types import DatabaseConfig, DatabaseType

PIPELINE_PATH = "/v2/pipeline"


class HranaError(Exception):
    """The server rejected a statement (``{"type": "error"}`` result)."""

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code


def encode_value(value: Any) -> dict[str, Any]:
    """Typed protocol value for one parameter."""
    if value is None:
        return {"type": "null"}
    if isinstance(value, bool):
        return {"type": "integer", "value": "1" if value else "0"}
    if isinstance(value, int):
        return {"type": "integer", "value": str(value)}
    if isinstance(value, float):
        return {"type": "float", "value": value}
    if isinstance(value, (bytes, bytearray)):
        return {"type": "blob", "base64": base64.b64encode(bytes(value)).decode("ascii")}
    return {"type": "text", "value": str(value)}


def decode_value(value: dict[str, Any]) -> Any:
    """Python value for one typed protocol value."""
    match value.get("type"):
        case "null":
            return None
        case "integer":
            return int(value["value"])
        case "float":
            return float(value["value"])
        case "blob":
            encoded = value.get("base64", "")
            return base64.b64decode(encoded + "=" * (-len(encoded) % 4))
        case _:
            return value.get("value")


class TursoAdapter(DatabaseAdapter):
    """
    Turso / libSQL adapter.

    Uses one ``httpx.AsyncClient``; statements are independent HTTP
    requests, so each one commits on its own.
    """

    def __init__(
        self,
        url: str,
        auth_token: str | None = None,
        *,
        connect_timeout: float = 10.0,
        transport: Any = None,
        **kwargs: Any,
    ):
        if url.startswith("libsql://"):
            url = "https://" + url[len("libsql://"):]
        config = DatabaseConfig(
            db_type=DatabaseType.TURSO,
            url=url.rstrip("/"),
            auth_token=auth_token,
            connect_timeout=connect_timeout,
            options=kwargs,
        )
        super().__init__(config)
        self._transport = transport
        self._client: Any = None

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> TursoAdapter:
        return cls(
            config.to_connection_string(),
            config.auth_token,
            connect_timeout=config.connect_timeout,
            **config.options,
        )

    async def connect(self) -> None:
        """Open the HTTP client."""
        if self._client is not None:
            return
        try:
            import httpx
        except ImportError:
            raise ConfigError(
                "httpx is required for Turso. Install with: pip install httpx"
            ) from None

        headers = {"Content-Type": "application/json"}
        if self._config.auth_token:
            headers["Authorization"] = f"Bearer {self._config.auth_token}"
        try:
            self._client = httpx.AsyncClient(
                base_url=self._config.url,
                headers=headers,
                timeout=self._config.connect_timeout,
                transport=self._transport,
            )
        except (ValueError, httpx.HTTPError) as e:
            raise DatabaseConnectionError(
                f"Failed to open Turso client: {e}",
                cause=e,
            ) from e
        self._mark_connected(url=self._config.url)

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            self._mark_disconnected()

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        result = await self._run(sql, params)
        columns = [col.get("name") for col in result.get("cols", [])]
        return [
            dict(zip(columns, (decode_value(v) for v in row), strict=False))
            for row in result.get("rows", [])
        ]

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        result = await self._run(sql, params)
        last_id = result.get("last_insert_rowid")
        return ExecuteResult(
            rows_affected=int(result.get("affected_row_count") or 0),
            last_insert_id=int(last_id) if last_id is not None else None,
        )

    def build_pipeline(self, sql: str, params: Sequence[Any] = ()) -> dict[str, Any]:
        """Request body for one statement."""
        stmt: dict[str, Any] = {"sql": sql}
        if params:
            stmt["named_args"] = [
                {"name": self._dialect.placeholder(i), "value": encode_value(value)}
                for i, value in enumerate(params)
            ]
        return {"requests": [{"type": "execute", "stmt": stmt}, {"type": "close"}]}

    async def _run(self, sql: str, params: Sequence[Any]) -> dict[str, Any]:
        self._require_connection()
        response = await self._client.post(PIPELINE_PATH, json=self.build_pipeline(sql, params))
        response.raise_for_status()
        first = response.json()["results"][0]
        if first.get("type") == "error":
            error = first.get("error") or {}
            raise HranaError(error.get("message", "statement failed"), error.get("code"))
        return first["response"]["result"]


__all__ = [
    "TursoAdapter",
    "HranaError",
    "encode_value",
    "decode_value",
]
