"""Executor doubles that satisfy ``AsyncExecutor``."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from modelspine.core.protocols import ExecuteResult


class RecordingExecutor:
    """Records every statement; forwards to ``inner`` or answers from a script.

    ``fail_with`` is raised for statements containing ``fail_when`` (or for
    every statement when ``fail_when`` is None).
    """

    def __init__(
        self,
        inner: Any = None,
        *,
        dialect: Any = None,
        rows: list[dict[str, Any]] | None = None,
        result: ExecuteResult | None = None,
        fail_with: BaseException | None = None,
        fail_when: str | None = None,
    ):
        self._inner = inner
        self._dialect = dialect if dialect is not None else inner.dialect
        self.rows = rows or []
        self.result = result or ExecuteResult()
        self.fail_with = fail_with
        self.fail_when = fail_when
        self.calls: list[tuple[str, str, list[Any]]] = []

    @property
    def dialect(self):
        return self._dialect

    @property
    def executed(self) -> list[str]:
        return [sql for kind, sql, _ in self.calls if kind == "execute"]

    def _maybe_fail(self, sql: str) -> None:
        if self.fail_with is not None and (self.fail_when is None or self.fail_when in sql):
            raise self.fail_with

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        self.calls.append(("fetch_all", sql, list(params)))
        self._maybe_fail(sql)
        if self._inner is not None:
            return await self._inner.fetch_all(sql, params)
        return list(self.rows)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        self.calls.append(("execute", sql, list(params)))
        self._maybe_fail(sql)
        if self._inner is not None:
            return await self._inner.execute(sql, params)
        return self.result
