"""
Result envelope for session and migration outcomes.

Every public engine operation returns ``Ok[T]`` or ``Err[T]`` instead of
raising.  The caller decides what a ``NotFoundError`` or a
``ConnectionError`` means for them; nothing is silently swallowed and
nothing is retried behind their back.

Manifesto:
    - **Explicit over implicit:** A failed insert is a value, not a jump
    - **Typed failures:** ``Err.error`` is always a ``ModelSpineError``
      subclass when it comes from the engine
    - **Composable:** ``map`` / ``flat_map`` chain dependent steps without
      nested try/except blocks

Examples:
    >>> from modelspine.core.result import Ok, Err
    >>> Ok(3).map(lambda n: n + 1).unwrap()
    4
    >>> Err(ValueError("boom")).unwrap_or(0)
    0

    Pattern matching works on both variants:

    >>> match await session.get(User, kwargs(name="Jane")):
    ...     case Ok(None):
    ...         print("no such user")
    ...     case Ok(user):
    ...         print(user.role)
    ...     case Err(error):
    ...         print(error.to_dict())

Tags:
    result-pattern, error-handling, functional, modelspine
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from modelspine.core.errors import ModelSpineError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result containing a value."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the value. Safe for Ok."""
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_or_else(self, f: Callable[[Exception], T]) -> T:
        return self.value

    def unwrap_err(self) -> Exception:
        raise ValueError(f"Called unwrap_err on Ok: {self.value!r}")

    def map(self, f: Callable[[T], U]) -> Result[U]:
        """Transform the value if Ok."""
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        """Chain to another Result-returning function."""
        return f(self.value)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        return self

    def inspect(self, f: Callable[[T], None]) -> Result[T]:
        """Call f with value for side effects, return self."""
        f(self.value)
        return self

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """Failed result containing an exception."""

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the contained error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_or_else(self, f: Callable[[Exception], T]) -> T:
        return f(self.error)

    def unwrap_err(self) -> Exception:
        return self.error

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Err(self.error)

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        return Err(self.error)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        """Transform the error."""
        return Err(f(self.error))

    def inspect(self, f: Callable[[T], None]) -> Result[T]:
        return self

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.error, ModelSpineError):
            return {"ok": False, "error": self.error.to_dict()}
        return {
            "ok": False,
            "error": {"error_type": type(self.error).__name__, "message": str(self.error)},
        }

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Union[Ok[T], Err[T]]


def try_result(f: Callable[[], T]) -> Result[T]:
    """Run ``f`` and capture any ``ModelSpineError`` as ``Err``.

    Only engine errors are captured; anything else is a bug and propagates.
    """
    try:
        return Ok(f())
    except ModelSpineError as e:
        return Err(e)


def collect_results(results: Iterable[Result[T]]) -> Result[list[T]]:
    """Turn many results into one: the values, or the first error."""
    values: list[T] = []
    for result in results:
        if isinstance(result, Err):
            return Err(result.error)
        values.append(result.value)
    return Ok(values)


__all__ = [
    "Result",
    "Ok",
    "Err",
    "try_result",
    "collect_results",
]
