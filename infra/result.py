from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E")


class Result(Generic[T, E]):
    """
    Ok/Err outcome of a datastore I/O step.

        r = self._ensure_directory(path).bind(lambda _d: self._write_atomic(path, text))
        if r.is_err():
            log_kv(logger, "datastore: rewrite failed", error=str(r.error))
    """

    def is_ok(self) -> bool:
        raise NotImplementedError

    def is_err(self) -> bool:
        raise NotImplementedError

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        raise NotImplementedError

    def bind(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Run the next step only on Ok."""
        raise NotImplementedError


@dataclass(frozen=True)
class Ok(Result[T, E]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        return Ok(fn(self.value))

    def bind(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return fn(self.value)


@dataclass(frozen=True)
class Err(Result[T, E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        return Err(self.error)  # type: ignore[return-value]

    def bind(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return Err(self.error)  # type: ignore[return-value]
