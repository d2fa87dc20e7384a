"""
Result type returned by the service layer.

Every service operation returns either Ok(value) or Err(error) instead of
raising, so the caller has to look at the outcome before using it.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        raise ValueError(f"called unwrap() on an error result: {self.error!r}")


Result = Union[Ok[T], Err[E]]
