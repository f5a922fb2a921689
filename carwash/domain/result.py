"""
Explicit success/failure values returned by the booking orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

from .exceptions import CarWashError

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    error: CarWashError

    def unwrap(self):
        """Raise the carried error; lets callers opt back into exceptions."""
        raise self.error


Result = Union[Ok[T], Err]
