"""Explicit outcome type returned by core and service operations.

Core operations never raise for bad input or unknown ids; they return one of
``Ok``, ``NotFound`` or ``InvalidInput`` so callers can tell a skipped update
apart from a successful one.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class NotFound:
    entity: str
    entity_id: str

    @property
    def ok(self) -> bool:
        return False

    @property
    def detail(self) -> str:
        return f"{self.entity} '{self.entity_id}' not found"


@dataclass(frozen=True)
class InvalidInput:
    detail: str

    @property
    def ok(self) -> bool:
        return False


Result = Union[Ok[T], NotFound, InvalidInput]
