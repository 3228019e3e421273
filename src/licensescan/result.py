"""Strict Ok/Err Result type for operations with a typed failure reason.

Re-viewing a ``TextData`` can fail when its text was discarded. That failure
is a first-class value the caller inspects, not a ``None``::

    match data.with_view(0, 3):
        case Ok(value=view): ...
        case Err(error=e): ...
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success case of Result[T, E]."""
    value: T


@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure case of Result[T, E]. Carries the typed failure reason."""
    error: E


Result: TypeAlias = "Ok[T] | Err[E]"
