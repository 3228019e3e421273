"""Word n-gram multisets and the Dice coefficient between them.

An ``NgramSet`` is the fingerprint of a processed text: every window of
``n`` consecutive words is one gram, counted with multiplicity.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True, slots=True)
class NgramSet:
    """Immutable, hashable multiset of word n-grams.

    ``grams`` is a read-only mapping and ``size`` is always derived from it.
    """

    n: int
    grams: Mapping[str, int] = field(default_factory=dict)
    size: int = field(init=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "grams", MappingProxyType(dict(self.grams)))
        object.__setattr__(self, "size", sum(self.grams.values()))

    def __hash__(self) -> int:
        return hash((self.n, frozenset(self.grams.items())))

    @classmethod
    def from_str(cls, text: str, n: int) -> NgramSet:
        """Build the n-gram multiset of ``text``.

        Words are whitespace-delimited. Text with fewer than ``n`` words
        yields an empty set.
        """
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        words = text.split()
        counts: Counter[str] = Counter(
            " ".join(words[i : i + n]) for i in range(len(words) - n + 1)
        )
        return cls(n=n, grams=counts)

    def __len__(self) -> int:
        return self.size

    def get(self, gram: str) -> int:
        """Count of ``gram`` in this set (0 when absent)."""
        return self.grams.get(gram, 0)

    def dice(self, other: NgramSet) -> float:
        """Dice coefficient: 2 * shared grams / (len(self) + len(other)).

        Shared grams are counted with multiplicity (min of both counts).
        Sets of different ``n`` are not comparable and score 0.0. Two empty
        sets are identical and score 1.0.
        """
        if other.n != self.n:
            return 0.0
        total = self.size + other.size
        if total == 0:
            return 1.0

        # iterate the smaller map
        small, large = (self, other) if len(self.grams) < len(other.grams) else (other, self)
        matches = 0
        for gram, count in small.grams.items():
            other_count = large.grams.get(gram)
            if other_count:
                matches += min(count, other_count)
        return 2.0 * matches / total

    def to_dict(self) -> dict[str, Any]:
        return {"n": self.n, "grams": dict(self.grams)}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> NgramSet:
        """Rebuild from ``to_dict`` output. Raises ValueError when malformed."""
        try:
            n = int(payload["n"])
            grams = {str(k): int(v) for k, v in payload["grams"].items()}
        except (KeyError, TypeError, AttributeError, ValueError) as exc:
            raise ValueError(f"Malformed n-gram payload: {exc}") from exc
        if any(v <= 0 for v in grams.values()):
            raise ValueError("N-gram counts must be positive")
        return cls(n=n, grams=grams)
