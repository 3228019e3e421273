"""Compiled text/matching data: the value compared against reference texts.

``TextData`` wraps the n-gram fingerprint of a normalized text plus, unless
discarded, the normalized lines it came from. Scoring two ``TextData`` values
is a Dice coefficient over their fingerprints. ``optimize_bounds`` narrows a
large document down to the line range that best matches a known reference:

    >>> reference = TextData.from_text("My First License")
    >>> sample = TextData.from_text(
    ...     "copyright 20xx me irl\\n// My First License\\nfn hello() {\\n ..."
    ... )
    >>> optimized, score = sample.optimize_bounds(reference)
    >>> optimized.lines_view
    (1, 2)

Identifiable copyright statements are stripped during pre-processing, so the
copyright line scores the same with or without it; ties keep the later start.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import orjson

from licensescan.ngram import NgramSet
from licensescan.preproc import apply_aggressive, apply_normalizers
from licensescan.result import Err, Ok, Result

log = logging.getLogger(__name__)

NGRAM_SIZE = 2


class MissingTextError(RuntimeError):
    """Raised when an operation needs normalized text that was discarded."""


@dataclass(frozen=True, slots=True)
class StoredText:
    """Normalized text kept alongside a fingerprint.

    ``lines`` always covers the whole original input, not just the view, so
    that a narrowed ``TextData`` can be re-viewed again.
    """

    lines: tuple[str, ...]
    processed: str  # aggressive form of the active view only


@dataclass(frozen=True, slots=True, repr=False)
class TextData:
    """Fingerprint of a text plus the line range ("view") it was built from.

    Immutable: every narrowing returns a new instance.

    Attributes:
        match_data: N-gram fingerprint of the active view.
        lines_view: ``(start, end)`` line bounds of the active view, end
            exclusive. ``(0, 0)`` once text is discarded.
        text: Stored normalized lines and processed view text, or ``None``
            after ``without_text``.
    """

    match_data: NgramSet
    lines_view: tuple[int, int] = (0, 0)
    text: StoredText | None = None

    def __post_init__(self) -> None:
        start, end = self.lines_view
        if self.text is None:
            if self.lines_view != (0, 0):
                raise ValueError(
                    f"TextData without text must have view (0, 0), got {self.lines_view}"
                )
        elif not 0 <= start <= end <= len(self.text.lines):
            raise ValueError(
                f"View {self.lines_view} out of range for {len(self.text.lines)} lines"
            )

    # ── Construction ──────────────────────────────────────────

    @classmethod
    def from_text(cls, text: str) -> TextData:
        """Normalize ``text`` and fingerprint all of it.

        The normalized lines are stored for later diagnostics and for
        ``optimize_bounds``. Call ``without_text`` to drop them when only
        scoring is needed (e.g. long-lived reference entries).
        """
        lines = tuple(apply_normalizers(text))
        processed = apply_aggressive("\n".join(lines))
        return cls(
            match_data=NgramSet.from_str(processed, NGRAM_SIZE),
            lines_view=(0, len(lines)),
            text=StoredText(lines=lines, processed=processed),
        )

    @classmethod
    def from_str(cls, text: str) -> TextData:
        """Alias of ``from_text``."""
        return cls.from_text(text)

    @classmethod
    def from_bytes(cls, data: bytes) -> TextData:
        """Decode ``data`` as UTF-8 (undecodable bytes replaced) and build."""
        return cls.from_text(data.decode("utf-8", errors="replace"))

    def without_text(self) -> TextData:
        """Return a copy without normalized/processed text stored.

        The fingerprint, and therefore every score, is unchanged. The copy can
        still be the *reference* of ``optimize_bounds`` but can no longer be
        re-viewed or optimized itself.
        """
        return TextData(match_data=self.match_data)

    # ── Accessors ─────────────────────────────────────────────

    @property
    def has_text(self) -> bool:
        return self.text is not None

    @property
    def processed_text(self) -> str | None:
        """Aggressively-normalized text of the active view, if stored."""
        return self.text.processed if self.text is not None else None

    def lines(self) -> tuple[str, ...] | None:
        """Normalized lines within the active view, or None if discarded."""
        if self.text is None:
            return None
        start, end = self.lines_view
        return self.text.lines[start:end]

    # ── Scoring ───────────────────────────────────────────────

    def match_score(self, other: TextData) -> float:
        """Similarity to ``other`` in [0, 1]; 1.0 is a perfect match."""
        return self.match_data.dice(other.match_data)

    def eq_data(self, other: TextData) -> bool:
        """Exact fingerprint equality (identity check, not similarity)."""
        return self.match_data == other.match_data

    # ── Views and bound optimization ──────────────────────────

    def with_view(self, start: int, end: int) -> Result[TextData, MissingTextError]:
        """Copy with the view set to lines ``[start, end)`` of the original text.

        Match data is regenerated for the new view. Used by
        ``optimize_bounds``; other methods already respect the view.

        Returns Err(MissingTextError) when the text was discarded. Raises
        ValueError for bounds outside the stored lines.
        """
        if self.text is None:
            return Err(MissingTextError("TextData does not have original text"))
        lines = self.text.lines
        if not 0 <= start <= end <= len(lines):
            raise ValueError(f"View ({start}, {end}) out of range for {len(lines)} lines")
        processed = apply_aggressive("\n".join(lines[start:end]))
        return Ok(TextData(
            match_data=NgramSet.from_str(processed, NGRAM_SIZE),
            lines_view=(start, end),
            text=StoredText(lines=lines, processed=processed),
        ))

    def _view(self, start: int, end: int) -> TextData:
        match self.with_view(start, end):
            case Ok(value=view):
                return view
            case Err(error=error):
                # callers check for text first; reaching this is a bug
                raise error

    def optimize_bounds(self, other: TextData) -> tuple[TextData, float]:
        """Narrow this text to the line range that best matches ``other``.

        Returns a copy of ``self`` viewed on the best range, and its score.
        The end bound is optimized first (start held), then the start bound
        (new end held). ``other`` may have discarded its text; ``self`` may
        not.

        The search assumes the score rises then falls as one bound moves.
        Blank lines do not change the score, so a range bordered by blank
        lines may be reported with some of them included. Check
        ``lines_view`` on the result for the location.

        Raises:
            MissingTextError: ``self`` was created or copied without text.
        """
        if self.text is None:
            raise MissingTextError(
                "Cannot optimize bounds: document text was discarded"
            )
        start = self.lines_view[0]

        end_optimized, end_score = self._search_optimize(
            lambda end: self._view(start, end).match_score(other),
            lambda end: self._view(start, end),
        )
        new_end = end_optimized.lines_view[1]
        log.debug(
            "end bound %d -> %d (score %.4f)", self.lines_view[1], new_end, end_score
        )

        optimized, score = end_optimized._search_optimize(
            lambda begin: end_optimized._view(begin, new_end).match_score(other),
            lambda begin: end_optimized._view(begin, new_end),
        )
        log.debug(
            "optimized view %s -> %s (score %.4f)",
            self.lines_view, optimized.lines_view, score,
        )
        return optimized, score

    def _search_optimize(
        self,
        score: Callable[[int], float],
        value: Callable[[int], TextData],
    ) -> tuple[TextData, float]:
        """Ternary search for the index in ``lines_view`` maximizing ``score``."""
        # score checks re-fingerprint a view each time; cache them per search
        memo: dict[int, float] = {}

        def check_score(index: int) -> float:
            if index not in memo:
                memo[index] = score(index)
            return memo[index]

        def search(left: int, right: int) -> tuple[int, float]:
            if right - left <= 3:
                # highest score in [left, right]; ties go to the later index
                best = (0, 0.0)
                for index in range(left, right + 1):
                    candidate = (index, check_score(index))
                    if candidate[1] >= best[1]:
                        best = candidate
                return best

            low = (left * 2 + right) // 3
            high = (left + right * 2) // 3
            if check_score(low) > check_score(high):
                return search(left, high - 1)
            return search(low + 1, right)

        best_index, best_score = search(*self.lines_view)
        return value(best_index), best_score

    # ── Serialization ─────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "match_data": self.match_data.to_dict(),
            "lines_view": list(self.lines_view),
        }
        if self.text is not None:
            payload["lines_normalized"] = list(self.text.lines)
            payload["text_processed"] = self.text.processed
        return payload

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> TextData:
        """Rebuild from ``to_dict`` output. Raises ValueError when malformed.

        When normalized lines are present, the processed text and fingerprint
        are recomputed from the stored view, and a stored fingerprint that
        disagrees with them is rejected.
        """
        try:
            match_data = NgramSet.from_dict(payload["match_data"])
            start, end = (int(v) for v in payload["lines_view"])
            lines = payload.get("lines_normalized")
            if lines is not None:
                lines = tuple(str(line) for line in lines)
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"Malformed TextData payload: {exc}") from exc
        if lines is None:
            return cls(match_data=match_data, lines_view=(start, end))

        whole = cls(
            match_data=NgramSet(n=NGRAM_SIZE),
            lines_view=(0, len(lines)),
            text=StoredText(lines=lines, processed=""),
        )
        data = whole._view(start, end)
        if data.match_data != match_data:
            raise ValueError(
                f"Malformed TextData payload: fingerprint does not match view {start, end}"
            )
        return data

    def to_json(self) -> bytes:
        return orjson.dumps(self.to_dict())

    @classmethod
    def from_json(cls, data: bytes | str) -> TextData:
        payload = orjson.loads(data)
        if not isinstance(payload, dict):
            raise ValueError("TextData JSON must be an object")
        return cls.from_dict(payload)

    def __repr__(self) -> str:
        return (
            f"TextData(lines_view={self.lines_view}, grams={len(self.match_data)}, "
            f"has_text={self.has_text})"
        )
