#!/usr/bin/env python3
"""Locate a known reference text (e.g. a license) inside documents.

For each document, scores the whole text against the reference, then narrows
it to the line range that best matches and reports that range.

Usage::

    python3 scripts/license_locate.py LICENSE-MIT src/main.c src/util.c
    python3 scripts/license_locate.py header.txt file.py --license-type header --show-lines
    python3 scripts/license_locate.py LICENSE README.md --min-score 0.9 --verbose

Structured JSON output goes to stdout; human messages go to stderr.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import orjson

sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from licensescan.license_type import LicenseType
from licensescan.text_data import TextData

log = logging.getLogger("license_locate")


def dump_json(obj: Any) -> None:
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")


def locate_reference(
    document: TextData,
    reference: TextData,
    *,
    show_lines: bool = False,
) -> dict[str, Any]:
    """Score ``document`` against ``reference`` and locate the best range.

    Returns:
        Dict with the whole-document ``score``, the ``optimized_score`` of the
        best range, and ``lines_view`` as ``[start, end]`` (end exclusive).
        ``lines`` holds the normalized lines of that range when requested.
    """
    score = document.match_score(reference)
    optimized, optimized_score = document.optimize_bounds(reference)
    result: dict[str, Any] = {
        "score": round(score, 6),
        "optimized_score": round(optimized_score, 6),
        "lines_view": list(optimized.lines_view),
    }
    if show_lines:
        result["lines"] = list(optimized.lines() or ())
    return result


def _read_text(path: Path) -> TextData:
    return TextData.from_bytes(path.read_bytes())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Locate a reference text (license, header) inside documents.",
    )
    parser.add_argument("reference", type=Path, help="Reference text file")
    parser.add_argument(
        "documents", type=Path, nargs="+", help="Documents to search",
    )
    parser.add_argument(
        "--license-type", default="original",
        help="Kind of reference: original, header or alternate (default: original)",
    )
    parser.add_argument(
        "--min-score", type=float, default=0.0,
        help="Report matched=false below this optimized score (default: 0.0)",
    )
    parser.add_argument(
        "--show-lines", action="store_true",
        help="Include the normalized lines of the located range",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        license_type = LicenseType.parse(args.license_type)
    except ValueError as exc:
        parser.error(str(exc))

    missing = [p for p in [args.reference, *args.documents] if not p.is_file()]
    if missing:
        for path in missing:
            log.error("File not found: %s", path)
        return 2

    # only the fingerprint of the reference is needed
    reference = _read_text(args.reference).without_text()
    log.info(
        "Reference %s (%s): %d n-grams",
        args.reference, license_type, len(reference.match_data),
    )

    results: list[dict[str, Any]] = []
    for path in args.documents:
        located = locate_reference(
            _read_text(path), reference, show_lines=args.show_lines,
        )
        located["matched"] = located["optimized_score"] >= args.min_score
        log.info(
            "%s: score=%.4f optimized=%.4f lines=%s",
            path, located["score"], located["optimized_score"], located["lines_view"],
        )
        results.append({"path": str(path), **located})

    dump_json({
        "reference": str(args.reference),
        "license_type": license_type.name.lower(),
        "license_type_label": str(license_type),
        "results": results,
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
