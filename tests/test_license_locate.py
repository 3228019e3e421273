"""Tests for scripts/license_locate.py."""
from __future__ import annotations

import importlib.util
from pathlib import Path
from typing import Any

import orjson

from licensescan.text_data import TextData

LICENSE_TEXT = "this is a license text\nor it pretends to be one\nit's just a test"
SAMPLE_TEXT = (
    LICENSE_TEXT
    + "\nwords\n\nhere is some\ncode\nhello();\n\n//a comment too"
)


def _load_module() -> Any:
    root = Path(__file__).resolve().parents[1]
    script_path = root / "scripts" / "license_locate.py"
    spec = importlib.util.spec_from_file_location("license_locate", script_path)
    assert spec is not None
    module = importlib.util.module_from_spec(spec)
    assert spec.loader is not None
    spec.loader.exec_module(module)
    return module


def test_locate_reference() -> None:
    mod = _load_module()
    reference = TextData.from_text(LICENSE_TEXT).without_text()
    result = mod.locate_reference(TextData.from_text(SAMPLE_TEXT), reference)
    assert result["lines_view"] == [0, 3]
    assert result["optimized_score"] == 1.0
    assert result["score"] < 1.0
    assert "lines" not in result


def test_locate_reference_show_lines() -> None:
    mod = _load_module()
    reference = TextData.from_text(LICENSE_TEXT)
    result = mod.locate_reference(
        TextData.from_text(SAMPLE_TEXT), reference, show_lines=True,
    )
    assert result["lines"] == [
        "this is a license text",
        "or it pretends to be one",
        "it's just a test",
    ]


def test_main_writes_json(tmp_path: Path, capsys: Any) -> None:
    mod = _load_module()
    reference = tmp_path / "LICENSE"
    reference.write_text(LICENSE_TEXT)
    matching = tmp_path / "main.c"
    matching.write_text(SAMPLE_TEXT)
    unrelated = tmp_path / "notes.txt"
    unrelated.write_text("nothing to see here\njust some notes")

    code = mod.main([
        str(reference), str(matching), str(unrelated),
        "--license-type", "header", "--min-score", "0.9",
    ])
    assert code == 0

    payload = orjson.loads(capsys.readouterr().out)
    assert payload["license_type"] == "header"
    assert payload["license_type_label"] == "license header"
    first, second = payload["results"]
    assert first["path"] == str(matching)
    assert first["lines_view"] == [0, 3]
    assert first["matched"] is True
    assert second["path"] == str(unrelated)
    assert second["matched"] is False


def test_main_missing_file(tmp_path: Path) -> None:
    mod = _load_module()
    reference = tmp_path / "LICENSE"
    reference.write_text(LICENSE_TEXT)
    assert mod.main([str(reference), str(tmp_path / "missing.txt")]) == 2
