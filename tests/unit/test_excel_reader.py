from __future__ import annotations
from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

from bulk_import.errors import ParseError
from bulk_import.excel.reader import read_rows


def _make_excel(tmp_path: Path, name: str, sheets: dict[str, list[list[object]]]) -> Path:
    p = tmp_path / name
    with pd.ExcelWriter(p, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return p


def test_skips_header_and_blank_first_cell_rows(tmp_path: Path):
    excel = _make_excel(tmp_path, "a.xlsx", {
        "Sheet1": [
            ["Tên", "Giá trị"],
            ["A", 1],
            [None, 2],
            ["B", 3],
            [None, None],
        ]
    })
    assert read_rows(excel, 2) == [("A", 1), ("B", 3)]


def test_only_first_sheet_is_read(tmp_path: Path):
    excel = _make_excel(tmp_path, "b.xlsx", {
        "First": [["h"], ["one"]],
        "Second": [["h"], ["two"]],
    })
    assert read_rows(excel, 1) == [("one",)]


def test_extra_columns_dropped_and_missing_padded(tmp_path: Path):
    excel = _make_excel(tmp_path, "c.xlsx", {
        "Sheet1": [
            ["a", "b", "c", "d"],
            ["x", 1, 2, 3],
            ["y", None, None, None],
        ]
    })
    assert read_rows(excel, 2) == [("x", 1), ("y", None)]
    assert read_rows(excel, 6) == [("x", 1, 2, 3, None, None), ("y", None, None, None, None, None)]


def test_text_is_kept_untrimmed_and_na_strings_survive(tmp_path: Path):
    excel = _make_excel(tmp_path, "d.xlsx", {
        "Sheet1": [
            ["a", "b", "c"],
            ["  padded  ", "NA", "N/A"],
            ["   ", "", "x"],
        ]
    })
    assert read_rows(excel, 3) == [("  padded  ", "NA", "N/A"), ("   ", None, "x")]


def test_date_cells_become_datetimes(tmp_path: Path):
    excel = _make_excel(tmp_path, "e.xlsx", {
        "Sheet1": [["t", "d"], ["A", datetime(2024, 1, 15)]],
    })
    [(title, signed)] = read_rows(excel, 2)
    assert isinstance(signed, datetime)
    assert signed.date().isoformat() == "2024-01-15"


def test_reads_raw_bytes(tmp_path: Path):
    excel = _make_excel(tmp_path, "f.xlsx", {"Sheet1": [["h"], ["v"]]})
    assert read_rows(excel.read_bytes(), 1) == [("v",)]


@pytest.mark.parametrize("content", [b"", b"plain text, not a workbook", b"PK\x03\x04broken zip"])
def test_undecodable_content_raises_parse_error(tmp_path: Path, content: bytes):
    bad = tmp_path / "bad.xlsx"
    bad.write_bytes(content)
    with pytest.raises(ParseError):
        read_rows(bad, 3)


def test_missing_file_raises_parse_error(tmp_path: Path):
    with pytest.raises(ParseError):
        read_rows(tmp_path / "nope.xlsx", 3)
