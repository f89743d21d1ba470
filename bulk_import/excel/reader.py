from __future__ import annotations

import math
from io import BytesIO
from pathlib import Path
from typing import Any

import pandas as pd

from ..errors import ParseError
from ..models.rows import RawRow

"""Tabular reader.

Reads the first worksheet of an uploaded spreadsheet into RawRow tuples:
- row 1 is the header and is skipped
- rows whose first cell is empty are skipped
- cells beyond ``width`` are dropped, missing cells are padded with None

Text cells are returned untrimmed; the field normalizer owns trimming, so a
whitespace-only first cell keeps its row (and fails the required check). The
``NA``/``N/A`` strings pandas turns into NaN by default are kept as text.
"""

__all__ = [
    "HEADER_ROWS",
    "read_rows",
]

HEADER_ROWS = 1

Source = Path | str | bytes | bytearray | BytesIO


def _clean_cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, str):
        return value if value else None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.to_pydatetime()
    if value is pd.NaT:
        return None
    return value


def read_rows(source: Source, width: int) -> list[RawRow]:
    """Read the first sheet of ``source`` into ``width``-wide raw rows.

    Parameters
    ----------
    source: file path or the raw bytes of an uploaded file
    width: number of template columns for the target entity

    Raises
    ------
    ParseError: the content cannot be decoded as a spreadsheet
    """
    if isinstance(source, (bytes, bytearray)):
        source = BytesIO(bytes(source))
    try:
        df = pd.read_excel(
            source,
            sheet_name=0,
            header=None,
            dtype=object,
            keep_default_na=False,
            na_values=[],
        )
    except Exception as e:
        raise ParseError(f"cannot read spreadsheet: {e}") from e

    rows: list[RawRow] = []
    for values in df.iloc[HEADER_ROWS:].itertuples(index=False, name=None):
        cells = [_clean_cell(v) for v in values[:width]]
        if not cells or cells[0] is None:
            continue
        cells.extend([None] * (width - len(cells)))
        rows.append(tuple(cells))
    return rows

