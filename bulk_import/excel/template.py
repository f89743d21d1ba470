from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pandas as pd
from openpyxl.utils import get_column_letter

from ..schemas.base import EntitySchema

"""Downloadable import templates.

One sheet per template: the schema headers on row 1, sample rows below and
column widths from the column specs. The reader only looks at the first
sheet, so a filled-in template can be uploaded as is.
"""

__all__ = [
    "write_template",
    "template_bytes",
]


def _frame(schema: EntitySchema) -> pd.DataFrame:
    return pd.DataFrame([list(s) for s in schema.samples], columns=schema.headers)


def _write(schema: EntitySchema, target: Path | BytesIO) -> None:
    with pd.ExcelWriter(target, engine="openpyxl") as writer:
        _frame(schema).to_excel(writer, sheet_name=schema.sheet_name, index=False)
        sheet = writer.sheets[schema.sheet_name]
        for i, column in enumerate(schema.columns, start=1):
            sheet.column_dimensions[get_column_letter(i)].width = column.width


def write_template(schema: EntitySchema, destination: Path | str) -> Path:
    """Write the template for ``schema``; a directory gets the default file name."""
    path = Path(destination)
    if path.is_dir():
        path = path / schema.template_file_name
    path.parent.mkdir(parents=True, exist_ok=True)
    _write(schema, path)
    return path


def template_bytes(schema: EntitySchema) -> bytes:
    buffer = BytesIO()
    _write(schema, buffer)
    return buffer.getvalue()
