from __future__ import annotations

import re

from bulk_import.models.batch_result import BatchResult, ImportReport, RowFailure
from bulk_import.services.summary import render_preview_line, render_summary_line

"""SUMMARY / PREVIEW line contract.

Key order and spelling are part of the output contract: CI jobs grep these
lines.
"""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY entity=(?P<entity>contract|partner|product) rows=(?P<rows>\d+) valid=(?P<valid>\d+) "
    r"invalid=(?P<invalid>\d+) success=(?P<success>\d+) failed=(?P<failed>\d+) "
    r"skipped=(?P<skipped>\d+) elapsed_sec=(?P<elapsed>\d+(\.\d+)?)$"
)
PREVIEW_PATTERN = re.compile(r"^PREVIEW entity=\w+ rows=\d+ valid=\d+ invalid=\d+$")


def test_summary_line_matches_contract():
    result = BatchResult(success_count=7, failures=[RowFailure(4, "x")], attempted=8, skipped=1, cancelled=True)
    line = render_summary_line(ImportReport("contract", 12, 9, 3, result, 0.4567))
    m = SUMMARY_PATTERN.match(line)
    assert m, line
    assert m.group("rows") == "12"
    assert int(m.group("valid")) + int(m.group("invalid")) == int(m.group("rows"))
    assert int(m.group("success")) + int(m.group("failed")) + int(m.group("skipped")) == int(m.group("valid"))


def test_preview_line_matches_contract():
    assert PREVIEW_PATTERN.match(render_preview_line(ImportReport("product", 0, 0, 0)))
