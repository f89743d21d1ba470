from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import date, datetime, timedelta
from typing import Any

"""Field normalizer.

Entity-agnostic coercion primitives applied per column before validation.
None of these functions raise: values that cannot be interpreted are either
passed through as text (dates) or replaced by a default (numbers, enums), and
the row validator decides whether that is an error.
"""

__all__ = [
    "clean_text",
    "normalize_date",
    "normalize_status",
    "normalize_choice",
    "normalize_partner_type",
    "normalize_month_date",
    "normalize_gender",
    "to_number",
    "to_amount",
    "is_iso_date",
    "STATUS_KEYWORDS",
    "DEFAULT_STATUS",
]

# 1900 date system: serial 1 is 1900-01-01 and serial 60 is the phantom
# 1900-02-29 kept for Lotus 1-2-3 compatibility.
_EPOCH_BEFORE_LEAP_BUG = date(1899, 12, 31)
_EPOCH = date(1899, 12, 30)
_PHANTOM_LEAP_SERIAL = 60
_MAX_SERIAL = 2958465  # 9999-12-31

_DMY_PATTERN = re.compile(r"(\d{1,2})[/-](\d{1,2})[/-](\d{2,4})")
_ISO_PATTERN = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})")
# ISO date, optionally followed by a time: "2024-01-15T10:30:00"
_ISO_PREFIX = re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ]\S*)?")
_MONTH_YEAR_PATTERN = re.compile(r"(\d{1,2})/(\d{4})")
_NUMBER_PREFIX = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_SEPARATORS = re.compile(r"[,.\s]")

DEFAULT_STATUS = "Pending"

# first matching keyword group wins
STATUS_KEYWORDS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("active", "hiệu lực"), "Active"),
    (("pending", "chờ"), "Pending"),
    (("complete", "hoàn thành"), "Completed"),
    (("cancel", "hủy", "expired", "hết hạn"), "Expired"),
)

_SUPPLIER_KEYWORDS = ("ncc", "supplier", "cung cấp")

_GENDERS = {
    "nam": "male",
    "male": "male",
    "nữ": "female",
    "female": "female",
    "khác": "other",
    "other": "other",
}


def clean_text(value: Any) -> str:
    """Trimmed string form of a cell; None and NaN become ''.

    Integral floats from numeric cells (tax codes, phone numbers) render
    without a trailing '.0'.
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value).strip()


def _iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def _from_serial(serial: float) -> str | None:
    if math.isnan(serial) or serial < 1 or serial > _MAX_SERIAL:
        return None
    days = int(serial)
    if days < _PHANTOM_LEAP_SERIAL:
        return (_EPOCH_BEFORE_LEAP_BUG + timedelta(days=days)).isoformat()
    if days == _PHANTOM_LEAP_SERIAL:
        return "1900-02-29"
    return (_EPOCH + timedelta(days=days)).isoformat()


def normalize_date(value: Any) -> str:
    """Return ``YYYY-MM-DD`` for any recognised date encoding.

    Accepted: date/datetime objects, spreadsheet serial numbers,
    text starting with ``D/M/Y`` or ``D-M-Y`` (two-digit years are 20xx;
    a trailing time part is dropped) and ISO ``Y-M-D`` strings, optionally
    followed by a time. Empty input gives ''. Anything else, impossible
    calendar dates included, is returned as the trimmed raw text.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        try:
            serial = float(value)
        except OverflowError:
            return clean_text(value)
        return _from_serial(serial) or clean_text(value)

    text = clean_text(value)
    if not text:
        return ""
    match = _ISO_PREFIX.fullmatch(text)
    if match:
        y, m, d = (int(g) for g in match.groups())
        return _iso(y, m, d) or text
    match = _DMY_PATTERN.match(text)
    if match:
        d, m, y = match.groups()
        year = int("20" + y) if len(y) == 2 else int(y)
        return _iso(year, int(m), int(d)) or text
    return text


def normalize_month_date(value: Any) -> str:
    """Like normalize_date, but also reads ``MM/YYYY`` as the first of that month."""
    if isinstance(value, str):
        match = _MONTH_YEAR_PATTERN.fullmatch(value.strip())
        if match:
            m, y = (int(g) for g in match.groups())
            return _iso(y, m, 1) or value.strip()
    return normalize_date(value)


def is_iso_date(value: str) -> bool:
    if not _ISO_PATTERN.fullmatch(value):
        return False
    y, m, d = (int(g) for g in value.split("-"))
    return _iso(y, m, d) is not None


def normalize_status(value: Any) -> str:
    """Map free-text contract status labels onto the canonical enum."""
    lower = clean_text(value).lower()
    if not lower:
        return DEFAULT_STATUS
    for keywords, status in STATUS_KEYWORDS:
        if any(k in lower for k in keywords):
            return status
    return DEFAULT_STATUS


def normalize_choice(value: Any, choices: Iterable[str], default: str) -> str:
    """Case-insensitive membership in a closed set; anything else becomes ``default``."""
    text = clean_text(value).lower()
    for choice in choices:
        if choice.lower() == text:
            return choice
    return default


def normalize_partner_type(value: Any) -> str:
    lower = clean_text(value).lower()
    if any(k in lower for k in _SUPPLIER_KEYWORDS):
        return "Supplier"
    return "Customer"


def normalize_gender(value: Any) -> str:
    """nam/nữ/khác (or English) to male/female/other; anything else is ''."""
    return _GENDERS.get(clean_text(value).lower(), "")


def to_number(value: Any) -> float:
    """parseFloat-style coercion: leading numeric prefix of text, 0 when absent.

    Negative values are kept; validation rejects them where needed.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return 0.0
        return 0.0 if math.isnan(number) or math.isinf(number) else number
    match = _NUMBER_PREFIX.match(str(value).strip())
    if not match:
        return 0.0
    number = float(match.group(0))
    return 0.0 if math.isinf(number) else number


def to_amount(value: Any) -> float:
    """Money columns typed with thousands separators: '1.500.000' -> 1500000.

    Numeric cells pass through. Text drops ',', '.' and whitespace and keeps
    the leading integer, so decimals typed as text are not supported.
    """
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return to_number(value)
    cleaned = _SEPARATORS.sub("", clean_text(value))
    return to_number(cleaned)
