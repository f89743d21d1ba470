from __future__ import annotations

from typing import Any

from ..models.reference import UNITS
from ..models.rows import ParsedRow, ProductImportRow
from ..services.normalize import clean_text, normalize_choice, to_amount
from ..services.validation import non_negative, one_of
from .base import ColumnSpec, EntitySchema, ReferenceSpec

"""Product / service catalogue import schema.

Unlike the contract classification columns, the product category is a
closed set that is enforced: unknown categories make the row invalid.
Codes are stored upper-cased.
"""

__all__ = [
    "PRODUCT_CATEGORIES",
    "DEFAULT_PRODUCT_CATEGORY",
    "DEFAULT_MEASURE_UNIT",
    "build_product_schema",
]

PRODUCT_CATEGORIES = ("Phần mềm", "Tư vấn", "Thiết kế", "Thi công", "Bảo trì", "Đào tạo")
DEFAULT_PRODUCT_CATEGORY = "Phần mềm"
DEFAULT_MEASURE_UNIT = "VNĐ"


def _code(value: Any) -> str:
    return clean_text(value).upper()


def _category(value: Any) -> str:
    # canonical spelling when known, raw text otherwise so the rule can reject it
    text = clean_text(value)
    if not text:
        return DEFAULT_PRODUCT_CATEGORY
    return normalize_choice(text, PRODUCT_CATEGORIES, text)


def _measure_unit(value: Any) -> str:
    return clean_text(value) or DEFAULT_MEASURE_UNIT


COLUMNS = (
    ColumnSpec("code", "Mã SP", _code, 12),
    ColumnSpec("name", "Tên sản phẩm", clean_text, 30),
    ColumnSpec("category", "Danh mục", _category, 15),
    ColumnSpec("description", "Mô tả", clean_text, 35),
    ColumnSpec("measure_unit", "Đơn vị tính", _measure_unit, 12),
    ColumnSpec("base_price", "Giá bán", to_amount, 15),
    ColumnSpec("cost_price", "Giá vốn", to_amount, 15),
    ColumnSpec("unit_name", "Đơn vị KD", clean_text, 15),
)

SAMPLES = (
    ("SW-BIM-01", "Phần mềm quản lý BIM", "Phần mềm", "Bản quyền 1 năm", "VNĐ",
     50000000, 30000000, "BIM"),
    ("TV-TK-02", "Tư vấn thiết kế kết cấu", "Tư vấn", "", "VNĐ",
     120000000, 80000000, "DCS"),
)


def _payload(row: ParsedRow) -> dict[str, Any]:
    d: ProductImportRow = row.data
    return {
        "code": d.code,
        "name": d.name,
        "category": d.category,
        "description": d.description,
        "unit": d.measure_unit,
        "base_price": d.base_price,
        "cost_price": d.cost_price,
        "unit_id": row.reference("unit_id"),
        "is_active": True,
    }


def build_product_schema() -> EntitySchema:
    return EntitySchema(
        name="product",
        row_type=ProductImportRow,
        columns=COLUMNS,
        key_field="code",
        key_label="code",
        required=(("code", "code"), ("name", "name")),
        references=(
            ReferenceSpec("unit_name", UNITS, "unit_id", "unit", required=False),
        ),
        rules=(
            non_negative("base_price", "base price"),
            non_negative("cost_price", "cost price"),
            one_of("category", "category", PRODUCT_CATEGORIES),
        ),
        build_payload=_payload,
        samples=SAMPLES,
        sheet_name="Sản phẩm",
    )
