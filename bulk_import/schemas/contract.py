from __future__ import annotations

from datetime import date
from typing import Any

from ..db.repository import Repository
from ..models.config_models import ContractCodeConfig
from ..models.reference import EMPLOYEES, PARTNERS, UNITS, ImportContext
from ..models.rows import ContractImportRow, ParsedRow
from ..services.normalize import (
    clean_text,
    is_iso_date,
    normalize_choice,
    normalize_date,
    normalize_status,
    to_number,
)
from ..services.validation import non_negative, valid_date
from .base import ColumnSpec, EntitySchema, ReferenceSpec

"""Contract import schema.

Contract codes are generated at create time as ``HD_NNN/UNIT``: NNN is the
per-unit, per-year sequence number reported by the repository and UNIT the
resolved unit's code.
"""

__all__ = [
    "CONTRACT_TYPES",
    "CONTRACT_CATEGORIES",
    "DEFAULT_CONTRACT_TYPE",
    "DEFAULT_CONTRACT_CATEGORY",
    "INITIAL_STAGE",
    "build_contract_schema",
    "contract_code",
]

CONTRACT_TYPES = ("HĐ", "HĐNT", "HĐPS", "PL")
CONTRACT_CATEGORIES = ("Mới", "Tiếp nối", "Phát sinh", "Bảo hành")
DEFAULT_CONTRACT_TYPE = "HĐ"
DEFAULT_CONTRACT_CATEGORY = "Mới"
INITIAL_STAGE = "Signed"

COLUMNS = (
    ColumnSpec("title", "Tên hợp đồng", clean_text, 30),
    ColumnSpec("contract_type", "Loại HĐ",
               lambda v: normalize_choice(v, CONTRACT_TYPES, DEFAULT_CONTRACT_TYPE), 10),
    ColumnSpec("partner_name", "Khách hàng", clean_text, 25),
    ColumnSpec("unit_code", "Mã đơn vị", clean_text, 10),
    ColumnSpec("salesperson_name", "NVKD", clean_text, 15),
    ColumnSpec("value", "Giá trị", to_number, 15),
    ColumnSpec("estimated_cost", "Chi phí DK", to_number, 15),
    ColumnSpec("signed_date", "Ngày ký", normalize_date, 12),
    ColumnSpec("start_date", "Ngày BĐ", normalize_date, 12),
    ColumnSpec("end_date", "Ngày KT", normalize_date, 12),
    ColumnSpec("status", "Trạng thái", normalize_status, 12),
    ColumnSpec("category", "Loại",
               lambda v: normalize_choice(v, CONTRACT_CATEGORIES, DEFAULT_CONTRACT_CATEGORY), 12),
)

SAMPLES = (
    ("Hợp đồng tư vấn BIM dự án ABC", "HĐ", "Công ty ABC", "BIM", "Nguyễn Văn A",
     500000000, 350000000, "2024-01-15", "2024-01-20", "2024-06-30", "Active", "Mới"),
    ("Hợp đồng thiết kế XYZ", "HĐ", "Công ty XYZ", "DCS", "Trần Văn B",
     1200000000, 800000000, "2024-02-01", "2024-02-05", "2024-12-31", "Pending", "Mới"),
)


def _payload(row: ParsedRow) -> dict[str, Any]:
    d: ContractImportRow = row.data
    return {
        "title": d.title,
        "contract_type": d.contract_type,
        "customer_id": row.reference("partner_id"),
        "unit_id": row.reference("unit_id"),
        "salesperson_id": row.reference("salesperson_id"),
        "value": d.value,
        "estimated_cost": d.estimated_cost,
        "actual_revenue": 0,
        "actual_cost": 0,
        "signed_date": d.signed_date or None,
        "start_date": d.start_date or d.signed_date or None,
        "end_date": d.end_date or None,
        "status": d.status,
        "stage": INITIAL_STAGE,
        "category": d.category,
    }


def _sequence_year(signed_date: str, today: date | None = None) -> int:
    if signed_date and is_iso_date(signed_date):
        return int(signed_date[:4])
    return (today or date.today()).year


def contract_code(config: ContractCodeConfig, number: int, unit_code: str | None) -> str:
    return f"{config.prefix}_{number:0{config.width}d}/{unit_code or config.fallback_unit_code}"


def _code_hook(config: ContractCodeConfig):
    def prepare(
        row: ParsedRow, payload: dict[str, Any], repository: Repository, context: ImportContext
    ) -> dict[str, Any]:
        unit_id = row.reference("unit_id")
        number = repository.next_sequence_number(unit_id, _sequence_year(row.data.signed_date))
        unit = context.get(UNITS, unit_id)
        return {"id": contract_code(config, number, unit.code if unit else None), **payload}
    return prepare


def build_contract_schema(code_config: ContractCodeConfig | None = None) -> EntitySchema:
    return EntitySchema(
        name="contract",
        row_type=ContractImportRow,
        columns=COLUMNS,
        key_field="title",
        key_label="title",
        required=(("title", "title"),),
        references=(
            ReferenceSpec("unit_code", UNITS, "unit_id", "unit"),
            ReferenceSpec("partner_name", PARTNERS, "partner_id", "partner"),
            ReferenceSpec("salesperson_name", EMPLOYEES, "salesperson_id", "salesperson", required=False),
        ),
        rules=(
            non_negative("value", "value"),
            valid_date("signed_date", "signed date"),
            valid_date("start_date", "start date"),
            valid_date("end_date", "end date"),
        ),
        build_payload=_payload,
        prepare=_code_hook(code_config or ContractCodeConfig()),
        samples=SAMPLES,
        sheet_name="Hợp đồng",
    )
