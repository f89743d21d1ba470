from __future__ import annotations

from typing import Any

from ..models.rows import ParsedRow, PartnerImportRow
from ..services.normalize import clean_text, normalize_choice, normalize_partner_type
from .base import ColumnSpec, EntitySchema

"""Partner (customer / supplier) import schema. Partners reference nothing."""

__all__ = [
    "INDUSTRIES",
    "DEFAULT_INDUSTRY",
    "build_partner_schema",
]

INDUSTRIES = ("Xây dựng", "Bất động sản", "Năng lượng", "Công nghệ", "Sản xuất", "Khác")
DEFAULT_INDUSTRY = "Khác"

COLUMNS = (
    ColumnSpec("name", "Tên đối tác", clean_text, 30),
    ColumnSpec("short_name", "Tên viết tắt", clean_text, 12),
    ColumnSpec("tax_code", "Mã số thuế", clean_text, 15),
    ColumnSpec("industry", "Ngành nghề", lambda v: normalize_choice(v, INDUSTRIES, DEFAULT_INDUSTRY), 15),
    ColumnSpec("partner_type", "Loại (KH/NCC)", normalize_partner_type, 12),
    ColumnSpec("address", "Địa chỉ", clean_text, 35),
    ColumnSpec("phone", "Điện thoại", clean_text, 14),
    ColumnSpec("email", "Email", clean_text, 25),
    ColumnSpec("contact_person", "Người liên hệ", clean_text, 20),
)

SAMPLES = (
    ("Công ty TNHH ABC", "ABC", "0123456789", "Xây dựng", "KH",
     "123 Nguyễn Huệ, Q1, TP.HCM", "0281234567", "contact@abc.com", "Nguyễn Văn A"),
    ("Công ty CP XYZ", "XYZ", "0987654321", "Công nghệ", "NCC",
     "456 Lê Lợi, Hà Nội", "0241234567", "info@xyz.vn", "Trần Thị B"),
)


def _payload(row: ParsedRow) -> dict[str, Any]:
    d: PartnerImportRow = row.data
    return {
        "name": d.name,
        "short_name": d.short_name,
        "tax_code": d.tax_code or None,
        "industry": d.industry,
        "type": d.partner_type,
        "address": d.address,
        "phone": d.phone,
        "email": d.email,
        "contact_person": d.contact_person,
    }


def build_partner_schema() -> EntitySchema:
    return EntitySchema(
        name="partner",
        row_type=PartnerImportRow,
        columns=COLUMNS,
        key_field="name",
        key_label="name",
        required=(("name", "name"), ("short_name", "short name")),
        build_payload=_payload,
        samples=SAMPLES,
        sheet_name="Đối tác",
    )
