from __future__ import annotations

from typing import Any

from ..models.reference import UNITS
from ..models.rows import EmployeeImportRow, ParsedRow
from ..services.normalize import (
    clean_text,
    normalize_choice,
    normalize_date,
    normalize_gender,
    normalize_month_date,
)
from ..services.validation import valid_date, valid_email
from .base import ColumnSpec, EntitySchema, ReferenceSpec

"""Employee (personnel) import schema.

Emails are the natural key: they are lower-cased on read and must be unique
within the file. The unit is optional, roles outside ROLES are dropped
rather than rejected (they can be assigned later), and the join date may
be given as ``MM/YYYY``.
"""

__all__ = [
    "ROLES",
    "build_employee_schema",
]

ROLES = (
    "NVKD",
    "UnitLeader",
    "Admin",
    "Leadership",
    "Legal",
    "Accountant",
    "ChiefAccountant",
    "AdminUnit",
)


def _email(value: Any) -> str:
    return clean_text(value).lower()


def _role(value: Any) -> str:
    return normalize_choice(value, ROLES, "")


COLUMNS = (
    ColumnSpec("employee_code", "Mã NV", clean_text, 10),
    ColumnSpec("name", "Họ tên", clean_text, 25),
    ColumnSpec("email", "Email", _email, 28),
    ColumnSpec("phone", "SĐT", clean_text, 13),
    ColumnSpec("telegram", "Telegram", clean_text, 14),
    ColumnSpec("unit_name", "Mã đơn vị", clean_text, 12),
    ColumnSpec("position", "Chức vụ", clean_text, 18),
    ColumnSpec("role_code", "Role", _role, 14),
    ColumnSpec("date_of_birth", "Ngày sinh", normalize_date, 12),
    ColumnSpec("gender", "Giới tính", normalize_gender, 10),
    ColumnSpec("id_number", "CCCD", clean_text, 14),
    ColumnSpec("address", "Địa chỉ", clean_text, 30),
    ColumnSpec("education", "Học vấn", clean_text, 14),
    ColumnSpec("specialization", "Chuyên ngành", clean_text, 18),
    ColumnSpec("certificates", "Chứng chỉ", clean_text, 20),
    ColumnSpec("date_joined", "Ngày vào làm", normalize_month_date, 12),
    ColumnSpec("contract_type", "Loại HĐ", clean_text, 14),
    ColumnSpec("bank_account", "STK", clean_text, 16),
    ColumnSpec("bank_name", "Ngân hàng", clean_text, 16),
)

SAMPLES = (
    ("NV001", "Nguyễn Văn An", "an.nguyen@example.com", "0901234567", "@an_nguyen", "BIM",
     "Kỹ sư BIM", "NVKD", "15/03/1990", "Nam", "001090012345", "12 Trần Hưng Đạo, Hà Nội",
     "Đại học", "Xây dựng dân dụng", "Autodesk Revit", "03/2020", "Không xác định thời hạn",
     "0123456789", "Vietcombank"),
    ("NV002", "Trần Thị Bình", "binh.tran@example.com", "0912345678", "", "DCS",
     "Trưởng nhóm thiết kế", "UnitLeader", "20/07/1988", "Nữ", "001188054321", "",
     "Thạc sĩ", "Kiến trúc", "", "01/06/2018", "Xác định thời hạn", "", ""),
)


def _payload(row: ParsedRow) -> dict[str, Any]:
    d: EmployeeImportRow = row.data
    return {
        "employee_code": d.employee_code,
        "name": d.name,
        "email": d.email,
        "phone": d.phone or None,
        "telegram": d.telegram or None,
        "unit_id": row.reference("unit_id"),
        "position": d.position or None,
        "role_code": d.role_code or None,
        "date_of_birth": d.date_of_birth or None,
        "gender": d.gender or None,
        "id_number": d.id_number or None,
        "address": d.address or None,
        "education": d.education or None,
        "specialization": d.specialization or None,
        "certificates": d.certificates or None,
        "date_joined": d.date_joined or None,
        "contract_type": d.contract_type or None,
        "bank_account": d.bank_account or None,
        "bank_name": d.bank_name or None,
    }


def build_employee_schema() -> EntitySchema:
    return EntitySchema(
        name="employee",
        row_type=EmployeeImportRow,
        columns=COLUMNS,
        key_field="email",
        key_label="email",
        required=(("employee_code", "employee code"), ("name", "name"), ("email", "email")),
        references=(
            ReferenceSpec("unit_name", UNITS, "unit_id", "unit", required=False),
        ),
        rules=(
            valid_email("email", "email"),
            valid_date("date_of_birth", "date of birth"),
            valid_date("date_joined", "join date"),
        ),
        build_payload=_payload,
        samples=SAMPLES,
        sheet_name="Nhân sự",
    )
