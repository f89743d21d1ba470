from __future__ import annotations

from bulk_import.logging.error_log import ErrorLogBuffer
from bulk_import.models.error_record import REFERENCE_NOT_FOUND, ROW_VALIDATION_ERROR
from bulk_import.schemas import get_schema
from bulk_import.services.parser import parse_rows
from bulk_import.services.resolver import ExactResolver

from conftest import contract_row


def test_row_index_starts_after_header(context):
    rows = [tuple(contract_row(title=f"HĐ {i}")) for i in range(3)]
    parsed = parse_rows(rows, get_schema("contract"), context)
    assert [r.row_index for r in parsed] == [2, 3, 4]


def test_three_row_scenario(context):
    rows = [
        tuple(contract_row(title="Hợp đồng A")),
        tuple(contract_row(title="")),
        tuple(contract_row(title="hợp đồng a")),
    ]
    parsed = parse_rows(rows, get_schema("contract"), context)
    assert parsed.valid_count == 1
    assert parsed.invalid_count == 2
    assert parsed.rows[0].is_valid
    assert parsed.rows[1].errors == ("title is required",)
    assert parsed.rows[2].errors == ("duplicate title 'hợp đồng a' in file",)


def test_is_valid_matches_errors(context):
    rows = [
        tuple(contract_row()),
        tuple(contract_row(title="B", unit="ZZZ")),
        tuple(contract_row(title="C", value=-100)),
    ]
    for row in parse_rows(rows, get_schema("contract"), context):
        assert row.is_valid == (len(row.errors) == 0)


def test_invalid_row_keeps_resolved_references(context):
    parsed = parse_rows([tuple(contract_row(value=-1))], get_schema("contract"), context)
    row = parsed.rows[0]
    assert not row.is_valid
    assert row.reference("unit_id") == "u-bim"


def test_each_parse_pass_has_a_fresh_detector(context):
    schema = get_schema("contract")
    rows = [tuple(contract_row(title="Hợp đồng A"))]
    assert parse_rows(rows, schema, context).valid_count == 1
    assert parse_rows(rows, schema, context).valid_count == 1


def test_resolver_strategy_is_pluggable(context):
    rows = [tuple(contract_row(unit="thiết kế"))]
    schema = get_schema("contract")
    assert parse_rows(rows, schema, context).valid_count == 1
    assert parse_rows(rows, schema, context, ExactResolver()).valid_count == 0


def test_errors_are_recorded_in_error_log(context, tmp_path):
    buf = ErrorLogBuffer(tmp_path)
    rows = [tuple(contract_row(title="", unit="ZZZ"))]
    parse_rows(rows, get_schema("contract"), context, error_log=buf, file_name="contracts.xlsx")
    records = buf.records
    assert [(r.row, r.error_type) for r in records] == [
        (2, ROW_VALIDATION_ERROR),
        (2, REFERENCE_NOT_FOUND),
    ]
    assert all(r.file == "contracts.xlsx" and r.entity == "contract" for r in records)


def test_partner_rows(context):
    rows = [
        ("Công ty TNHH Minh Long", "ML", 312345678.0, "công nghệ", "NCC", "", "", "", ""),
        ("Công ty Hoà Bình", "", None, "Nông nghiệp", "KH", "", "", "", ""),
    ]
    parsed = parse_rows(rows, get_schema("partner"), context)
    first, second = parsed.rows
    assert first.is_valid
    assert first.data.tax_code == "312345678"
    assert first.data.industry == "Công nghệ"
    assert first.data.partner_type == "Supplier"
    assert second.errors == ("short name is required",)
    assert second.data.industry == "Khác"
