from __future__ import annotations

from bulk_import.schemas import get_schema
from bulk_import.services.resolver import ContainmentResolver
from bulk_import.services.validation import (
    DuplicateDetector,
    non_negative,
    one_of,
    valid_date,
    validate_row,
)

from conftest import contract_row


def _check(raw, context, detector=None, entity="contract"):
    schema = get_schema(entity)
    data = schema.project(tuple(raw))
    detector = detector or DuplicateDetector(schema.key_label)
    return validate_row(data, schema, context, ContainmentResolver(), detector)


def test_duplicate_detector_flags_only_repeats():
    detector = DuplicateDetector("title")
    assert detector.check("Hợp đồng A") is None
    assert detector.check("hợp đồng a ") == "duplicate title 'hợp đồng a' in file"
    assert detector.check("Hợp đồng B") is None


def test_duplicate_detector_ignores_empty_keys_and_resets():
    detector = DuplicateDetector("title")
    assert detector.check("") is None
    assert detector.check("   ") is None
    assert detector.check("X") is None
    detector.reset()
    assert detector.check("x") is None


def test_valid_contract_row_resolves_references(context):
    check = _check(contract_row(), context)
    assert check.errors == []
    assert check.references == {"unit_id": "u-bim", "partner_id": "c-abc", "salesperson_id": "e-001"}


def test_all_rules_run_without_early_exit(context):
    raw = contract_row(title="", unit="ZZZ", partner="", value=-5, signed="31/02/2024")
    check = _check(raw, context)
    assert check.errors == [
        "title is required",
        "unit 'ZZZ' not found",
        "partner is required",
        "value must not be negative",
        "signed date '31/02/2024' is not a valid date",
    ]
    assert check.unresolved == ["unit 'ZZZ' not found"]


def test_optional_reference_only_fails_when_non_empty(context):
    assert _check(contract_row(salesperson=""), context).errors == []
    check = _check(contract_row(salesperson="Lê Văn Z"), context)
    assert check.errors == ["salesperson 'Lê Văn Z' not found"]


def test_duplicate_rule_uses_shared_detector(context):
    detector = DuplicateDetector("title")
    assert _check(contract_row(title="Hợp đồng A"), context, detector).errors == []
    errors = _check(contract_row(title="hợp đồng a "), context, detector).errors
    assert errors == ["duplicate title 'hợp đồng a' in file"]


def test_product_category_is_a_closed_set(context):
    raw = ["sp-01", "Phần mềm BIM", "Linh tinh", "", "", "1.000", "500", ""]
    check = _check(raw, context, entity="product")
    assert len(check.errors) == 1
    assert check.errors[0].startswith("category 'Linh tinh' is not one of:")


def test_rule_factories():
    class Row:
        value = -1
        category = "B"
        signed = "2024-13-01"

    assert list(non_negative("value", "value")(Row)) == ["value must not be negative"]
    assert list(one_of("category", "category", ["A"])(Row)) == ["category 'B' is not one of: A"]
    assert list(valid_date("signed", "signed date")(Row)) == ["signed date '2024-13-01' is not a valid date"]
