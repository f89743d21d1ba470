from __future__ import annotations

from pathlib import Path

import psycopg2
import pytest
from openpyxl import load_workbook

from bulk_import.cli import main as cli_main
from bulk_import.schemas import get_schema

from conftest import contract_row

pytestmark = pytest.mark.integration


@pytest.fixture()
def mock_mode(monkeypatch):
    monkeypatch.setenv("DISABLE_DB_CONNECT", "1")


def test_template_flag_writes_workbook(temp_workdir: Path, capsys):
    out_dir = temp_workdir / "data"
    assert cli_main(["product", "--template", str(out_dir)]) == 0
    path = out_dir / "template_import_products.xlsx"
    ws = load_workbook(path).active
    assert [c.value for c in ws[1]] == get_schema("product").headers
    assert f"INFO template written: {path}" in capsys.readouterr().out


def test_dry_run_creates_nothing(write_config, make_workbook, mock_mode, capsys):
    book = make_workbook("c.xlsx", get_schema("contract").headers, [contract_row(title="A")])
    assert cli_main(["contract", str(book), "--dry-run"]) == 0
    out = capsys.readouterr().out
    assert "nothing imported" in out
    assert "SUMMARY entity=contract rows=1 valid=1 invalid=0 success=0 failed=0 skipped=0" in out


def test_dry_run_with_invalid_rows_is_partial(write_config, make_workbook, mock_mode):
    book = make_workbook(
        "c.xlsx", get_schema("contract").headers, [contract_row(title="A"), contract_row(title="")]
    )
    assert cli_main(["contract", str(book), "--dry-run"]) == 2


def test_declined_prompt_imports_nothing(write_config, make_workbook, mock_mode, monkeypatch, capsys):
    answers = iter(["n"])
    monkeypatch.setattr("builtins.input", lambda prompt="": next(answers))
    book = make_workbook("c.xlsx", get_schema("contract").headers, [contract_row(title="A")])
    assert cli_main(["contract", str(book)]) == 0
    out = capsys.readouterr().out
    assert "nothing imported" in out
    assert "success=0" in out


def test_accepted_prompt_imports(write_config, make_workbook, mock_mode, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt="": "y")
    book = make_workbook("c.xlsx", get_schema("contract").headers, [contract_row(title="A")])
    assert cli_main(["contract", str(book)]) == 0
    assert "success=1 failed=0" in capsys.readouterr().out


def test_product_import_rejects_unknown_category(write_config, make_workbook, mock_mode, capsys):
    schema = get_schema("product")
    book = make_workbook(
        "products.xlsx",
        schema.headers,
        [
            ["sp-01", "Phần mềm quản lý", "phần mềm", "", "", "1.500.000", 1_000_000, "BIM"],
            ["SP-02", "Gói bất kỳ", "Đồ chơi", "", "", 10, 5, ""],
        ],
    )
    assert cli_main(["product", str(book), "--yes"]) == 2
    out = capsys.readouterr().out
    assert "WARN Row 3: category 'Đồ chơi' is not one of" in out
    assert "success=1 failed=0" in out


def test_database_connection_failure_is_fatal(write_config, make_workbook, monkeypatch, capsys):
    monkeypatch.delenv("DISABLE_DB_CONNECT", raising=False)

    def refuse(*args, **kwargs):
        raise psycopg2.OperationalError("could not connect to server")

    monkeypatch.setattr(psycopg2, "connect", refuse)
    book = make_workbook("c.xlsx", get_schema("contract").headers, [contract_row(title="A")])
    assert cli_main(["contract", str(book), "--yes"]) == 1
    assert "ERROR database: could not connect to server" in capsys.readouterr().out


def test_employee_import_reports_bad_emails(write_config, make_workbook, mock_mode, capsys):
    schema = get_schema("employee")
    blank = [""] * (schema.width - 3)
    book = make_workbook(
        "employees.xlsx",
        schema.headers,
        [
            ["NV001", "Nguyễn Văn An", "an@example.com", *blank],
            ["NV002", "Trần Thị Bình", "AN@example.com", *blank],
            ["NV003", "Lê Văn Cường", "cuong-at-example", *blank],
        ],
    )
    assert cli_main(["employee", str(book), "--yes"]) == 2
    out = capsys.readouterr().out
    assert "WARN Row 3: duplicate email 'an@example.com' in file" in out
    assert "WARN Row 4: email 'cuong-at-example' is not a valid email address" in out
    assert "SUMMARY entity=employee rows=3 valid=1 invalid=2 success=1 failed=0 skipped=0" in out
