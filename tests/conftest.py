# Shared pytest fixtures
from __future__ import annotations
import logging
import tempfile
from pathlib import Path

import pandas as pd
import pytest

from bulk_import.db.repository import InMemoryRepository
from bulk_import.logging.init import LOGGER_NAME, reset_logging
from bulk_import.models.reference import ImportContext, ReferenceEntity


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()
    logger = logging.getLogger(LOGGER_NAME)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)


@pytest.fixture()
def sample_config_yaml() -> str:
    return """log_dir: logs
resolver: containment
mock_data: mock_data.yml
contract_code:
  prefix: HD
  width: 3
  fallback_unit_code: CIC
tables:
  contract: contracts
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def sample_mock_data_yaml() -> str:
    return """units:
  - {id: u-bim, name: Trung tâm BIM, code: BIM}
  - {id: u-dcs, name: Trung tâm Thiết kế DCS, code: DCS}
partners:
  - {id: c-abc, name: Công ty ABC, code: ABC}
  - {id: c-xyz, name: Công ty XYZ, code: XYZ}
employees:
  - {id: e-001, name: Nguyễn Văn A}
contracts:
  - {id: HD_001/BIM, unit_id: u-bim, signed_date: 2024-01-05}
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str, sample_mock_data_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    (temp_workdir / "config" / "mock_data.yml").write_text(sample_mock_data_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def reference_collections() -> dict[str, list[ReferenceEntity]]:
    return {
        "units": [
            ReferenceEntity("u-bim", "Trung tâm BIM", "BIM"),
            ReferenceEntity("u-dcs", "Trung tâm Thiết kế DCS", "DCS"),
            ReferenceEntity("u-none", "Phòng dự án", None),
        ],
        "partners": [
            ReferenceEntity("c-abc", "Công ty ABC", "ABC"),
            ReferenceEntity("c-xyz", "Công ty XYZ", "XYZ"),
        ],
        "employees": [
            ReferenceEntity("e-001", "Nguyễn Văn A"),
        ],
    }


@pytest.fixture()
def repository(reference_collections) -> InMemoryRepository:
    return InMemoryRepository(reference_collections)


@pytest.fixture()
def context(repository) -> ImportContext:
    return ImportContext.load(repository)


def write_workbook(path: Path, headers: list[str], rows: list[list[object]], sheet: str = "Sheet1") -> Path:
    """Write a one-sheet workbook: header row followed by ``rows``."""
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows, columns=headers).to_excel(writer, sheet_name=sheet, index=False)
    return path


@pytest.fixture()
def make_workbook(temp_workdir: Path):
    def _make(name: str, headers: list[str], rows: list[list[object]]) -> Path:
        return write_workbook(temp_workdir / "data" / name, headers, rows)
    return _make


def contract_row(
    title="Hợp đồng A",
    unit="BIM",
    partner="ABC",
    salesperson="Nguyễn Văn A",
    value=100_000_000,
    signed="15/01/2024",
    **overrides,
) -> list[object]:
    row = {
        "title": title,
        "contract_type": "HĐ",
        "partner_name": partner,
        "unit_code": unit,
        "salesperson_name": salesperson,
        "value": value,
        "estimated_cost": 50_000_000,
        "signed_date": signed,
        "start_date": "",
        "end_date": "30/06/2024",
        "status": "Active",
        "category": "Mới",
    }
    row.update(overrides)
    return list(row.values())
