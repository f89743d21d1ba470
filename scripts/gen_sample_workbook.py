#!/usr/bin/env python3
"""Generate synthetic contract workbooks for manual and performance testing.

Rows reference the units, partners and employees of ``config/mock_data.yml``
so a generated file can be imported in mock mode::

    DISABLE_DB_CONNECT=1 python -m bulk_import.cli contract data/contracts.xlsx --yes

A share of the rows is deliberately broken (unknown unit, negative value,
repeated title) to exercise the preview.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

from bulk_import.schemas import get_schema

UNIT_CODES = ["BIM", "DCS", "CIC"]
PARTNERS = ["Công ty ABC", "Công ty XYZ"]
SALESPEOPLE = ["Nguyễn Văn A", "Trần Văn B", ""]
TYPES = ["HĐ", "HĐNT", "HĐPS", "PL"]
STATUSES = ["Active", "Đang hiệu lực", "Pending", "Hoàn thành", "Hủy"]


def generate_contract_rows(rows: int, invalid_ratio: float = 0.1, seed: int = 42) -> pd.DataFrame:
    """Synthetic contract rows in template column order.

    Args:
        rows: Number of data rows
        invalid_ratio: Share of rows made invalid on purpose
        seed: Random seed for reproducible data
    """
    rng = np.random.default_rng(seed)
    signed = pd.Timestamp("2024-01-01") + pd.to_timedelta(rng.integers(0, 365, rows), unit="D")
    data = {
        "title": [f"Hợp đồng thử nghiệm {i + 1:05d}" for i in range(rows)],
        "contract_type": rng.choice(TYPES, rows).tolist(),
        "partner_name": rng.choice(PARTNERS, rows).tolist(),
        "unit_code": rng.choice(UNIT_CODES, rows).tolist(),
        "salesperson_name": rng.choice(SALESPEOPLE, rows).tolist(),
        "value": (rng.integers(10, 5000, rows) * 1_000_000).tolist(),
        "estimated_cost": (rng.integers(5, 3000, rows) * 1_000_000).tolist(),
        "signed_date": [d.strftime("%d/%m/%Y") for d in signed],
        "start_date": [(d + pd.Timedelta(days=5)).strftime("%Y-%m-%d") for d in signed],
        "end_date": [(d + pd.Timedelta(days=180)).strftime("%Y-%m-%d") for d in signed],
        "status": rng.choice(STATUSES, rows).tolist(),
        "category": ["Mới"] * rows,
    }
    df = pd.DataFrame(data)

    broken = rng.choice(rows, size=int(rows * invalid_ratio), replace=False)
    for n, i in enumerate(broken):
        kind = n % 3
        if kind == 0:
            df.at[i, "unit_code"] = "ZZZ"
        elif kind == 1:
            df.at[i, "value"] = -abs(int(df.at[i, "value"]))
        elif i > 0:
            df.at[i, "title"] = df.at[i - 1, "title"]
    return df


def create_workbook(output_path: Path, rows: int, invalid_ratio: float, seed: int) -> None:
    schema = get_schema("contract")
    df = generate_contract_rows(rows, invalid_ratio, seed)
    df.columns = schema.headers

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=schema.sheet_name, index=False)

    print(f"Created workbook: {output_path}")
    print(f"  Rows: {rows} (+ 1 header row), about {int(rows * invalid_ratio)} invalid")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic contract import workbooks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/contracts.xlsx
  %(prog)s data/big.xlsx --rows 20000 --invalid-ratio 0 --seed 7
        """,
    )
    parser.add_argument("output", type=Path, help="Output .xlsx path")
    parser.add_argument("--rows", type=int, default=1_000, help="Number of data rows (default: 1,000)")
    parser.add_argument("--invalid-ratio", type=float, default=0.1, help="Share of broken rows (default: 0.1)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0 <= args.invalid_ratio <= 1:
        print("Error: --invalid-ratio must be between 0 and 1", file=sys.stderr)
        return 1

    create_workbook(args.output, args.rows, args.invalid_ratio, args.seed)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
