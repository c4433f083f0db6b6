#!/usr/bin/env python3
"""
Script 2: Plan a bulk return of bar stock

For each stock record with quantity left:
- purchased stock goes back to general inventory
- consignment stock goes back to its supplier
- quantities are converted from ml to items

Modes: to_global, to_supplier (records listed in the selection column) or
auto (every returnable record). Writes one file per route.
"""

import sys

from core import (
    ReturnRouter,
    NothingToProcessError,
    build_return_exports,
    read_snapshot,
    records_from_dataframe,
    check_required_columns,
    write_exports,
)
from core.config import (
    BAR_ID_COLUMN,
    STOCK_REQUIRED_COLUMNS,
    RETURN_MODES,
    OUTPUT_DIR,
)

SELECTED_COLUMN = "Selected"


def return_stock(input_file: str, mode: str):
    """
    Main return planning function

    Args:
        input_file: Path to the bar stock workbook
        mode: to_global, to_supplier or auto
    """
    print(f"Loading {input_file}...")
    with open(input_file, "rb") as f:
        df, _, error = read_snapshot(f, BAR_ID_COLUMN)
    if error:
        print(f"Error: {error}")
        sys.exit(1)

    is_valid, missing = check_required_columns(df, STOCK_REQUIRED_COLUMNS)
    if not is_valid:
        print(f"Error: missing columns {missing}")
        sys.exit(1)

    records = records_from_dataframe(df)
    router = ReturnRouter(records)

    print(f"Stock records: {len(records)}")
    print(f"Returnable: {len(router.returnable)} "
          f"({len(router.returnable_purchased)} purchased, "
          f"{len(router.returnable_consignment)} consignment)")
    print(f"Consumed: {len(router.consumed)}")
    print(f"Partial leftovers (under one item): {len(router.partial)}")

    if SELECTED_COLUMN in df.columns:
        selected_rows = df[df[SELECTED_COLUMN].astype(str).str.strip().str.lower().isin(["x", "yes", "1", "true"])]
        for record in records_from_dataframe(selected_rows):
            router.toggle(record.key)

    try:
        plan = router.build_plan(mode)
    except NothingToProcessError as e:
        print(f"Error: {e}")
        sys.exit(1)

    for note in plan.notes:
        print(f"Note: {note}")

    print("\nGenerating output files...")
    files_created = write_exports(build_return_exports(plan), OUTPUT_DIR)
    for filepath, count in files_created:
        print(f"  Created: {filepath.name} ({count} items)")

    # Summary
    print(f"\n=== Summary ===")
    print(f"Mode: {mode}")
    print(f"To general inventory: {plan.to_global_count}")
    print(f"To supplier: {plan.to_supplier_count}")

    return files_created


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python return_stock.py <bar_stock.xlsx> [to_global|to_supplier|auto]")
        print("  auto = return everything (default)")
        sys.exit(1)

    input_file = sys.argv[1]
    mode = sys.argv[2] if len(sys.argv) > 2 else "auto"

    if mode not in RETURN_MODES:
        print(f"Error: mode must be one of {', '.join(RETURN_MODES)}")
        sys.exit(1)

    return_stock(input_file, mode)
