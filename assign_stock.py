#!/usr/bin/env python3
"""
Script 1: Plan a stock assignment from global inventory to bars

For each product group in the inventory workbook:
- Reads the per-bar quantity, direct-sale flag and sale price columns
- Splits the quantity across supplier lots of the same product
- Validates the plan against availability
- Writes one task file per bar (nothing is sent to the server)
"""

import sys

from core import (
    Destination,
    PlanningSession,
    PriceSynchronizer,
    StockAssigner,
    PlanValidationError,
    apply_available_filter,
    build_assignment_exports,
    read_snapshot,
    lots_from_dataframe,
    check_required_columns,
    write_exports,
)
from core.config import (
    LOT_ID_COLUMN,
    LOT_REQUIRED_COLUMNS,
    PLAN_QUANTITY_COLUMN,
    PLAN_DIRECT_SALE_COLUMN,
    PLAN_PRICE_COLUMN,
    OUTPUT_DIR,
)
from core.file_loader import get_bool_value, get_optional_int, get_str_value


def parse_destination(arg: str) -> Destination:
    """Parse "12:Main bar" (or just "12") into a Destination."""
    bar_id, _, name = arg.partition(":")
    return Destination(destination_id=int(bar_id), name=name or f"Bar {bar_id}")


def apply_plan_columns(session: PlanningSession, pricing: PriceSynchronizer, df) -> None:
    """Select planned lots and copy the plan columns into the session."""
    plan_rows = {}
    for _, row in df.iterrows():
        lot_id = get_optional_int(row.get(LOT_ID_COLUMN))
        if lot_id is None or lot_id not in session.lots:
            continue
        quantity = get_str_value(row.get(PLAN_QUANTITY_COLUMN))
        if quantity:
            plan_rows[lot_id] = row

    session.select_all(plan_rows)
    session.initialize_configs()

    for group in session.groups:
        # The first planned lot of a group carries the group's plan
        row = plan_rows[group.lot_ids[0]]
        session.set_group_quantity(group.key, get_str_value(row.get(PLAN_QUANTITY_COLUMN)))

        if get_bool_value(row.get(PLAN_DIRECT_SALE_COLUMN)):
            pricing.set_direct_sale(group.key, True)
            price = get_str_value(row.get(PLAN_PRICE_COLUMN))
            if price and not pricing.set_price(group.key, price):
                print(f"  Price for {group.name} is locked by an existing direct-sale price")


def assign_stock(input_file: str, destinations: list[Destination]):
    """
    Main assignment planning function

    Args:
        input_file: Path to the inventory workbook
        destinations: Bars that receive the stock
    """
    print(f"Loading {input_file}...")
    with open(input_file, "rb") as f:
        df, _, error = read_snapshot(f, LOT_ID_COLUMN)
    if error:
        print(f"Error: {error}")
        sys.exit(1)

    is_valid, missing = check_required_columns(df, LOT_REQUIRED_COLUMNS)
    if not is_valid:
        print(f"Error: missing columns {missing}")
        sys.exit(1)

    df = apply_available_filter(df)
    lots = lots_from_dataframe(df)
    print(f"Available lots: {len(lots)}")
    print(f"Bars: {', '.join(d.name for d in destinations)}")

    session = PlanningSession(lots, destinations)
    pricing = PriceSynchronizer(session)
    apply_plan_columns(session, pricing, df)

    print(f"Product groups: {len(session.groups)}")

    assigner = StockAssigner(session)
    try:
        tasks = assigner.preview()
    except PlanValidationError as e:
        print("\nPlan is not valid:")
        for message in e.errors:
            print(f"  - {message}")
        sys.exit(1)

    print("\nGenerating output files...")
    files_created = write_exports(build_assignment_exports(tasks), OUTPUT_DIR)
    for filepath, count in files_created:
        print(f"  Created: {filepath.name} ({count} tasks)")

    # Summary
    print(f"\n=== Summary ===")
    print(f"Total files created: {len(files_created)}")
    print(f"Total tasks: {len(tasks)}")
    print(f"Total units: {sum(t.quantity for t in tasks)}")

    return files_created


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python assign_stock.py <inventory.xlsx> <bar_id[:name]> [<bar_id[:name]> ...]")
        print("  Fill the 'Quantity per bar', 'Direct sale' and 'Sale price' columns first")
        sys.exit(1)

    input_file = sys.argv[1]
    try:
        destinations = [parse_destination(arg) for arg in sys.argv[2:]]
    except ValueError:
        print("Error: bar IDs must be numbers")
        sys.exit(1)

    assign_stock(input_file, destinations)
