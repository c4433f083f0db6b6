"""Snapshot loading from Excel exports.

Reads global inventory lots and bar stock records from workbooks whose
header may sit below title rows, and turns rows into model snapshots.
"""

import pandas as pd
from typing import BinaryIO, Optional

from .config import (
    DEFAULT_CURRENCY,
    NO_SUPPLIER_NAME,
    PURCHASED,
    LOT_ID_COLUMN,
    PRODUCT_ID_COLUMN,
    PRODUCT_NAME_COLUMN,
    BRAND_COLUMN,
    VOLUME_COLUMN,
    SUPPLIER_ID_COLUMN,
    SUPPLIER_NAME_COLUMN,
    UNIT_COST_COLUMN,
    CURRENCY_COLUMN,
    OWNERSHIP_COLUMN,
    BAR_ID_COLUMN,
    BAR_NAME_COLUMN,
    QUANTITY_COLUMN,
    SELL_AS_WHOLE_UNIT_COLUMN,
    HEADER_SCAN_ROWS,
    WORKBOOK_COLUMNS,
)
from .filters import AVAILABLE_COLUMN, with_available_quantity
from .models import InventoryLot, ReturnableRecord

TRUE_VALUES = {"true", "yes", "y", "1", "x", "si", "sí"}


def get_int_value(val, default: int = 0) -> int:
    """Convert cell value to integer, treating NaN/empty as default."""
    if val is None or (not isinstance(val, str) and pd.isna(val)) or val == "":
        return default
    try:
        return int(float(val))
    except (ValueError, TypeError):
        return default


def get_optional_int(val) -> Optional[int]:
    """Convert cell value to integer, or None when empty."""
    if val is None or (not isinstance(val, str) and pd.isna(val)) or val == "":
        return None
    try:
        return int(float(val))
    except (ValueError, TypeError):
        return None


def get_str_value(val, default: str = "") -> str:
    if val is None or (not isinstance(val, str) and pd.isna(val)):
        return default
    text = str(val).strip()
    return text or default


def get_bool_value(val) -> bool:
    """Read yes/no style cells ("yes", "x", 1, True)."""
    if isinstance(val, bool):
        return val
    return get_str_value(val).lower() in TRUE_VALUES


def _header_key(val) -> str:
    """Comparable form of a header cell: trimmed and case-folded."""
    return str(val).strip().casefold()


CANONICAL_COLUMNS = {_header_key(name): name for name in WORKBOOK_COLUMNS}


def locate_header_row(
    file: BinaryIO,
    key_column: str = LOT_ID_COLUMN,
    scan_rows: int = HEADER_SCAN_ROWS
) -> tuple[int | None, str | None]:
    """Find the header row of an exported snapshot.

    Exports carry title and filter rows above the table, so the header is
    the first row holding key_column. Matching ignores case and padding
    ("lot id " finds "Lot ID").

    Returns:
        (row_index, None) when found, (None, error_message) otherwise
    """
    wanted = _header_key(key_column)
    try:
        preview_df = pd.read_excel(file, header=None, nrows=scan_rows)
    except Exception as e:
        return None, f"Could not read workbook: {e}"
    finally:
        file.seek(0)

    for idx, row in preview_df.iterrows():
        if any(_header_key(v) == wanted for v in row.values if pd.notna(v)):
            return int(idx), None

    return None, (
        f"No '{key_column}' column in the first {scan_rows} rows. "
        f"Check that the workbook is the right export"
    )


def read_snapshot(
    file: BinaryIO,
    key_column: str = LOT_ID_COLUMN,
    scan_rows: int = HEADER_SCAN_ROWS
) -> tuple[pd.DataFrame | None, int | None, str | None]:
    """Read a lot or bar stock export into a DataFrame.

    Known headers are renamed to their canonical spelling and fully empty
    rows (spacers, footers) are dropped.

    Returns:
        (df, header_row, None) on success, (None, None, error_message) otherwise
    """
    header_row, error = locate_header_row(file, key_column, scan_rows)
    if error:
        return None, None, error

    try:
        df = pd.read_excel(file, header=header_row)
    except Exception as e:
        return None, None, f"Could not read workbook: {e}"
    finally:
        file.seek(0)

    df.columns = [CANONICAL_COLUMNS.get(_header_key(c), str(c).strip()) for c in df.columns]
    df = df.dropna(how="all").reset_index(drop=True)
    return df, header_row, None


def check_required_columns(
    df: pd.DataFrame,
    required_columns: list[str]
) -> tuple[bool, list[str]]:
    """Report which required columns the snapshot lacks, in required order."""
    missing = [col for col in required_columns if col not in df.columns]
    return not missing, missing


def lots_from_dataframe(df: pd.DataFrame) -> list[InventoryLot]:
    """Build an InventoryLot snapshot from a lot DataFrame.

    Rows without a lot ID are skipped. Availability is total minus allocated.
    A lot without supplier gets NO_SUPPLIER_NAME; missing currency is ARS.

    Args:
        df: DataFrame with the lot columns from core.config

    Returns:
        List of InventoryLot in row order
    """
    if AVAILABLE_COLUMN not in df.columns:
        df = with_available_quantity(df)

    lots = []
    for _, row in df.iterrows():
        lot_id = get_optional_int(row.get(LOT_ID_COLUMN))
        if lot_id is None:
            continue

        lots.append(InventoryLot(
            lot_id=lot_id,
            product_id=get_int_value(row.get(PRODUCT_ID_COLUMN)),
            name=get_str_value(row.get(PRODUCT_NAME_COLUMN)),
            brand=get_str_value(row.get(BRAND_COLUMN)),
            volume=get_int_value(row.get(VOLUME_COLUMN)),
            supplier_id=get_optional_int(row.get(SUPPLIER_ID_COLUMN)),
            supplier_name=get_str_value(row.get(SUPPLIER_NAME_COLUMN), NO_SUPPLIER_NAME),
            available_quantity=get_int_value(row.get(AVAILABLE_COLUMN)),
            unit_cost=get_int_value(row.get(UNIT_COST_COLUMN)),
            currency=get_str_value(row.get(CURRENCY_COLUMN), DEFAULT_CURRENCY),
            ownership_mode=get_str_value(row.get(OWNERSHIP_COLUMN), PURCHASED),
        ))

    return lots


def records_from_dataframe(df: pd.DataFrame) -> list[ReturnableRecord]:
    """Build ReturnableRecord snapshots from a bar stock DataFrame.

    Quantities are in volume units (ml); VOLUME_COLUMN is the item size.

    Args:
        df: DataFrame with the bar stock columns from core.config

    Returns:
        List of ReturnableRecord in row order (consumed rows included)
    """
    records = []
    for _, row in df.iterrows():
        bar_id = get_optional_int(row.get(BAR_ID_COLUMN))
        if bar_id is None:
            continue

        records.append(ReturnableRecord(
            bar_id=bar_id,
            product_id=get_int_value(row.get(PRODUCT_ID_COLUMN)),
            supplier_id=get_int_value(row.get(SUPPLIER_ID_COLUMN)),
            quantity=get_int_value(row.get(QUANTITY_COLUMN)),
            ownership_mode=get_str_value(row.get(OWNERSHIP_COLUMN), PURCHASED).lower(),
            sell_as_whole_unit=get_bool_value(row.get(SELL_AS_WHOLE_UNIT_COLUMN)),
            item_volume=get_int_value(row.get(VOLUME_COLUMN)),
            bar_name=get_str_value(row.get(BAR_NAME_COLUMN)),
            product_name=get_str_value(row.get(PRODUCT_NAME_COLUMN)),
            supplier_name=get_str_value(row.get(SUPPLIER_NAME_COLUMN)),
        ))

    return records
