"""Lot availability and operator search over inventory DataFrames."""

import pandas as pd

from .config import (
    PRODUCT_NAME_COLUMN,
    BRAND_COLUMN,
    SUPPLIER_NAME_COLUMN,
    TOTAL_QUANTITY_COLUMN,
    ALLOCATED_QUANTITY_COLUMN,
)

AVAILABLE_COLUMN = "Available"


def cell_text(val) -> str:
    """Searchable text of a lot cell.

    Whole-number floats lose their ".0", so IDs read back from Excel as
    2221.0 match "2221". Empty cells give "".
    """
    if pd.isna(val):
        return ""
    if isinstance(val, float) and val.is_integer():
        return str(int(val))
    return str(val).strip()


def with_available_quantity(df: pd.DataFrame) -> pd.DataFrame:
    """Add the Available column: total minus already allocated.

    Args:
        df: Lot DataFrame with TOTAL_QUANTITY_COLUMN and optional ALLOCATED_QUANTITY_COLUMN

    Returns:
        Copy of df with AVAILABLE_COLUMN
    """
    result = df.copy()
    total = pd.to_numeric(result[TOTAL_QUANTITY_COLUMN], errors="coerce").fillna(0)
    if ALLOCATED_QUANTITY_COLUMN in result.columns:
        allocated = pd.to_numeric(result[ALLOCATED_QUANTITY_COLUMN], errors="coerce").fillna(0)
    else:
        allocated = 0
    result[AVAILABLE_COLUMN] = (total - allocated).astype(int)
    return result


def apply_available_filter(df: pd.DataFrame) -> pd.DataFrame:
    """Keep only lots with something left to assign."""
    if AVAILABLE_COLUMN not in df.columns:
        df = with_available_quantity(df)
    return df[df[AVAILABLE_COLUMN] > 0]


def apply_search_filter(df: pd.DataFrame, search: str) -> pd.DataFrame:
    """Filter lots by free text over product name, brand and supplier.

    Matching is a case-insensitive substring match on any of the three.

    Args:
        df: Input DataFrame
        search: Text typed by the operator

    Returns:
        Filtered DataFrame
    """
    if not search:
        return df

    needle = search.lower()
    mask = pd.Series(False, index=df.index)
    for column in (PRODUCT_NAME_COLUMN, BRAND_COLUMN, SUPPLIER_NAME_COLUMN):
        if column in df.columns:
            mask |= df[column].apply(cell_text).str.lower().str.contains(needle, regex=False)
    return df[mask]


def apply_all_filters(df: pd.DataFrame, search: str | None = None) -> pd.DataFrame:
    """Apply availability and search filters to a lot DataFrame."""
    result = apply_available_filter(df)

    if search:
        result = apply_search_filter(result, search)

    return result
