"""Task export - groups task lists into per-receiver DataFrames and Excel files."""

import pandas as pd
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import (
    ASSIGNMENT_OUTPUT_COLUMNS,
    RETURN_OUTPUT_COLUMNS,
    CONSIGNMENT,
)
from .models import AssignmentTask
from .returns import ReturnPlan


@dataclass
class TaskExport:
    """Tasks for one receiver, ready for download."""
    receiver: str
    filename: str
    data: pd.DataFrame

    @property
    def item_count(self) -> int:
        """Number of tasks in this export."""
        return len(self.data)

    @property
    def total_quantity(self) -> int:
        if self.data.empty:
            return 0
        return int(self.data["Quantity"].sum())


def _timestamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def build_assignment_exports(
    tasks: list[AssignmentTask],
    timestamp: Optional[str] = None
) -> list[TaskExport]:
    """
    Group assignment tasks by destination bar.

    Args:
        tasks: Expanded assignment tasks
        timestamp: Filename suffix; defaults to now

    Returns:
        One TaskExport per destination, in first-seen order
    """
    timestamp = timestamp or _timestamp()
    grouped: dict[tuple[int, str], list[AssignmentTask]] = {}

    for task in tasks:
        key = (task.destination_id, task.destination_name)
        grouped.setdefault(key, []).append(task)

    results = []
    for (destination_id, destination_name), items in grouped.items():
        output_df = pd.DataFrame({
            "Bar ID": [t.destination_id for t in items],
            "Bar": [t.destination_name for t in items],
            "Lot ID": [t.lot_id for t in items],
            "Product": [t.product_name for t in items],
            "Supplier": [t.supplier_name for t in items],
            "Quantity": [t.quantity for t in items],
            "Direct sale": [t.sell_as_whole_unit for t in items],
            "Sale price (minor units)": [t.sale_price_minor for t in items],
        }, columns=ASSIGNMENT_OUTPUT_COLUMNS)

        results.append(TaskExport(
            receiver=destination_name or str(destination_id),
            filename=f"assign_to_bar_{destination_id}_{timestamp}.xlsx",
            data=output_df,
        ))

    return results


def build_return_exports(plan: ReturnPlan, timestamp: Optional[str] = None) -> list[TaskExport]:
    """
    Group return tasks by route: general inventory or supplier.

    Args:
        plan: Return plan built by ReturnRouter
        timestamp: Filename suffix; defaults to now

    Returns:
        Up to two TaskExport objects ("global", "supplier")
    """
    timestamp = timestamp or _timestamp()
    routes = {"global": [], "supplier": []}

    for task in plan.tasks:
        route = "supplier" if task.ownership_mode == CONSIGNMENT else "global"
        routes[route].append(task)

    results = []
    for route, items in routes.items():
        if not items:
            continue

        output_df = pd.DataFrame({
            "Bar ID": [t.destination_id for t in items],
            "Product ID": [t.product_id for t in items],
            "Supplier ID": [t.supplier_id for t in items],
            "Direct sale": [t.sell_as_whole_unit for t in items],
            "Quantity": [t.quantity for t in items],
        }, columns=RETURN_OUTPUT_COLUMNS)

        results.append(TaskExport(
            receiver=route,
            filename=f"return_{plan.mode}_to_{route}_{timestamp}.xlsx",
            data=output_df,
        ))

    return results


def write_exports(results: list[TaskExport], output_dir: str) -> list[tuple[Path, int]]:
    """
    Write each export to an .xlsx file.

    Returns:
        List of (path, row_count) for the files created
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    files_created = []
    for result in results:
        filepath = output_path / result.filename
        result.data.to_excel(filepath, index=False, engine="openpyxl")
        files_created.append((filepath, result.item_count))

    return files_created
