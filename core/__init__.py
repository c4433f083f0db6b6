"""Core module for stock assignment and bulk return logic."""

from .models import (
    InventoryLot,
    Destination,
    ItemConfig,
    SupplierSlot,
    ProductGroup,
    AssignmentTask,
    ExecutionProgress,
    DispatchSummary,
    DispatchConfig,
    ReturnableRecord,
    ReturnTask,
    BulkReturnResult,
    DiscardTask,
    BulkDiscardResult,
    parse_quantity,
    to_minor_units,
    format_currency,
    profit_margin,
)
from .exceptions import (
    StockPlanningError,
    PlanValidationError,
    NothingToProcessError,
)
from .file_loader import (
    locate_header_row,
    read_snapshot,
    check_required_columns,
    lots_from_dataframe,
    records_from_dataframe,
)
from .filters import (
    cell_text,
    with_available_quantity,
    apply_available_filter,
    apply_search_filter,
    apply_all_filters,
)
from .aggregator import aggregate_groups, build_name_index
from .distributor import QuantityDistributor
from .session import PlanningSession
from .pricing import (
    PriceSynchronizer,
    find_existing_direct_sale_price,
    existing_prices_from_recipes,
)
from .validator import PlanValidator, ValidationResult
from .expander import expand_tasks
from .dispatcher import BoundedDispatcher, ProgressAggregator
from .assigner import StockAssigner, AssignmentOutcome
from .returns import (
    ReturnRouter,
    ReturnPlan,
    ReturnOutcome,
    DiscardPlan,
    DiscardOutcome,
)
from .exporter import (
    TaskExport,
    build_assignment_exports,
    build_return_exports,
    write_exports,
)

__all__ = [
    # Models
    "InventoryLot",
    "Destination",
    "ItemConfig",
    "SupplierSlot",
    "ProductGroup",
    "AssignmentTask",
    "ExecutionProgress",
    "DispatchSummary",
    "DispatchConfig",
    "ReturnableRecord",
    "ReturnTask",
    "BulkReturnResult",
    "DiscardTask",
    "BulkDiscardResult",
    "parse_quantity",
    "to_minor_units",
    "format_currency",
    "profit_margin",
    # Errors
    "StockPlanningError",
    "PlanValidationError",
    "NothingToProcessError",
    # File loader
    "locate_header_row",
    "read_snapshot",
    "check_required_columns",
    "lots_from_dataframe",
    "records_from_dataframe",
    # Filters
    "cell_text",
    "with_available_quantity",
    "apply_available_filter",
    "apply_search_filter",
    "apply_all_filters",
    # Planning
    "aggregate_groups",
    "build_name_index",
    "QuantityDistributor",
    "PlanningSession",
    "PriceSynchronizer",
    "find_existing_direct_sale_price",
    "existing_prices_from_recipes",
    "PlanValidator",
    "ValidationResult",
    "expand_tasks",
    # Execution
    "BoundedDispatcher",
    "ProgressAggregator",
    "StockAssigner",
    "AssignmentOutcome",
    "ReturnRouter",
    "ReturnPlan",
    "ReturnOutcome",
    "DiscardPlan",
    "DiscardOutcome",
    # Export
    "TaskExport",
    "build_assignment_exports",
    "build_return_exports",
    "write_exports",
]
