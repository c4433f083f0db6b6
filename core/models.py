"""Data models for stock assignment and bulk returns."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from .config import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CURRENCY,
    MAX_ERROR_SAMPLES,
    PURCHASED,
    CONSIGNMENT,
)


def parse_quantity(raw) -> Optional[int]:
    """
    Convert an operator-entered quantity to an integer.

    Blank input stays blank (None), which is distinct from zero.
    Non-numeric or negative input becomes 0.

    Example: "8" -> 8, "8.9" -> 8, "-3" -> 0, "abc" -> 0, "" -> None
    """
    if raw is None:
        return None
    if isinstance(raw, str):
        raw = raw.strip()
        if raw == "":
            return None
    try:
        value = int(float(raw))
    except (ValueError, TypeError, OverflowError):
        return 0
    return max(value, 0)


def to_minor_units(raw) -> Optional[int]:
    """
    Convert a price in major units ("12.50") to integer minor units (1250).

    Rounds half up. Returns None for blank or non-numeric input.
    """
    if raw is None:
        return None
    text = str(raw).strip()
    if text == "":
        return None
    try:
        amount = Decimal(text)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_currency(amount_minor: int, currency: str = DEFAULT_CURRENCY) -> str:
    """Format minor units for display, e.g. 123450 -> "ARS 1,234.50"."""
    return f"{currency} {amount_minor / 100:,.2f}"


def profit_margin(sale_price_minor: Optional[int], unit_cost_minor: int) -> Optional[dict]:
    """
    Profit and margin of selling one unit at sale_price.

    Returns None unless both price and cost are positive.
    """
    if not sale_price_minor or sale_price_minor <= 0 or unit_cost_minor <= 0:
        return None
    profit = sale_price_minor - unit_cost_minor
    margin = profit / unit_cost_minor * 100
    return {
        "profit": profit,
        "margin": margin,
        "is_positive": profit > 0,
    }


@dataclass(frozen=True)
class InventoryLot:
    """One purchasable batch of a product from one supplier."""
    lot_id: int
    product_id: int
    name: str
    brand: str
    volume: int                     # ml per unit
    supplier_id: Optional[int]
    supplier_name: str
    available_quantity: int         # total minus already allocated
    unit_cost: int                  # minor units
    currency: str = DEFAULT_CURRENCY
    ownership_mode: str = PURCHASED

    @property
    def group_key(self) -> tuple:
        """Product identity, independent of lot and supplier."""
        return (self.product_id, self.name.lower(), self.brand.lower(), self.volume)


@dataclass(frozen=True)
class Destination:
    """A target location (bar) that can receive stock."""
    destination_id: int
    name: str


@dataclass
class ItemConfig:
    """Planning state for one selected lot."""
    lot: InventoryLot
    quantity: Optional[int] = None          # per destination, None = blank
    sell_as_whole_unit: bool = False
    sale_price: Optional[int] = None        # minor units, None = blank

    @property
    def lot_id(self) -> int:
        return self.lot.lot_id

    @property
    def resolved_quantity(self) -> int:
        return self.quantity or 0

    @property
    def margin(self) -> Optional[dict]:
        if not self.sell_as_whole_unit:
            return None
        return profit_margin(self.sale_price, self.lot.unit_cost)


@dataclass
class SupplierSlot:
    """One supplier's contribution to a ProductGroup."""
    name: str
    lot_id: int
    available: int
    unit_cost: int
    currency: str = DEFAULT_CURRENCY


@dataclass
class ProductGroup:
    """Lots that represent the same product, regardless of supplier."""
    key: tuple
    product_id: int
    name: str
    brand: str
    volume: int
    suppliers: list[SupplierSlot] = field(default_factory=list)
    total_available: int = 0

    def add_slot(self, slot: SupplierSlot):
        self.suppliers.append(slot)
        self.total_available += slot.available

    @property
    def lot_ids(self) -> list[int]:
        return [slot.lot_id for slot in self.suppliers]

    @property
    def has_multiple_suppliers(self) -> bool:
        return len(self.suppliers) > 1

    def max_per_destination(self, destination_count: int) -> int:
        return self.total_available // max(destination_count, 1)


@dataclass(frozen=True)
class AssignmentTask:
    """Atomic unit of execution: one lot to one destination."""
    destination_id: int
    lot_id: int
    quantity: int
    sell_as_whole_unit: bool
    sale_price_minor: Optional[int] = None

    # Display context, not sent to the service
    destination_name: str = field(default="", compare=False)
    product_name: str = field(default="", compare=False)
    supplier_name: str = field(default="", compare=False)

    def to_payload(self, event_id: Optional[int] = None) -> dict:
        """Request body for the assign operation."""
        payload = {
            "globalInventoryId": self.lot_id,
            "barId": self.destination_id,
            "quantity": self.quantity,
            "sellAsWholeUnit": self.sell_as_whole_unit,
        }
        if event_id is not None:
            payload["eventId"] = event_id
        if self.sell_as_whole_unit:
            payload["salePrice"] = self.sale_price_minor
        return payload


@dataclass
class ExecutionProgress:
    """Live progress of a dispatch run."""
    completed: int = 0
    total: int = 0
    success: int = 0
    errors: int = 0

    @property
    def is_done(self) -> bool:
        return self.completed == self.total

    @property
    def percent(self) -> float:
        if self.total == 0:
            return 100.0
        return self.completed / self.total * 100


@dataclass
class DispatchSummary:
    """Final outcome of a dispatch run."""
    success_count: int = 0
    error_count: int = 0
    error_samples: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.success_count + self.error_count

    @property
    def is_success(self) -> bool:
        """Partial success counts as success."""
        return self.success_count > 0

    @property
    def should_close(self) -> bool:
        """The plan auto-closes only when nothing failed."""
        return self.error_count == 0


@dataclass(frozen=True)
class ReturnableRecord:
    """A stock record held at a bar, possibly returnable."""
    bar_id: int
    product_id: int
    supplier_id: int
    quantity: int                   # volume units (ml)
    ownership_mode: str
    sell_as_whole_unit: bool = False
    item_volume: int = 0            # ml per item, 0 when unknown
    bar_name: str = ""
    product_name: str = ""
    supplier_name: str = ""

    @property
    def key(self) -> str:
        """Stable identity used for selection."""
        return f"{self.bar_id}-{self.product_id}-{self.supplier_id}-{int(self.sell_as_whole_unit)}"

    @property
    def is_returnable(self) -> bool:
        return self.quantity > 0

    @property
    def is_consumed(self) -> bool:
        return self.quantity <= 0

    @property
    def is_partial(self) -> bool:
        """Less than one full item remains."""
        return 0 < self.quantity < self.item_volume

    @property
    def is_purchased(self) -> bool:
        return self.ownership_mode == PURCHASED

    @property
    def is_consignment(self) -> bool:
        return self.ownership_mode == CONSIGNMENT

    @property
    def available_units(self) -> int:
        """Item count the external return operation expects."""
        if self.item_volume > 0:
            return self.quantity // self.item_volume
        return self.quantity


@dataclass(frozen=True)
class ReturnTask:
    """One record to return from its origin bar."""
    destination_id: int             # origin bar
    product_id: int
    supplier_id: int
    sell_as_whole_unit: bool
    quantity: int
    ownership_mode: str = field(default=PURCHASED, compare=False)

    def to_payload(self, event_id: Optional[int] = None) -> dict:
        payload = {
            "barId": self.destination_id,
            "drinkId": self.product_id,
            "supplierId": self.supplier_id,
            "sellAsWholeUnit": self.sell_as_whole_unit,
            "quantity": self.quantity,
        }
        if event_id is not None:
            payload["eventId"] = event_id
        return payload


@dataclass
class BulkReturnResult:
    """Aggregate reported by the bulk return service."""
    processed: int = 0
    to_global: int = 0
    to_supplier: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def message(self) -> str:
        if not self.errors:
            return f"{self.processed} items processed successfully"
        return f"{self.processed} processed, {len(self.errors)} errors"

    @classmethod
    def from_dict(cls, data: dict) -> "BulkReturnResult":
        """Create result from the service response body."""
        return cls(
            processed=data.get("processed", 0),
            to_global=data.get("toGlobal", 0),
            to_supplier=data.get("toSupplier", 0),
            errors=list(data.get("errors", [])),
        )


@dataclass(frozen=True)
class DiscardTask:
    """One partial leftover to write off at its bar."""
    destination_id: int
    product_id: int
    supplier_id: int
    sell_as_whole_unit: bool

    def to_payload(self, event_id: Optional[int] = None) -> dict:
        payload = {
            "barId": self.destination_id,
            "drinkId": self.product_id,
            "supplierId": self.supplier_id,
            "sellAsWholeUnit": self.sell_as_whole_unit,
        }
        if event_id is not None:
            payload["eventId"] = event_id
        return payload


@dataclass
class BulkDiscardResult:
    """Aggregate reported by the bulk discard service."""
    processed: int = 0
    total_ml_discarded: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def message(self) -> str:
        if not self.errors:
            return f"{self.processed} leftovers discarded ({self.total_ml_discarded} ml)"
        return f"{self.processed} processed, {len(self.errors)} errors"

    @classmethod
    def from_dict(cls, data: dict) -> "BulkDiscardResult":
        return cls(
            processed=data.get("processed", 0),
            total_ml_discarded=data.get("totalMlDiscarded", 0),
            errors=list(data.get("errors", [])),
        )


@dataclass
class DispatchConfig:
    """Configuration for dispatch operations."""
    batch_size: int = DEFAULT_BATCH_SIZE
    max_error_samples: int = MAX_ERROR_SAMPLES

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {self.batch_size}")

    def to_dict(self) -> dict:
        """Convert config to dictionary for JSON export."""
        return {
            "batch_size": self.batch_size,
            "max_error_samples": self.max_error_samples,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DispatchConfig":
        """Create config from dictionary (JSON import)."""
        return cls(
            batch_size=data.get("batch_size", DEFAULT_BATCH_SIZE),
            max_error_samples=data.get("max_error_samples", MAX_ERROR_SAMPLES),
        )
