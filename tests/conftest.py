"""Shared fixtures for stock assignment tests."""

import asyncio

import pytest
from core.models import Destination, DispatchConfig, InventoryLot, ReturnableRecord
from core.session import PlanningSession

# Bars used in tests
BARS = [
    Destination(1, "Main Bar"),
    Destination(2, "VIP Bar"),
    Destination(3, "Backstage"),
    Destination(4, "Lounge"),
]


@pytest.fixture
def dispatch_config():
    """DispatchConfig with the default chunk size."""
    return DispatchConfig(batch_size=10)


@pytest.fixture
def vodka_lots():
    """Two suppliers of the same vodka: A has 10, B has 6."""
    return [
        create_lot(1, product_id=100, name="Vodka", brand="Absolut", volume=750,
                   supplier_name="Supplier A", available=10),
        create_lot(2, product_id=100, name="Vodka", brand="Absolut", volume=750,
                   supplier_name="Supplier B", available=6),
    ]


def create_lot(
    lot_id: int,
    product_id: int = 100,
    name: str = "Vodka",
    brand: str = "Absolut",
    volume: int = 750,
    supplier_name: str = "Supplier A",
    available: int = 10,
    unit_cost: int = 500,
    currency: str = "ARS",
) -> InventoryLot:
    """Helper to create an inventory lot with sensible defaults."""
    return InventoryLot(
        lot_id=lot_id,
        product_id=product_id,
        name=name,
        brand=brand,
        volume=volume,
        supplier_id=lot_id * 10,
        supplier_name=supplier_name,
        available_quantity=available,
        unit_cost=unit_cost,
        currency=currency,
    )


def create_session(lots: list[InventoryLot], bar_count: int = 1) -> PlanningSession:
    """Create a session with every lot selected and configs initialized."""
    session = PlanningSession(lots, BARS[:bar_count])
    session.select_all(lot.lot_id for lot in lots)
    session.initialize_configs()
    return session


def create_record(
    bar_id: int = 1,
    product_id: int = 100,
    supplier_id: int = 10,
    quantity: int = 1500,
    ownership_mode: str = "purchased",
    item_volume: int = 750,
    sell_as_whole_unit: bool = False,
) -> ReturnableRecord:
    """Helper to create a bar stock record."""
    return ReturnableRecord(
        bar_id=bar_id,
        product_id=product_id,
        supplier_id=supplier_id,
        quantity=quantity,
        ownership_mode=ownership_mode,
        sell_as_whole_unit=sell_as_whole_unit,
        item_volume=item_volume,
        bar_name=f"Bar {bar_id}",
        product_name=f"Product {product_id}",
    )


class ServiceError(Exception):
    """Failure reported by the fake remote service."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message


class FakeService:
    """
    Async stand-in for a per-task remote operation.

    Records every call and the number of calls in flight at once.
    Fails for any task whose position in the call order is in fail_calls.
    """

    def __init__(self, fail_calls=(), fail_message: str = "Insufficient stock"):
        self.fail_calls = set(fail_calls)
        self.fail_message = fail_message
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.chunk_log = []

    async def __call__(self, task):
        position = len(self.calls)
        self.calls.append(task)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        self.chunk_log.append(("start", position))
        await asyncio.sleep(0)
        self.in_flight -= 1
        self.chunk_log.append(("end", position))
        if position in self.fail_calls:
            raise ServiceError(self.fail_message)
        return {"ok": True}
