"""Bulk stock returns - routes bar stock back to global inventory or to suppliers."""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Optional

from .config import (
    AUTO_RETURN_NOTE,
    DISCARD_CACHES,
    DISCARD_NOTE,
    RETURN_AUTO,
    RETURN_CACHES,
    RETURN_MODES,
    RETURN_TO_GLOBAL,
    CONSIGNMENT,
)
from .dispatcher import BoundedDispatcher, ProgressAggregator, ProgressCallback
from .exceptions import NothingToProcessError
from .models import (
    BulkDiscardResult,
    BulkReturnResult,
    DiscardTask,
    DispatchConfig,
    DispatchSummary,
    ReturnableRecord,
    ReturnTask,
)

logger = logging.getLogger(__name__)


def convert_to_items(record: ReturnableRecord) -> int:
    """
    Convert a record's volume quantity into the item count to return.

    Divides by the item volume when known, otherwise passes the quantity
    through. Never returns less than 1.
    """
    return max(record.available_units, 1)


def build_return_task(record: ReturnableRecord) -> ReturnTask:
    return ReturnTask(
        destination_id=record.bar_id,
        product_id=record.product_id,
        supplier_id=record.supplier_id,
        sell_as_whole_unit=record.sell_as_whole_unit,
        quantity=convert_to_items(record),
        ownership_mode=record.ownership_mode,
    )


@dataclass
class ReturnPlan:
    """Tasks for one bulk return, plus notes for the operator."""
    mode: str
    tasks: list[ReturnTask] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)

    @property
    def request_note(self) -> Optional[str]:
        """Note sent along with the bulk request."""
        return AUTO_RETURN_NOTE if self.mode == RETURN_AUTO else None

    @property
    def to_global_count(self) -> int:
        return sum(1 for t in self.tasks if t.ownership_mode != CONSIGNMENT)

    @property
    def to_supplier_count(self) -> int:
        return sum(1 for t in self.tasks if t.ownership_mode == CONSIGNMENT)

    def to_payload(self, event_id: Optional[int] = None) -> dict:
        payload = {
            "mode": self.mode,
            "items": [task.to_payload(event_id) for task in self.tasks],
        }
        if self.request_note:
            payload["notes"] = self.request_note
        return payload


@dataclass
class ReturnOutcome:
    """Result of a bulk return."""
    plan: ReturnPlan
    result: BulkReturnResult

    @property
    def caches_to_refresh(self) -> list[str]:
        if self.result.processed > 0:
            return list(RETURN_CACHES)
        return []

    @property
    def message(self) -> str:
        return self.result.message


@dataclass
class DiscardPlan:
    """Partial leftovers to write off in one bulk call."""
    tasks: list[DiscardTask] = field(default_factory=list)
    note: str = DISCARD_NOTE

    def to_payload(self, event_id: Optional[int] = None) -> dict:
        return {
            "items": [task.to_payload(event_id) for task in self.tasks],
            "notes": self.note,
        }


@dataclass
class DiscardOutcome:
    """Result of a bulk discard."""
    plan: DiscardPlan
    result: BulkDiscardResult

    @property
    def caches_to_refresh(self) -> list[str]:
        if self.result.processed > 0:
            return list(DISCARD_CACHES)
        return []

    @property
    def message(self) -> str:
        return self.result.message


def record_bulk_result(aggregator: ProgressAggregator, sent: int, processed: int, error_count: int):
    """Record a single bulk response so progress always reaches the number sent."""
    # items the server did not report as processed count as failed
    unprocessed = max(sent - processed, error_count, 0)
    aggregator.record_batch(min(processed, sent), unprocessed)


class ReturnRouter:
    """
    Routes returnable bar stock by ownership.

    - purchased stock goes back to general inventory
    - consignment stock goes back to its supplier

    Modes:
    - to_global: selected purchased records only
    - to_supplier: selected consignment records only
    - auto: every returnable record, each to its own route

    Records with quantity <= 0 are consumed and never returned. Partial
    leftovers (less than one full item) can also be written off in bulk.
    """

    def __init__(
        self,
        records: Iterable[ReturnableRecord],
        config: Optional[DispatchConfig] = None
    ):
        self.records = list(records)
        self.config = config or DispatchConfig()
        self._selected: set[str] = set()

    # Classification

    @property
    def returnable(self) -> list[ReturnableRecord]:
        return [r for r in self.records if r.is_returnable]

    @property
    def consumed(self) -> list[ReturnableRecord]:
        return [r for r in self.records if r.is_consumed]

    @property
    def partial(self) -> list[ReturnableRecord]:
        """Returnable records holding less than one full item."""
        return [r for r in self.returnable if r.is_partial]

    @property
    def returnable_purchased(self) -> list[ReturnableRecord]:
        return [r for r in self.returnable if r.is_purchased]

    @property
    def returnable_consignment(self) -> list[ReturnableRecord]:
        return [r for r in self.returnable if r.is_consignment]

    # Selection

    @property
    def selected(self) -> list[ReturnableRecord]:
        return [r for r in self.returnable if r.key in self._selected]

    def toggle(self, key: str):
        """Toggle a record; consumed records cannot be selected."""
        if not any(r.key == key for r in self.returnable):
            return
        if key in self._selected:
            self._selected.discard(key)
        else:
            self._selected.add(key)

    def toggle_all(self):
        """Select every returnable record, or clear when all are selected."""
        keys = {r.key for r in self.returnable}
        if self._selected == keys:
            self._selected.clear()
        else:
            self._selected = keys

    def clear_selection(self):
        self._selected.clear()

    # Planning

    def build_plan(self, mode: str) -> ReturnPlan:
        """
        Build the return tasks for a mode.

        Raises:
            ValueError: Unknown mode
            NothingToProcessError: No record qualifies for the mode
        """
        if mode not in RETURN_MODES:
            raise ValueError(f"Unknown return mode: {mode}")

        plan = ReturnPlan(mode=mode)

        if mode == RETURN_AUTO:
            records = self.returnable
        else:
            selected = self.selected
            if mode == RETURN_TO_GLOBAL:
                records = [r for r in selected if r.is_purchased]
                ignored = len(selected) - len(records)
                if ignored:
                    plan.notes.append(
                        f"{ignored} consignment items ignored: they can only go back to their supplier"
                    )
            else:
                records = [r for r in selected if r.is_consignment]
                ignored = len(selected) - len(records)
                if ignored:
                    plan.notes.append(
                        f"{ignored} purchased items ignored: they can only go back to general inventory"
                    )

        plan.tasks = [build_return_task(r) for r in records if r.quantity > 0]

        if not plan.tasks:
            raise NothingToProcessError("No items with stock to process")

        return plan

    def build_discard_plan(self) -> DiscardPlan:
        """
        Build the write-off tasks for every partial leftover.

        Raises:
            NothingToProcessError: No record holds a partial leftover
        """
        tasks = [
            DiscardTask(
                destination_id=r.bar_id,
                product_id=r.product_id,
                supplier_id=r.supplier_id,
                sell_as_whole_unit=r.sell_as_whole_unit,
            )
            for r in self.partial
        ]
        if not tasks:
            raise NothingToProcessError("No partial leftovers to discard")
        return DiscardPlan(tasks=tasks)

    # Execution

    async def execute(
        self,
        mode: str,
        bulk_return: Callable[..., Awaitable[Any]],
        on_progress: Optional[ProgressCallback] = None
    ) -> ReturnOutcome:
        """
        Submit one bulk return call for the mode.

        Args:
            mode: to_global, to_supplier or auto
            bulk_return: Async callable(mode, items, notes) returning a
                BulkReturnResult or the service's response dict
            on_progress: Receives progress once the call resolves

        Returns:
            ReturnOutcome with the server-reported breakdown
        """
        plan = self.build_plan(mode)
        aggregator = ProgressAggregator(len(plan.tasks), on_progress)

        logger.info(
            "Submitting %s return: %d items (%d to global, %d to supplier)",
            mode, len(plan.tasks), plan.to_global_count, plan.to_supplier_count
        )
        response = await bulk_return(mode, plan.tasks, plan.request_note)
        result = response if isinstance(response, BulkReturnResult) else BulkReturnResult.from_dict(response)

        record_bulk_result(aggregator, len(plan.tasks), result.processed, result.error_count)
        if result.errors:
            logger.warning("Bulk return reported %d errors", result.error_count)

        self.clear_selection()
        return ReturnOutcome(plan=plan, result=result)

    async def execute_discard(
        self,
        bulk_discard: Callable[..., Awaitable[Any]],
        on_progress: Optional[ProgressCallback] = None
    ) -> DiscardOutcome:
        """
        Write off every partial leftover in one bulk call.

        Args:
            bulk_discard: Async callable(items, notes) returning a
                BulkDiscardResult or the service's response dict
            on_progress: Receives progress once the call resolves

        Returns:
            DiscardOutcome with the server-reported totals
        """
        plan = self.build_discard_plan()
        aggregator = ProgressAggregator(len(plan.tasks), on_progress)

        logger.info("Submitting discard of %d partial leftovers", len(plan.tasks))
        response = await bulk_discard(plan.tasks, plan.note)
        result = response if isinstance(response, BulkDiscardResult) else BulkDiscardResult.from_dict(response)

        record_bulk_result(aggregator, len(plan.tasks), result.processed, result.error_count)
        if result.errors:
            logger.warning("Bulk discard reported %d errors", result.error_count)

        return DiscardOutcome(plan=plan, result=result)

    async def dispatch_individually(
        self,
        mode: str,
        return_one: Callable[[ReturnTask], Awaitable[Any]],
        on_progress: Optional[ProgressCallback] = None
    ) -> DispatchSummary:
        """Run the plan one record at a time through the bounded dispatcher."""
        plan = self.build_plan(mode)
        dispatcher = BoundedDispatcher.from_config(self.config)
        names = {
            (r.bar_id, r.product_id, r.supplier_id, r.sell_as_whole_unit): r
            for r in self.records
        }

        def describe(task: ReturnTask) -> tuple[str, str]:
            record = names.get(
                (task.destination_id, task.product_id, task.supplier_id, task.sell_as_whole_unit)
            )
            if record is None:
                return str(task.destination_id), str(task.product_id)
            return (
                record.bar_name or str(record.bar_id),
                record.product_name or str(record.product_id),
            )

        summary = await dispatcher.dispatch(
            plan.tasks,
            return_one,
            on_progress,
            describe=describe,
            error_template="Error returning {product} from {destination}: {message}",
        )
        if summary.success_count > 0:
            self.clear_selection()
        return summary
