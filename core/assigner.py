"""Stock assignment - validates a plan, expands it and dispatches the tasks."""

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional

from .config import ASSIGNMENT_CACHES
from .dispatcher import BoundedDispatcher, ProgressCallback
from .exceptions import PlanValidationError
from .expander import expand_tasks
from .models import AssignmentTask, DispatchConfig, DispatchSummary
from .session import PlanningSession
from .validator import PlanValidator, ValidationResult

logger = logging.getLogger(__name__)


@dataclass
class AssignmentOutcome:
    """Result of executing an assignment plan."""
    summary: DispatchSummary
    tasks: list[AssignmentTask] = field(default_factory=list)
    destination_label: str = ""

    @property
    def should_close(self) -> bool:
        return self.summary.should_close

    @property
    def caches_to_refresh(self) -> list[str]:
        """Read caches the caller must refetch; empty when nothing was assigned."""
        if self.summary.success_count > 0:
            return list(ASSIGNMENT_CACHES)
        return []

    @property
    def message(self) -> str:
        success = self.summary.success_count
        if success == 0:
            return f"No items assigned ({self.summary.error_count} errors)"
        noun = "item" if success == 1 else "items"
        text = f"{success} {noun} assigned to {self.destination_label}"
        if self.summary.error_count:
            text += f", {self.summary.error_count} errors"
        return text


class StockAssigner:
    """
    Runs an assignment plan end to end.

    Steps: validate -> expand into tasks -> dispatch in bounded chunks.
    Validation failures stop the run before any task is sent.
    """

    def __init__(
        self,
        session: PlanningSession,
        config: Optional[DispatchConfig] = None,
        validator: Optional[PlanValidator] = None
    ):
        self.session = session
        self.config = config or DispatchConfig()
        self.validator = validator or PlanValidator()
        self.dispatcher = BoundedDispatcher.from_config(self.config)

    def validate(self) -> ValidationResult:
        return self.validator.validate(self.session)

    def preview(self) -> list[AssignmentTask]:
        """
        Generate the task list without executing it.

        Raises:
            PlanValidationError: If the plan is invalid
            NothingToProcessError: If the plan yields no task
        """
        result = self.validate()
        if not result.is_valid:
            raise PlanValidationError(result.errors)
        return expand_tasks(self.session)

    def _destination_label(self) -> str:
        destinations = self.session.destinations
        if len(destinations) == 1:
            return destinations[0].name
        return f"{len(destinations)} bars"

    async def execute(
        self,
        assign: Callable[[AssignmentTask], Awaitable[Any]],
        on_progress: Optional[ProgressCallback] = None
    ) -> AssignmentOutcome:
        """
        Validate, expand and dispatch the plan.

        Args:
            assign: Async per-task operation; raising marks the task failed
            on_progress: Receives progress after each chunk

        Returns:
            AssignmentOutcome; the session is reset when nothing failed
        """
        tasks = self.preview()
        label = self._destination_label()

        logger.info("Assigning %d tasks to %s", len(tasks), label)
        summary = await self.dispatcher.dispatch(tasks, assign, on_progress)

        outcome = AssignmentOutcome(summary=summary, tasks=tasks, destination_label=label)
        if outcome.should_close:
            self.session.reset()
        return outcome
