"""Bounded dispatch - runs tasks against a remote service in fixed-size chunks."""

import asyncio
import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Optional, Sequence

from .config import DEFAULT_BATCH_SIZE, GENERIC_FAILURE_MESSAGE, MAX_ERROR_SAMPLES
from .models import DispatchConfig, DispatchSummary, ExecutionProgress

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ExecutionProgress], None]


def failure_message(error: BaseException) -> str:
    """
    Extract the message a failed call reported.

    Looks for a service-style "message" attribute first, then the exception
    text, then falls back to a generic message.
    """
    message = getattr(error, "message", None)
    if isinstance(message, str) and message.strip():
        return message
    text = str(error)
    if text.strip():
        return text
    return GENERIC_FAILURE_MESSAGE


def describe_task(task: Any) -> tuple[str, str]:
    """Destination and product labels of a task for error messages."""
    destination = getattr(task, "destination_name", "") or str(getattr(task, "destination_id", "?"))
    product = getattr(task, "product_name", "") or str(
        getattr(task, "product_id", getattr(task, "lot_id", "?"))
    )
    return destination, product


class ProgressAggregator:
    """
    Accumulates chunk results into an ExecutionProgress.

    completed never exceeds total and only grows.
    """

    def __init__(self, total: int, on_progress: Optional[ProgressCallback] = None):
        self._progress = ExecutionProgress(total=total)
        self._processed = 0
        self._on_progress = on_progress

    @property
    def progress(self) -> ExecutionProgress:
        """Snapshot of the current progress."""
        return replace(self._progress)

    def record_batch(self, success: int, errors: int):
        """Add the outcomes of one resolved chunk and notify the listener."""
        self._processed += success + errors
        self._progress.success += success
        self._progress.errors += errors
        self._progress.completed = min(self._processed, self._progress.total)

        if self._on_progress is not None:
            self._on_progress(self.progress)


class BoundedDispatcher:
    """
    Executes tasks with a fixed number in flight.

    Tasks are split into sequential chunks of batch_size. All tasks of a
    chunk run concurrently and every outcome is awaited before the next chunk
    starts. A failed task is counted and never stops the run.
    """

    def __init__(
        self,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_error_samples: int = MAX_ERROR_SAMPLES
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")
        self.batch_size = batch_size
        self.max_error_samples = max_error_samples

    @classmethod
    def from_config(cls, config: DispatchConfig) -> "BoundedDispatcher":
        return cls(batch_size=config.batch_size, max_error_samples=config.max_error_samples)

    def chunks(self, tasks: Sequence) -> list[list]:
        """Split tasks into sequential chunks of batch_size."""
        return [
            list(tasks[i:i + self.batch_size])
            for i in range(0, len(tasks), self.batch_size)
        ]

    async def dispatch(
        self,
        tasks: Sequence,
        operation: Callable[[Any], Awaitable[Any]],
        on_progress: Optional[ProgressCallback] = None,
        describe: Callable[[Any], tuple[str, str]] = describe_task,
        error_template: str = "Error assigning {product} to {destination}: {message}"
    ) -> DispatchSummary:
        """
        Run operation once per task.

        Args:
            tasks: Ordered task list
            operation: Async callable; raising means the task failed
            on_progress: Called with a progress snapshot after each chunk
            describe: Returns (destination, product) labels for error messages
            error_template: Format of a sampled error message

        Returns:
            DispatchSummary with counts and up to max_error_samples messages
        """
        aggregator = ProgressAggregator(len(tasks), on_progress)
        summary = DispatchSummary()

        logger.info("Dispatching %d tasks in chunks of %d", len(tasks), self.batch_size)

        for index, chunk in enumerate(self.chunks(tasks)):
            results = await asyncio.gather(
                *(operation(task) for task in chunk),
                return_exceptions=True
            )

            chunk_success = 0
            chunk_errors = 0
            for task, result in zip(chunk, results):
                if isinstance(result, Exception):
                    chunk_errors += 1
                    destination, product = describe(task)
                    message = failure_message(result)
                    logger.warning("Task failed (%s -> %s): %s", product, destination, message)
                    if len(summary.error_samples) < self.max_error_samples:
                        summary.error_samples.append(error_template.format(
                            product=product, destination=destination, message=message
                        ))
                elif isinstance(result, BaseException):
                    raise result
                else:
                    chunk_success += 1

            summary.success_count += chunk_success
            summary.error_count += chunk_errors
            aggregator.record_batch(chunk_success, chunk_errors)

            logger.debug(
                "Chunk %d done: %d ok, %d failed", index + 1, chunk_success, chunk_errors
            )

        logger.info(
            "Dispatch finished: %d succeeded, %d failed",
            summary.success_count, summary.error_count
        )
        return summary
