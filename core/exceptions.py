"""Errors raised by the planning and dispatch flows."""


class StockPlanningError(Exception):
    """Base class for stock planning errors."""


class PlanValidationError(StockPlanningError):
    """A plan failed validation and cannot be dispatched."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid plan")


class NothingToProcessError(PlanValidationError):
    """A plan or return resolved to zero tasks."""

    def __init__(self, message: str = "Nothing to process"):
        super().__init__([message])
