"""Plan validation - the gate before tasks are expanded and dispatched."""

from dataclasses import dataclass, field

from .session import PlanningSession


@dataclass
class ValidationResult:
    """Outcome of validating a plan."""
    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


class PlanValidator:
    """
    Checks a plan against availability and business rules.

    Rules per group:
    - Per-destination quantity must be > 0
    - quantity x destinations must not exceed the group's availability
    - quantity x destinations must not exceed any single lot's availability
    - A direct-sale group needs a price > 0

    Validation reads the session only; it never changes it.
    """

    def validate(self, session: PlanningSession) -> ValidationResult:
        result = ValidationResult()

        if not session.destinations:
            result.errors.append("Select at least one bar")

        if not session.configs:
            result.errors.append("Select at least one inventory item")
            return result

        destination_count = session.destination_count

        for group in session.groups:
            quantity = session.group_quantity(group.key) or 0
            label = group.name

            if quantity <= 0:
                result.errors.append(f"Enter the quantity for {label}")
                continue

            required = quantity * destination_count
            if required > group.total_available:
                result.errors.append(
                    f"{label}: cannot assign {quantity} to each of {destination_count} bars "
                    f"({required} total). Available: {group.total_available}, "
                    f"short by {required - group.total_available}"
                )
            else:
                result.errors.extend(self._lot_overdraws(session, group.key, destination_count))

            lead = session.lead_config(group.key)
            if lead.sell_as_whole_unit and (lead.sale_price or 0) <= 0:
                result.errors.append(f"Enter the sale price for {label}")

        return result

    def _lot_overdraws(self, session: PlanningSession, key: tuple, destination_count: int) -> list[str]:
        """One error per lot whose quantity x destinations exceeds its own availability."""
        errors = []
        for config in session.configs_for_group(key):
            required = config.resolved_quantity * destination_count
            available = config.lot.available_quantity
            if required > available:
                errors.append(
                    f"{config.lot.name} ({config.lot.supplier_name}): cannot assign "
                    f"{config.resolved_quantity} to each of {destination_count} bars "
                    f"({required} total). Lot available: {available}, "
                    f"short by {required - available}"
                )
        return errors
