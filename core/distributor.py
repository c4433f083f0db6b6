"""Quantity distribution - splits a per-bar quantity across supplier lots."""

import logging
from typing import Optional

from .models import ProductGroup, parse_quantity

logger = logging.getLogger(__name__)


class QuantityDistributor:
    """
    Converts a per-destination quantity for a group into per-lot quantities.

    Distribution rules:
    - Blank input resets every lot in the group to blank
    - Non-numeric or negative input counts as 0
    - The request is clamped to floor(total_available / destinations)
    - Lots are filled greedily in supplier order, each lot capped at
      floor(lot_available / destinations)

    When the per-lot caps add up to less than the group cap (floor rounding),
    the result is smaller than the request. The shortfall is not moved to
    another lot.
    """

    def max_per_destination(self, group: ProductGroup, destination_count: int) -> int:
        return group.max_per_destination(destination_count)

    def clamp(self, group: ProductGroup, raw_quantity, destination_count: int) -> Optional[int]:
        """Parse the raw input and clamp it to the group ceiling."""
        requested = parse_quantity(raw_quantity)
        if requested is None:
            return None
        return min(requested, self.max_per_destination(group, destination_count))

    def distribute(
        self,
        group: ProductGroup,
        raw_quantity,
        destination_count: int
    ) -> dict[int, Optional[int]]:
        """
        Allocate a per-destination quantity across the group's lots.

        Args:
            group: Target product group
            raw_quantity: Operator input (string, number or None)
            destination_count: Number of selected destinations (min 1)

        Returns:
            Dict mapping lot_id to its per-destination quantity (None = blank)
        """
        destination_count = max(destination_count, 1)
        requested = self.clamp(group, raw_quantity, destination_count)

        if requested is None:
            return {slot.lot_id: None for slot in group.suppliers}

        allocation: dict[int, Optional[int]] = {}
        remaining = requested

        for slot in group.suppliers:
            slot_max = slot.available // destination_count
            take = min(remaining, slot_max)
            allocation[slot.lot_id] = take
            remaining -= take

        if remaining > 0:
            logger.debug(
                "Under-allocated %s: requested %d per destination, %d left unassigned",
                group.name, requested, remaining
            )

        return allocation
