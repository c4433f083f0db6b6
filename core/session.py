"""Planning session - owns selection, item configs and groups for one plan."""

from typing import Iterable, Optional

from .aggregator import aggregate_groups, build_name_index
from .distributor import QuantityDistributor
from .models import Destination, InventoryLot, ItemConfig, ProductGroup


class PlanningSession:
    """
    State of one assignment plan, from lot selection to dispatch.

    The session is created when the operator opens the flow and dropped on
    close or after a successful run; nothing in it is persisted. Every
    mutation goes through a method so each step can be tested on its own.
    """

    def __init__(
        self,
        lots: Iterable[InventoryLot],
        destinations: Optional[Iterable[Destination]] = None,
        distributor: Optional[QuantityDistributor] = None
    ):
        self.lots: dict[int, InventoryLot] = {lot.lot_id: lot for lot in lots}
        self.destinations: list[Destination] = list(destinations or [])
        self.distributor = distributor or QuantityDistributor()

        # dict keeps selection order
        self._selected: dict[int, None] = {}
        self.configs: dict[int, ItemConfig] = {}
        self._groups: list[ProductGroup] = []
        self._groups_by_key: dict[tuple, ProductGroup] = {}
        self._name_index: dict[str, list[tuple]] = {}

    # Destinations

    @property
    def destination_count(self) -> int:
        return max(len(self.destinations), 1)

    def set_destinations(self, destinations: Iterable[Destination]):
        self.destinations = list(destinations)

    def destination_name(self, destination_id: int) -> str:
        for destination in self.destinations:
            if destination.destination_id == destination_id:
                return destination.name
        return str(destination_id)

    # Selection

    @property
    def selected_ids(self) -> list[int]:
        return list(self._selected)

    def is_selected(self, lot_id: int) -> bool:
        return lot_id in self._selected

    def toggle_lot(self, lot_id: int):
        """Select an unselected lot or deselect a selected one."""
        if lot_id in self._selected:
            del self._selected[lot_id]
        elif lot_id in self.lots:
            self._selected[lot_id] = None

    def select_all(self, lot_ids: Iterable[int]):
        """Add every known lot in lot_ids to the selection."""
        for lot_id in lot_ids:
            if lot_id in self.lots:
                self._selected.setdefault(lot_id, None)

    def deselect_all(self):
        self._selected.clear()

    # Configs and groups

    def initialize_configs(self):
        """
        Build a blank config for every selected lot and regroup.

        Quantity and price start blank; every lot starts as an ingredient.
        """
        self.configs = {
            lot_id: ItemConfig(lot=self.lots[lot_id])
            for lot_id in self._selected
        }
        self._rebuild_groups()

    def _rebuild_groups(self):
        self._groups = aggregate_groups(self.configs.values())
        self._groups_by_key = {group.key: group for group in self._groups}
        self._name_index = build_name_index(self._groups)

    @property
    def groups(self) -> list[ProductGroup]:
        return list(self._groups)

    def group(self, key: tuple) -> ProductGroup:
        return self._groups_by_key[key]

    def group_for_lot(self, lot_id: int) -> ProductGroup:
        return self._groups_by_key[self.lots[lot_id].group_key]

    def configs_for_group(self, key: tuple) -> list[ItemConfig]:
        return [self.configs[lot_id] for lot_id in self.group(key).lot_ids]

    def lead_config(self, key: tuple) -> ItemConfig:
        """First config of a group; grouped configs share classification and price."""
        return self.configs_for_group(key)[0]

    def same_name_groups(self, key: tuple) -> list[tuple]:
        """Keys of the other groups whose product name matches case-insensitively."""
        name = self.group(key).name.lower()
        return [k for k in self._name_index.get(name, []) if k != key]

    def update_group(self, key: tuple, **fields):
        """Write the same field values to every config of a group."""
        for config in self.configs_for_group(key):
            for name, value in fields.items():
                setattr(config, name, value)

    # Quantities

    def set_group_quantity(self, key: tuple, raw_quantity):
        """Distribute an operator-entered per-destination quantity over the group."""
        allocation = self.distributor.distribute(
            self.group(key), raw_quantity, self.destination_count
        )
        for lot_id, quantity in allocation.items():
            self.configs[lot_id].quantity = quantity

    def group_quantity(self, key: tuple) -> Optional[int]:
        """Per-destination quantity of a group, None when every lot is blank."""
        quantities = [c.quantity for c in self.configs_for_group(key)]
        if all(q is None for q in quantities):
            return None
        return sum(q or 0 for q in quantities)

    def group_max_per_destination(self, key: tuple) -> int:
        return self.group(key).max_per_destination(self.destination_count)

    def reset(self):
        """Drop all planning state (dialog closed)."""
        self._selected.clear()
        self.configs = {}
        self._rebuild_groups()
