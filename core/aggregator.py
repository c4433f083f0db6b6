"""Product grouping - merges lots of the same product across suppliers."""

from collections import defaultdict
from typing import Iterable

from .models import ItemConfig, ProductGroup, SupplierSlot


def aggregate_groups(configs: Iterable[ItemConfig]) -> list[ProductGroup]:
    """
    Collapse item configs into groups keyed by product identity.

    The key is (product_id, name lowercased, brand lowercased, volume), so two
    lots of the same product from different suppliers share a group while
    products that only share a name do not.

    Groups and supplier slots keep the order in which they were first seen.

    Args:
        configs: Item configs for the selected lots

    Returns:
        List of ProductGroup objects
    """
    groups: dict[tuple, ProductGroup] = {}

    for config in configs:
        lot = config.lot
        key = lot.group_key

        group = groups.get(key)
        if group is None:
            group = ProductGroup(
                key=key,
                product_id=lot.product_id,
                name=lot.name,
                brand=lot.brand,
                volume=lot.volume,
            )
            groups[key] = group

        group.add_slot(SupplierSlot(
            name=lot.supplier_name,
            lot_id=lot.lot_id,
            available=lot.available_quantity,
            unit_cost=lot.unit_cost,
            currency=lot.currency,
        ))

    return list(groups.values())


def build_name_index(groups: Iterable[ProductGroup]) -> dict[str, list[tuple]]:
    """
    Map lowercased product name to the keys of every group with that name.

    Used to find groups that are the same product for pricing purposes.
    """
    index: dict[str, list[tuple]] = defaultdict(list)
    for group in groups:
        index[group.name.lower()].append(group.key)
    return dict(index)
