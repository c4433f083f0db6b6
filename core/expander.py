"""Task expansion - turns a validated plan into atomic assignment tasks."""

from .exceptions import NothingToProcessError
from .models import AssignmentTask
from .session import PlanningSession


def expand_tasks(session: PlanningSession) -> list[AssignmentTask]:
    """
    Expand destinations x item configs into assignment tasks.

    Pairs whose quantity is 0 or blank are skipped. The sale price is only
    attached to direct-sale tasks.

    Args:
        session: A plan that passed validation

    Returns:
        Tasks ordered by destination, then by lot selection order

    Raises:
        NothingToProcessError: If no pair has a positive quantity
    """
    tasks = []

    for destination in session.destinations:
        for config in session.configs.values():
            quantity = config.resolved_quantity
            if quantity <= 0:
                continue

            tasks.append(AssignmentTask(
                destination_id=destination.destination_id,
                lot_id=config.lot_id,
                quantity=quantity,
                sell_as_whole_unit=config.sell_as_whole_unit,
                sale_price_minor=config.sale_price if config.sell_as_whole_unit else None,
                destination_name=destination.name,
                product_name=config.lot.name,
                supplier_name=config.lot.supplier_name,
            ))

    if not tasks:
        raise NothingToProcessError("Nothing to process: no bar/item pair has a quantity")

    return tasks
