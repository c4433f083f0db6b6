"""Sale price synchronization across equivalent product groups."""

from typing import Iterable, Mapping, Optional

from .models import to_minor_units
from .session import PlanningSession


def find_existing_direct_sale_price(recipes: Iterable[dict], product_id: int) -> Optional[int]:
    """
    Find a confirmed direct-sale price for a product.

    A product is already sold directly when a recipe has exactly one
    component, for that product, at 100%, with a positive sale price.

    Args:
        recipes: Recipe dicts with "salePrice" and "components"
        product_id: Product (drink) ID

    Returns:
        Sale price in minor units, or None
    """
    for recipe in recipes:
        components = recipe.get("components") or []
        if (
            len(components) == 1
            and components[0].get("drinkId") == product_id
            and components[0].get("percentage") == 100
            and (recipe.get("salePrice") or 0) > 0
        ):
            return recipe["salePrice"]
    return None


def existing_prices_from_recipes(recipes: Iterable[dict]) -> dict[int, int]:
    """Build a product_id -> confirmed price map from recipes."""
    prices: dict[int, int] = {}
    for recipe in recipes:
        components = recipe.get("components") or []
        if len(components) != 1:
            continue
        product_id = components[0].get("drinkId")
        if product_id is None or product_id in prices:
            continue
        price = find_existing_direct_sale_price([recipe], product_id)
        if price is not None:
            prices[product_id] = price
    return prices


class PriceSynchronizer:
    """
    Keeps direct-sale classification and sale price consistent.

    - Switching a group to direct sale fills its price from the confirmed
      price of the product, else from another direct-sale group with the same
      name and a positive price, else leaves it blank.
    - Editing a price writes it to every config of the group and to every
      direct-sale group with the same name.
    - A group whose product has a confirmed price is locked; edits are ignored.
    """

    def __init__(
        self,
        session: PlanningSession,
        existing_prices: Optional[Mapping[int, int]] = None
    ):
        self.session = session
        self.existing_prices = dict(existing_prices or {})

    def existing_price(self, key: tuple) -> Optional[int]:
        return self.existing_prices.get(self.session.group(key).product_id)

    def is_price_locked(self, key: tuple) -> bool:
        return self.existing_price(key) is not None

    def _sibling_price(self, key: tuple) -> Optional[int]:
        """Price of the first direct-sale same-name group with a positive price."""
        for other in self.session.same_name_groups(key):
            lead = self.session.lead_config(other)
            if lead.sell_as_whole_unit and (lead.sale_price or 0) > 0:
                return lead.sale_price
        return None

    def set_direct_sale(self, key: tuple, enabled: bool):
        """
        Classify a group as direct sale or as a recipe ingredient.

        Args:
            key: Group key
            enabled: True for direct sale, False for ingredient
        """
        if not enabled:
            self.session.update_group(key, sell_as_whole_unit=False, sale_price=None)
            return

        price = self.existing_price(key)
        if price is None:
            price = self._sibling_price(key)

        self.session.update_group(key, sell_as_whole_unit=True, sale_price=price)

    def set_price(self, key: tuple, raw_price) -> bool:
        """
        Set a group's sale price and copy it to same-name direct-sale groups.

        Args:
            key: Group key
            raw_price: Operator input in major units ("12.50"), blank clears

        Returns:
            False if the edit was ignored because the price is locked
        """
        if self.is_price_locked(key):
            return False

        price = to_minor_units(raw_price)
        self.session.update_group(key, sale_price=price)

        for other in self.session.same_name_groups(key):
            if self.is_price_locked(other):
                continue
            if self.session.lead_config(other).sell_as_whole_unit:
                self.session.update_group(other, sale_price=price)

        return True
