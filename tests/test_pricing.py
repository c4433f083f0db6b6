"""Tests for sale price synchronization."""

import pytest
from core.pricing import (
    PriceSynchronizer,
    existing_prices_from_recipes,
    find_existing_direct_sale_price,
)
from tests.conftest import create_lot, create_session


@pytest.fixture
def cola_session():
    """
    Three groups: two Coca Cola sizes (same name, different products) and Sprite.
    The 500ml Coca Cola comes from two suppliers.
    """
    lots = [
        create_lot(1, product_id=1, name="Coca Cola", brand="Coca", volume=500, supplier_name="A"),
        create_lot(2, product_id=1, name="Coca Cola", brand="Coca", volume=500, supplier_name="B"),
        create_lot(3, product_id=2, name="coca cola", brand="Coca", volume=2250, supplier_name="A"),
        create_lot(4, product_id=3, name="Sprite", brand="Coca", volume=500, supplier_name="A"),
    ]
    return create_session(lots, bar_count=2)


def keys(session):
    small, large, sprite = (g.key for g in session.groups)
    return small, large, sprite


class TestDirectSaleToggle:

    def test_no_prior_price_starts_blank(self, cola_session):
        small, _, _ = keys(cola_session)
        pricing = PriceSynchronizer(cola_session)

        pricing.set_direct_sale(small, True)

        for config in cola_session.configs_for_group(small):
            assert config.sell_as_whole_unit is True
            assert config.sale_price is None
        assert not pricing.is_price_locked(small)

    def test_price_applies_to_every_config_in_group(self, cola_session):
        """"12.50" → 1250 minor units on both supplier lots."""
        small, _, _ = keys(cola_session)
        pricing = PriceSynchronizer(cola_session)

        pricing.set_direct_sale(small, True)
        assert pricing.set_price(small, "12.50") is True

        assert [c.sale_price for c in cola_session.configs_for_group(small)] == [1250, 1250]

    def test_existing_price_fills_and_locks(self, cola_session):
        small, _, _ = keys(cola_session)
        pricing = PriceSynchronizer(cola_session, existing_prices={1: 2000})

        pricing.set_direct_sale(small, True)

        assert cola_session.lead_config(small).sale_price == 2000
        assert pricing.is_price_locked(small)
        assert pricing.set_price(small, "5") is False
        assert cola_session.lead_config(small).sale_price == 2000

    def test_sibling_price_used_when_no_existing_price(self, cola_session):
        small, large, _ = keys(cola_session)
        pricing = PriceSynchronizer(cola_session)

        pricing.set_direct_sale(small, True)
        pricing.set_price(small, "15")
        pricing.set_direct_sale(large, True)

        assert cola_session.lead_config(large).sale_price == 1500

    def test_existing_price_wins_over_sibling(self, cola_session):
        small, large, _ = keys(cola_session)
        pricing = PriceSynchronizer(cola_session, existing_prices={2: 3000})

        pricing.set_direct_sale(small, True)
        pricing.set_price(small, "15")
        pricing.set_direct_sale(large, True)

        assert cola_session.lead_config(large).sale_price == 3000

    def test_switching_back_to_ingredient_clears_price(self, cola_session):
        small, _, _ = keys(cola_session)
        pricing = PriceSynchronizer(cola_session)

        pricing.set_direct_sale(small, True)
        pricing.set_price(small, "15")
        pricing.set_direct_sale(small, False)

        config = cola_session.lead_config(small)
        assert config.sell_as_whole_unit is False
        assert config.sale_price is None


class TestCrossGroupSync:

    def test_price_propagates_to_same_name_direct_sale_groups(self, cola_session):
        small, large, sprite = keys(cola_session)
        pricing = PriceSynchronizer(cola_session)
        for key in (small, large, sprite):
            pricing.set_direct_sale(key, True)

        pricing.set_price(small, "10")

        assert cola_session.lead_config(large).sale_price == 1000
        assert cola_session.lead_config(sprite).sale_price is None

    def test_price_skips_same_name_ingredient_groups(self, cola_session):
        small, large, _ = keys(cola_session)
        pricing = PriceSynchronizer(cola_session)
        pricing.set_direct_sale(small, True)

        pricing.set_price(small, "10")

        assert cola_session.lead_config(large).sell_as_whole_unit is False
        assert cola_session.lead_config(large).sale_price is None

    def test_price_skips_locked_siblings(self, cola_session):
        small, large, _ = keys(cola_session)
        pricing = PriceSynchronizer(cola_session, existing_prices={2: 3000})
        pricing.set_direct_sale(small, True)
        pricing.set_direct_sale(large, True)

        pricing.set_price(small, "10")

        assert cola_session.lead_config(large).sale_price == 3000

    def test_blank_price_clears_group(self, cola_session):
        small, _, _ = keys(cola_session)
        pricing = PriceSynchronizer(cola_session)
        pricing.set_direct_sale(small, True)
        pricing.set_price(small, "10")

        pricing.set_price(small, "")

        assert cola_session.lead_config(small).sale_price is None


class TestExistingPriceLookup:

    RECIPES = [
        {"salePrice": 2500, "components": [{"drinkId": 1, "percentage": 100}]},
        {"salePrice": 4000, "components": [
            {"drinkId": 2, "percentage": 50},
            {"drinkId": 3, "percentage": 50},
        ]},
        {"salePrice": 1800, "components": [{"drinkId": 4, "percentage": 60}]},
        {"salePrice": 0, "components": [{"drinkId": 5, "percentage": 100}]},
    ]

    def test_single_component_recipe_at_full_percentage(self):
        assert find_existing_direct_sale_price(self.RECIPES, 1) == 2500

    @pytest.mark.parametrize("product_id", [2, 3, 4, 5, 99])
    def test_no_price_for_mixes_partials_or_zero(self, product_id):
        assert find_existing_direct_sale_price(self.RECIPES, product_id) is None

    def test_price_map_from_recipes(self):
        assert existing_prices_from_recipes(self.RECIPES) == {1: 2500}
