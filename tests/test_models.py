"""Tests for value parsing and model helpers."""

import pytest
from core.models import (
    BulkReturnResult,
    ItemConfig,
    format_currency,
    parse_quantity,
    profit_margin,
    to_minor_units,
)
from tests.conftest import create_lot, create_record


class TestParseQuantity:

    @pytest.mark.parametrize("raw,expected", [
        ("8", 8),
        ("8.9", 8),
        (" 12 ", 12),
        (5, 5),
        ("-3", 0),
        ("abc", 0),
        ("", None),
        ("   ", None),
        (None, None),
    ])
    def test_parse(self, raw, expected):
        assert parse_quantity(raw) == expected


class TestMoney:

    @pytest.mark.parametrize("raw,expected", [
        ("12.50", 1250),
        ("12.5", 1250),
        ("0.005", 1),
        ("7", 700),
        (3.1, 310),
        ("", None),
        ("abc", None),
        (None, None),
    ])
    def test_to_minor_units(self, raw, expected):
        assert to_minor_units(raw) == expected

    def test_format_currency(self):
        assert format_currency(123450) == "ARS 1,234.50"
        assert format_currency(99, "USD") == "USD 0.99"

    def test_profit_margin(self):
        result = profit_margin(1500, 1000)
        assert result == {"profit": 500, "margin": 50.0, "is_positive": True}

    def test_loss_is_not_positive(self):
        assert profit_margin(800, 1000)["is_positive"] is False

    @pytest.mark.parametrize("price,cost", [(None, 1000), (0, 1000), (1500, 0)])
    def test_no_margin_without_price_and_cost(self, price, cost):
        assert profit_margin(price, cost) is None

    def test_margin_only_for_direct_sale(self):
        config = ItemConfig(lot=create_lot(1, unit_cost=1000), sale_price=2000)
        assert config.margin is None

        config.sell_as_whole_unit = True
        assert config.margin["profit"] == 1000


class TestReturnableRecord:

    def test_available_units_floor(self):
        assert create_record(quantity=1600, item_volume=750).available_units == 2

    def test_unknown_volume_passes_through(self):
        assert create_record(quantity=3, item_volume=0).available_units == 3

    def test_key(self):
        record = create_record(bar_id=4, product_id=7, supplier_id=9, sell_as_whole_unit=True)
        assert record.key == "4-7-9-1"


class TestBulkReturnResult:

    def test_from_response(self):
        result = BulkReturnResult.from_dict({
            "processed": 5,
            "toGlobal": 3,
            "toSupplier": 2,
            "errors": [],
        })

        assert (result.processed, result.to_global, result.to_supplier) == (5, 3, 2)
        assert result.message == "5 items processed successfully"

    def test_missing_fields_default(self):
        result = BulkReturnResult.from_dict({"errors": ["Bar closed"]})

        assert result.processed == 0
        assert result.error_count == 1
        assert result.message == "0 processed, 1 errors"
