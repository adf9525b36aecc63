import json

import pytest

from pharmasys.services.unit_conversion import (
    apply_conversion_prices, derive_unit_price, parse_unit_conversions,
    profit_percentage, round_price, sell_price_from_margin, to_base_quantity,
    validate_unit_conversions,
)


class _Unit:
    def __init__(self, id, name):
        self.id = id
        self.name = name


def test_derive_unit_price_divides_by_rate():
    assert derive_unit_price(65000, 10) == 6500
    assert derive_unit_price(10000, 3) == 3333


def test_derive_unit_price_rounds_half_up():
    assert derive_unit_price(25, 10) == 3
    assert round_price(2.5) == 3
    assert round_price(3.5) == 4


def test_derive_unit_price_guards_zero_rate():
    assert derive_unit_price(10000, 0) == 0
    assert derive_unit_price(10000, -5) == 0
    assert derive_unit_price(10000, None) == 0


def test_apply_conversion_prices_uses_item_prices():
    conversions = [
        {"unit_name": "Strip", "to_unit_id": 2, "conversion_rate": 10, "base_price": 1, "sell_price": 1},
        {"unit_name": "Tablet", "to_unit_id": 3, "conversion_rate": 100, "base_price": 0, "sell_price": 0},
    ]
    result = apply_conversion_prices(50000, 65000, conversions)

    assert [(c["base_price"], c["sell_price"]) for c in result] == [(5000, 6500), (500, 650)]
    # Input records are left alone
    assert conversions[0]["base_price"] == 1


def test_parse_accepts_json_string_and_legacy_keys():
    raw = json.dumps([{"unit_name": "Strip", "conversion": 10, "basePrice": 5000, "sellPrice": 6500}])
    parsed = parse_unit_conversions(raw, units=[_Unit(7, "Strip")])

    assert parsed == [{
        "unit_name": "Strip", "to_unit_id": 7, "conversion_rate": 10.0,
        "base_price": 5000.0, "sell_price": 6500.0,
    }]


def test_parse_bad_input_yields_empty_list():
    assert parse_unit_conversions(None) == []
    assert parse_unit_conversions("") == []
    assert parse_unit_conversions("{not json") == []
    assert parse_unit_conversions({"unit_name": "Strip"}) == []


def test_parse_keeps_unknown_unit_without_id():
    parsed = parse_unit_conversions([{"unit_name": "Sachet", "to_unit_id": "", "conversion_rate": 5}])
    assert parsed[0]["to_unit_id"] is None
    assert parsed[0]["unit_name"] == "Sachet"


@pytest.mark.parametrize("conversions, message", [
    ([{"unit_name": "", "conversion_rate": 10}], "name is required"),
    ([{"unit_name": "Strip", "conversion_rate": 0}], "greater than zero"),
    ([{"unit_name": "Box", "conversion_rate": 2}], "already the base unit"),
    ([{"unit_name": "Strip", "conversion_rate": 10}, {"unit_name": "Strip", "conversion_rate": 5}], "Duplicate"),
])
def test_validate_rejects_broken_conversions(conversions, message):
    with pytest.raises(ValueError, match=message):
        validate_unit_conversions(conversions, base_unit="Box")


def test_to_base_quantity():
    conversions = [{"unit_name": "Strip", "conversion_rate": 10}]

    assert to_base_quantity(5, "Box", "Box", conversions) == 5
    assert to_base_quantity(5, None, "Box", conversions) == 5
    assert to_base_quantity(30, "Strip", "Box", conversions) == 3
    # Units without a conversion are taken one-for-one
    assert to_base_quantity(4, "Sachet", "Box", conversions) == 4


def test_profit_percentage():
    assert profit_percentage(50000, 65000) == pytest.approx(30.0)
    assert profit_percentage(0, 65000) is None
    assert profit_percentage(50000, -1) is None


def test_sell_price_from_margin():
    assert sell_price_from_margin(50000, 30) == 65000
    assert sell_price_from_margin(999, 10) == 1099
