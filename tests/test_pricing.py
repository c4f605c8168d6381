import pytest

from pricing import calc_order_total, format_price, format_usd, totals_match
from conftest import make_item


def test_format_price_rounds_half_up():
    prices = format_price(2.50, 4100, 25000)
    assert prices.usd == "$2.50"
    # 2.50 * 4100 = 10250 -> nearest 100, half up
    assert prices.khr == "10,300៛"
    # 2.50 * 25000 = 62500 -> nearest 1000, half up
    assert prices.vnd == "63,000₫"
    assert prices.combined == "$2.50 / 10,300៛ / 63,000₫"


@pytest.mark.parametrize("amount, expected", [
    (0.01, "0៛"),      # 41 -> 0
    (0.0122, "100៛"),  # 50.02 -> 100
    (1.5, "6,200៛"),   # 6150 is exactly half way -> up
    (1.49, "6,100៛"),  # 6109
    (0, "0៛"),
])
def test_khr_boundaries(amount, expected):
    assert format_price(amount, 4100, 25000).khr == expected


@pytest.mark.parametrize("amount, expected", [
    (0.02, "1,000₫"),   # 500 is exactly half way -> up
    (0.0199, "0₫"),     # 497.5
    (4.0, "100,000₫"),
    (123.45, "3,086,000₫"),  # 3,086,250
])
def test_vnd_boundaries(amount, expected):
    assert format_price(amount, 4100, 25000).vnd == expected


def test_usd_two_decimals():
    assert format_usd(6) == "$6.00"
    assert format_usd(1234.5) == "$1234.50"


def test_order_total_includes_toppings_per_unit():
    items = [make_item(price=2.50, quantity=2, topping_prices=[0.50])]
    assert calc_order_total(items) == 6.00


def test_order_total_sums_lines():
    items = [
        make_item(price=4.0, quantity=1, topping_prices=[0.5, 0.2]),
        make_item(price=1.0, quantity=3),
    ]
    assert calc_order_total(items) == 7.70


def test_totals_match_tolerates_float_noise():
    assert totals_match(0.1 + 0.2, 0.3)
    assert not totals_match(6.0, 6.01)
