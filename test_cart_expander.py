"""Cart expansion."""

import pytest
from pydantic import ValidationError

from cart_expander import expand_cart, to_cart_lines
from models import CartLine, Unit


def test_expand_preserves_line_order():
    units = expand_cart([
        CartLine(name="Kopi", price=18000, qty=2),
        CartLine(name="Roti", price=9000, qty=1),
    ])

    assert units == [Unit("Kopi", 18000), Unit("Kopi", 18000), Unit("Roti", 9000)]


def test_expand_accepts_both_dict_spellings():
    units = expand_cart([
        {"name": "Kopi", "price": 18000, "qty": 1},
        {"name": "Teh", "unit_price": 12000, "quantity": 2},
    ])

    assert [u.price for u in units] == [18000, 12000, 12000]


def test_non_positive_quantity_contributes_nothing(caplog):
    units = expand_cart([
        {"name": "Kopi", "price": 18000, "qty": 0},
        {"name": "Teh", "price": 12000, "qty": -3},
        {"name": "Roti", "price": 9000, "qty": 1},
    ])

    assert units == [Unit("Roti", 9000)]
    assert "non-positive quantity" in caplog.text


def test_empty_cart():
    assert expand_cart([]) == []


def test_negative_price_is_rejected():
    with pytest.raises(ValidationError):
        to_cart_lines([{"name": "Kopi", "price": -1, "qty": 1}])


def test_cart_line_is_immutable():
    line = CartLine(name="Kopi", price=18000, qty=2)
    with pytest.raises(ValidationError):
        line.quantity = 3
    assert line.line_total == 36000
