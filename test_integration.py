"""
Integration checks over the whole pipeline.

Runs a set of carts through optimize_order for every brand and checks the
invariants every result must hold: conservation, partition, discount
bounds, final price identity and stable re-classification.
"""

import math
from collections import Counter

import pytest

from cart_expander import expand_cart
from solver import optimize_order
from voucher_rules import BRAND_PROFILES, VOUCHER_SPECS, price_total

CARTS = {
    "tiny": [{"name": "Air Mineral", "price": 5000, "qty": 1}],
    "mixed": [
        {"name": "Kopi Kenangan Mantan", "price": 22000, "qty": 4},
        {"name": "Kopi Susu", "price": 18000, "qty": 5},
        {"name": "Roti Bakar", "price": 9000, "qty": 3},
        {"name": "Cookie", "price": 4000, "qty": 2},
    ],
    "equal_prices": [{"name": "Permen", "price": 1, "qty": 500}],
    "huge_item": [{"name": "Catering", "price": 10_000_000, "qty": 1}],
    "oversized_plus_small": [
        {"name": "Tumbler", "price": 100000, "qty": 1},
        {"name": "Donat", "price": 10000, "qty": 1},
    ],
    "zero_price": [
        {"name": "Gratis", "price": 0, "qty": 2},
        {"name": "Kopi", "price": 18000, "qty": 1},
    ],
    "many_groups": [
        {"name": "Paket Besar", "price": 45000, "qty": 7},
        {"name": "Kopi Susu", "price": 18000, "qty": 9},
        {"name": "Roti", "price": 7000, "qty": 11},
    ],
}


@pytest.fixture(params=sorted(CARTS))
def cart(request):
    return CARTS[request.param]


@pytest.fixture(params=sorted(BRAND_PROFILES))
def profile(request):
    return BRAND_PROFILES[request.param]


def test_conservation_and_partition(cart, profile):
    result = optimize_order(cart, profile, admin_cost=5000)

    assert result.total_bill == sum(line["price"] * line["qty"] for line in cart)
    assert sum(g.total for g in result.groups) == result.total_bill

    placed = Counter(unit for group in result.groups for unit in group.units)
    assert placed == Counter(expand_cart(cart))


def test_discount_bounds(cart, profile):
    result = optimize_order(cart, profile, admin_cost=5000)

    for group in result.groups:
        spec = VOUCHER_SPECS[group.voucher_kind]
        assert group.total == sum(u.price for u in group.units)
        assert 0 <= group.discount <= min(math.floor(group.total * spec.discount_rate), spec.max_discount)
        assert group.discount <= group.total
        if group.total < spec.min_order:
            assert group.discount == 0


def test_final_price_identity(cart, profile):
    result = optimize_order(cart, profile, admin_cost=5000)

    assert result.total_discount == sum(g.discount for g in result.groups)
    assert result.final_price == result.total_bill - result.total_discount + result.total_admin_cost
    assert result.total_admin_cost == result.accounts_needed * 5000
    assert not result.degraded


def test_reclassification_is_stable(cart, profile):
    result = optimize_order(cart, profile, admin_cost=5000)

    for group in result.groups:
        assert price_total(group.total, profile) == (group.voucher_kind, group.discount)


def test_group_ids_are_sequential(cart, profile):
    result = optimize_order(cart, profile, admin_cost=5000)
    assert [g.id for g in result.groups] == list(range(1, len(result.groups) + 1))


def test_results_are_reproducible(cart, profile):
    first = optimize_order(cart, profile, admin_cost=5000)
    second = optimize_order(cart, profile, admin_cost=5000)
    assert first.to_dict() == second.to_dict()
