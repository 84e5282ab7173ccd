"""Admin cost driven group merging."""

from models import Group, Unit
from merger import merge_small_groups, should_merge
from voucher_rules import BRAND_PROFILES, VoucherKind

KOPKEN = BRAND_PROFILES["kopken"]
FORE = BRAND_PROFILES["fore"]
ADMIN_COST = 5000


def make_group(group_id, price, discount, kind=VoucherKind.NO_MINIMUM):
    return Group(
        id=group_id,
        units=[Unit(f"item-{group_id}", price)],
        total=price,
        voucher_kind=kind,
        discount=discount,
    )


def test_should_merge_when_one_fee_beats_two():
    # separate: 5000 - 10000 = -5000, merged: 6000 - 5000 = 1000
    assert should_merge(2000, 3000, 6000, ADMIN_COST)


def test_should_not_merge_when_discount_loss_exceeds_fee():
    assert not should_merge(30000, 4000, 20000, ADMIN_COST)


def test_merges_two_small_groups():
    groups = [make_group(1, 4000, 2000), make_group(2, 6000, 3000)]
    merged = merge_small_groups(groups, FORE, ADMIN_COST)

    assert len(merged) == 1
    assert merged[0].id == 1
    assert merged[0].total == 10000
    assert merged[0].discount == 5000
    assert merged[0].item_names == ["item-1", "item-2"]
    # input untouched
    assert groups[0].total == 4000
    assert len(groups[0].units) == 1


def test_renumbers_after_merge():
    groups = [
        make_group(1, 70000, 35000),
        make_group(2, 4000, 2000),
        make_group(3, 70000, 35000),
    ]
    merged = merge_small_groups(groups, FORE, ADMIN_COST)

    assert [g.id for g in merged] == [1, 2]
    assert [g.total for g in merged] == [74000, 70000]
    assert merged[0].discount == 35000


def test_merge_reclassifies_fused_total():
    groups = [make_group(1, 45000, 22500), make_group(2, 8000, 4000)]
    merged = merge_small_groups(groups, KOPKEN, ADMIN_COST)

    assert len(merged) == 1
    assert merged[0].total == 53000
    assert merged[0].voucher_kind == VoucherKind.MIN_50K
    assert merged[0].discount == 26500


def test_first_small_group_has_nothing_to_merge_into():
    groups = [make_group(1, 4000, 2000), make_group(2, 70000, 35000)]
    merged = merge_small_groups(groups, FORE, ADMIN_COST)

    assert [g.total for g in merged] == [4000, 70000]


def test_empty_and_single_group():
    assert merge_small_groups([], FORE, ADMIN_COST) == []
    single = merge_small_groups([make_group(7, 4000, 2000)], FORE, ADMIN_COST)
    assert [g.id for g in single] == [1]
