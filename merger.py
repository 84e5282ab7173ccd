"""
Group Merger - Admin Cost Correction

Every group costs one admin fee. A group whose discount does not cover that
fee is fused into the previously accepted group when one fee on the fused
total nets at least as much as two fees on the separate totals.

Single lookback only: a fused group is not re-examined against later groups.
"""

import logging
from typing import List

from models import Group
from voucher_rules import BrandProfile, price_total

logger = logging.getLogger(__name__)


def should_merge(
    discount_a: int,
    discount_b: int,
    merged_discount: int,
    admin_cost: int,
) -> bool:
    """One combined admin fee beats two separate ones, net of lost discount."""
    separate_net = (discount_a + discount_b) - 2 * admin_cost
    merged_net = merged_discount - admin_cost
    return merged_net >= separate_net


def merge_small_groups(
    groups: List[Group],
    profile: BrandProfile,
    admin_cost: int,
) -> List[Group]:
    """
    Merge groups where the savings don't justify the account cost.

    Args:
        groups: Groups in formation order (not modified)
        profile: Brand profile used to re-classify fused totals
        admin_cost: Admin cost per group

    Returns:
        New list of groups, renumbered 1..n
    """
    result: List[Group] = []

    for group in groups:
        if group.discount < admin_cost and result:
            last = result[-1]
            merged_total = last.total + group.total
            merged_kind, merged_discount = price_total(merged_total, profile)

            if should_merge(last.discount, group.discount, merged_discount, admin_cost):
                logger.debug(
                    f"Merging group {group.id} ({group.total}) into group {last.id} "
                    f"({last.total}) -> {merged_total}, {merged_kind.value}"
                )
                last.absorb(group, merged_kind, merged_discount)
                continue

        result.append(group.copy())

    for index, group in enumerate(result, start=1):
        group.id = index

    if len(result) < len(groups):
        logger.info(f"✓ Merged {len(groups)} groups into {len(result)}")

    return result
