"""
Voucher Group Solver - Order Splitting Across Voucher Accounts

This module implements the "Brain" that splits one cart into voucher groups.

Pipeline:
1. Expand cart lines into units (cart_expander)
2. Pack units into baskets (packer)
3. Classify + price each basket as it becomes a group (voucher_rules)
4. Merge groups whose discount doesn't cover the admin cost (merger)
5. Aggregate totals into an OptimizationResult

Cost Formula: Final Price = Total Bill - Total Discount + (Accounts * Admin Cost)
"""

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Union

import pandas as pd

from cart_expander import CartInput, expand_cart, to_cart_lines
from merger import merge_small_groups
from models import Group, Unit
from packer import basket_total, pack_units
from voucher_rules import (
    DEFAULT_ADMIN_COST,
    AccountPolicy,
    BrandProfile,
    VoucherKind,
    get_brand_profile,
    price_total,
)

logger = logging.getLogger(__name__)

BrandInput = Union[str, BrandProfile]


@dataclass
class OptimizationResult:
    """Final result from the solver."""
    groups: List[Group]
    total_bill: int
    total_discount: int
    total_admin_cost: int
    final_price: int
    accounts_needed: int
    degraded: bool = False  # packer loop guard tripped; economics not trustworthy
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "groups": [group.to_dict() for group in self.groups],
            "total_bill": self.total_bill,
            "total_discount": self.total_discount,
            "total_admin_cost": self.total_admin_cost,
            "final_price": self.final_price,
            "accounts_needed": self.accounts_needed,
            "degraded": self.degraded,
            "warnings": list(self.warnings),
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to formatted JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per group, for table rendering."""
        columns = ["group", "items", "item_count", "total", "voucher", "discount"]
        rows = [
            {
                "group": group.id,
                "items": ", ".join(group.item_names),
                "item_count": len(group.units),
                "total": group.total,
                "voucher": group.voucher_kind.value,
                "discount": group.discount,
            }
            for group in self.groups
        ]
        return pd.DataFrame(rows, columns=columns)


@dataclass
class SingleOrderAnalysis:
    """The whole cart priced as one order on one account."""
    total: int
    voucher_kind: VoucherKind
    discount: int


def empty_result() -> OptimizationResult:
    return OptimizationResult(
        groups=[],
        total_bill=0,
        total_discount=0,
        total_admin_cost=0,
        final_price=0,
        accounts_needed=0,
    )


def build_group(group_id: int, units: List[Unit], profile: BrandProfile) -> Group:
    """Create a group from a basket and price it."""
    total = basket_total(units)
    kind, discount = price_total(total, profile)
    return Group(id=group_id, units=list(units), total=total, voucher_kind=kind, discount=discount)


def count_accounts(groups: Sequence[Group], profile: BrandProfile) -> int:
    """
    Accounts needed to serve the groups.

    PER_GROUP: one account per group.
    COMBO: one account carries both vouchers, so the larger per-kind count wins.
    """
    if profile.account_policy == AccountPolicy.COMBO:
        per_kind = Counter(group.voucher_kind for group in groups)
        return max(per_kind.values(), default=0)
    return len(groups)


def aggregate(
    groups: List[Group],
    profile: BrandProfile,
    admin_cost: int,
    degraded: bool = False,
    warnings: Iterable[str] = (),
) -> OptimizationResult:
    """
    Fold final groups into an OptimizationResult.

    Args:
        groups: Final groups
        profile: Brand profile (account policy)
        admin_cost: Admin cost per account
        degraded: Packer loop guard tripped
        warnings: Messages to surface to the caller

    Returns:
        OptimizationResult; all zeros when there are no groups
    """
    if not groups:
        result = empty_result()
        result.degraded = degraded
        result.warnings = list(warnings)
        return result

    total_bill = sum(g.total for g in groups)
    total_discount = sum(g.discount for g in groups)
    accounts_needed = count_accounts(groups, profile)
    total_admin_cost = accounts_needed * admin_cost

    return OptimizationResult(
        groups=groups,
        total_bill=total_bill,
        total_discount=total_discount,
        total_admin_cost=total_admin_cost,
        final_price=total_bill - total_discount + total_admin_cost,
        accounts_needed=accounts_needed,
        degraded=degraded,
        warnings=list(warnings),
    )


def optimize_order(
    items: Iterable[CartInput],
    brand: BrandInput,
    admin_cost: int = DEFAULT_ADMIN_COST,
) -> OptimizationResult:
    """
    Optimize order splitting across multiple accounts/vouchers.

    Args:
        items: Cart lines (CartLine or dicts with name/price/qty)
        brand: Brand name ("kopken", "fore") or BrandProfile
        admin_cost: Cost per account (admin fee), must be positive

    Returns:
        OptimizationResult with groups and totals

    Raises:
        ValueError: If the brand is unknown or admin_cost is not positive
        pydantic.ValidationError: If a cart line is malformed
    """
    profile = get_brand_profile(brand)
    if admin_cost <= 0:
        raise ValueError(f"admin_cost must be positive (got {admin_cost})")

    # Step 1: Flatten items by quantity
    units = expand_cart(items)
    if not units:
        logger.info("Empty cart, nothing to optimize")
        return empty_result()

    logger.info(f"🔍 Optimizing {len(units)} units for {profile.name} (admin cost {admin_cost})")

    # Step 2: Pack units into baskets
    outcome = pack_units(units, profile)

    # Step 3: Classify and price each basket
    groups = [
        build_group(group_id, basket, profile)
        for group_id, basket in enumerate(outcome.baskets, start=1)
    ]
    logger.debug(f"   Packed {len(groups)} groups via {outcome.strategy}")

    # Step 4: Merge groups not worth an account
    groups = merge_small_groups(groups, profile, admin_cost)

    # Step 5: Totals
    result = aggregate(
        groups,
        profile,
        admin_cost,
        degraded=outcome.degraded,
        warnings=outcome.warnings,
    )

    logger.info(
        f"   ✓ {len(result.groups)} groups, {result.accounts_needed} accounts, "
        f"discount {result.total_discount}, final {result.final_price}"
    )
    return result


def analyze_single_order(items: Iterable[CartInput], brand: BrandInput) -> SingleOrderAnalysis:
    """
    Analyze a single order without splitting.

    Useful for comparison with the split plan.
    """
    profile = get_brand_profile(brand)
    total = sum(line.line_total for line in to_cart_lines(items))
    kind, discount = price_total(total, profile)
    return SingleOrderAnalysis(total=total, voucher_kind=kind, discount=discount)


def estimate_savings(
    result: OptimizationResult,
    single: SingleOrderAnalysis,
    admin_cost: int = DEFAULT_ADMIN_COST,
) -> int:
    """How much the split plan saves compared with one order on one account."""
    if single.total == 0:
        return 0
    single_final = single.total - single.discount + admin_cost
    return single_final - result.final_price


# ============================================================================
# UTILITY FUNCTION: Display results in a human-readable format
# ============================================================================

def print_optimization_result(result: OptimizationResult) -> None:
    """Pretty-print the solver result."""
    print("\n" + "=" * 80)
    print("🎟️  VOUCHER GROUPS")
    print("=" * 80)

    if not result.groups:
        print("\nNo items to optimize.")
        print("=" * 80)
        return

    for group in result.groups:
        print(f"\n📦 Group {group.id}: {group.voucher_kind.value}")
        print("-" * 80)
        for unit in group.units:
            print(f"  • {unit.name:40} {unit.price:>12}")
        print(f"  Total: {group.total}   Discount: {group.discount}")

    print(f"\n💵 Total Bill:     {result.total_bill}")
    print(f"🏷️  Total Discount: {result.total_discount}")
    print(f"🧾 Admin Cost:     {result.total_admin_cost} ({result.accounts_needed} accounts)")
    print(f"{'─' * 80}")
    print(f"🎯 FINAL PRICE: {result.final_price}")

    if result.degraded:
        print("\n⚠️  Result is degraded:")
        for warning in result.warnings:
            print(f"  - {warning}")

    print("=" * 80)


if __name__ == "__main__":
    import os

    logging.basicConfig(level=os.getenv("VOUCHER_LOG_LEVEL", "INFO"))

    demo_cart = [
        {"name": "Kopi Kenangan Mantan", "price": 22000, "qty": 3},
        {"name": "Kopi Susu", "price": 18000, "qty": 3},
        {"name": "Roti Bakar", "price": 9000, "qty": 1},
    ]

    demo_result = optimize_order(demo_cart, "kopken")
    print_optimization_result(demo_result)

    single_order = analyze_single_order(demo_cart, "kopken")
    print(f"\nSavings vs single order: {estimate_savings(demo_result, single_order)}")
