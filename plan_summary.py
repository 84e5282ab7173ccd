"""
Plan Summary - Hand solver results to the account assignment step

Turns an OptimizationResult into a structured voucher plan: which groups
need which voucher, how many accounts of each kind must be pulled from
inventory, and a short plain-text summary for the operator.
"""

from dataclasses import dataclass
from typing import Dict, List

from solver import OptimizationResult
from voucher_rules import VoucherKind


@dataclass
class VoucherPlan:
    """A voucher plan with structured data."""
    summary: str  # Human-readable plan
    groups_by_voucher: Dict[str, List[int]]  # {voucher: [group ids]}
    accounts_by_voucher: Dict[str, int]  # {voucher: accounts to pull}
    items_by_group: Dict[int, List[str]]  # {group id: [item names]}
    final_price: int
    degraded: bool


def voucher_requirements(result: OptimizationResult) -> Dict[VoucherKind, int]:
    """Number of groups claiming each voucher kind (kinds with no group are omitted)."""
    requirements: Dict[VoucherKind, int] = {}
    for group in result.groups:
        requirements[group.voucher_kind] = requirements.get(group.voucher_kind, 0) + 1
    return requirements


def extract_voucher_plan(result: OptimizationResult) -> VoucherPlan:
    """
    Extract structured voucher plan from solver results.

    Args:
        result: OptimizationResult from optimize_order()

    Returns:
        VoucherPlan with organized data
    """
    groups_by_voucher: Dict[str, List[int]] = {}
    items_by_group: Dict[int, List[str]] = {}

    for group in result.groups:
        groups_by_voucher.setdefault(group.voucher_kind.value, []).append(group.id)
        items_by_group[group.id] = group.item_names

    accounts_by_voucher = {
        kind.value: count for kind, count in voucher_requirements(result).items()
    }

    return VoucherPlan(
        summary=format_plan_text(result),
        groups_by_voucher=groups_by_voucher,
        accounts_by_voucher=accounts_by_voucher,
        items_by_group=items_by_group,
        final_price=result.final_price,
        degraded=result.degraded,
    )


def format_plan_text(result: OptimizationResult) -> str:
    """Plain-text summary of a plan, one line per group."""
    if not result.groups:
        return "No items to order."

    lines = [
        f"Split into {len(result.groups)} order(s) on {result.accounts_needed} account(s)."
    ]
    for group in result.groups:
        lines.append(
            f"Order {group.id} ({group.voucher_kind.value}): "
            f"{len(group.units)} item(s), total {group.total}, discount {group.discount}"
        )
    lines.append(
        f"Bill {result.total_bill} - discount {result.total_discount} "
        f"+ admin {result.total_admin_cost} = {result.final_price}"
    )
    if result.degraded:
        lines.append("Warning: packing hit its safety limit, double-check this split.")

    return "\n".join(lines)
