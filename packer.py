"""
Voucher Basket Packer

Partitions expanded units into baskets, one basket per voucher group.

Strategies:
- GREEDY (single-voucher brands): descending-price greedy fill under the
  basket ceiling. An empty basket always takes one unit, so oversized units
  still get placed.
- WATER_FILL (two-voucher brands): try an exact water-filling partition where
  every basket clears the Min50k floor; if no basket count works, fall back
  to a band-matching loop that carves Min50k-band baskets off the remaining
  units, guarded by a pass cap and a forced-progress valve.

Baskets are plain lists of units. Voucher classification happens afterwards,
per basket, in the solver.
"""

import heapq
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from models import Unit
from voucher_rules import BrandProfile, PackingStrategy

logger = logging.getLogger(__name__)


@dataclass
class PackingOutcome:
    """
    Result of packing a list of units.

    Attributes:
        baskets: Unit lists in formation order
        strategy: Which procedure produced the baskets
        degraded: True if the band-matching pass cap tripped
        warnings: Human-readable notes for the caller
    """
    baskets: List[List[Unit]]
    strategy: str
    degraded: bool = False
    warnings: List[str] = field(default_factory=list)


def sort_units(units: List[Unit]) -> List[Unit]:
    """Descending by price; equal prices keep their original order."""
    return sorted(units, key=lambda u: -u.price)


def basket_total(basket: List[Unit]) -> int:
    return sum(unit.price for unit in basket)


# ============================================================================
# STRATEGY A: GREEDY WITH CEILING
# ============================================================================

def greedy_pack(units: List[Unit], ceiling: int) -> List[List[Unit]]:
    """
    Greedy bin packing under a basket ceiling.

    Each pass opens a basket and takes every remaining unit (highest price
    first) that keeps the basket at or below the ceiling. Units not taken
    form the working list of the next pass.

    Args:
        units: Units to place
        ceiling: Max basket total (an empty basket ignores it)

    Returns:
        Baskets in formation order
    """
    remaining = sort_units(units)
    baskets: List[List[Unit]] = []

    while remaining:
        basket: List[Unit] = []
        leftover: List[Unit] = []
        total = 0

        for unit in remaining:
            if not basket or total + unit.price <= ceiling:
                basket.append(unit)
                total += unit.price
            else:
                leftover.append(unit)

        baskets.append(basket)
        remaining = leftover

    return baskets


def greedy_fill(units: List[Unit], ceiling: int) -> Tuple[List[Unit], List[Unit]]:
    """
    One greedy pass without the empty-basket exemption.

    Returns:
        (taken, leftover); taken is empty when every unit exceeds the ceiling
    """
    taken: List[Unit] = []
    leftover: List[Unit] = []
    total = 0

    for unit in units:
        if total + unit.price <= ceiling:
            taken.append(unit)
            total += unit.price
        else:
            leftover.append(unit)

    return taken, leftover


# ============================================================================
# STRATEGY B: WATER-FILLING, THEN BAND MATCHING
# ============================================================================

def water_fill(units: List[Unit], profile: BrandProfile) -> Optional[List[List[Unit]]]:
    """
    Try to split all units into k baskets that each clear the band floor.

    Candidate counts run from floor(total / band_floor) down to
    ceil(total / water_fill_divisor). For each k, units (highest price first)
    go to whichever basket currently has the smallest total. The first k
    where every basket reaches the band floor wins.

    Returns:
        Baskets for the winning k, or None if no k works
    """
    band_floor, _ = profile.band
    ordered = sort_units(units)
    total = basket_total(ordered)

    k_max = min(total // band_floor, len(ordered))
    k_min = max(math.ceil(total / profile.water_fill_divisor), 1)

    for k in range(k_max, k_min - 1, -1):
        baskets: List[List[Unit]] = [[] for _ in range(k)]
        # (total, index) so ties go to the lowest basket index
        heap = [(0, i) for i in range(k)]

        for unit in ordered:
            current, index = heapq.heappop(heap)
            baskets[index].append(unit)
            heapq.heappush(heap, (current + unit.price, index))

        if all(current >= band_floor for current, _ in heap):
            logger.debug(f"Water-filling succeeded with {k} baskets")
            return baskets

    logger.debug(f"Water-filling found no basket count in [{k_min}, {k_max}]")
    return None


def band_match_pack(
    units: List[Unit],
    profile: BrandProfile,
    max_passes: Optional[int] = None,
) -> PackingOutcome:
    """
    Sequential band matching with an explicit progress guard.

    Each pass:
    1. If everything left fits one basket (<= basket ceiling), close it and stop
    2. Greedy-fill under the band ceiling; keep it if it lands in the band
    3. Otherwise greedy-fill under the basket ceiling
    4. If nothing was taken, force the next unit into a basket of its own

    Args:
        units: Units to place
        profile: Brand profile (band, ceiling)
        max_passes: Pass cap; defaults to the number of units

    Returns:
        PackingOutcome, degraded if the cap tripped (remaining units are
        then dumped into one final basket)
    """
    band_floor, band_ceiling = profile.band
    remaining = sort_units(units)
    cap = len(remaining) if max_passes is None else max_passes

    outcome = PackingOutcome(baskets=[], strategy="band_match")
    passes = 0

    while remaining:
        if passes >= cap:
            message = (
                f"Packing pass cap ({cap}) reached with {len(remaining)} unit(s) "
                f"left; placed them in one final group"
            )
            logger.warning(f"✗ {message}")
            outcome.baskets.append(remaining)
            outcome.degraded = True
            outcome.warnings.append(message)
            break

        passes += 1

        if basket_total(remaining) <= profile.basket_ceiling:
            outcome.baskets.append(remaining)
            break

        basket, leftover = greedy_fill(remaining, band_ceiling)
        if not band_floor <= basket_total(basket) <= band_ceiling:
            basket, leftover = greedy_fill(remaining, profile.basket_ceiling)

        if not basket:
            logger.warning(
                f"No basket fits '{remaining[0].name}' ({remaining[0].price}); "
                f"placing it alone"
            )
            basket, leftover = remaining[:1], remaining[1:]

        outcome.baskets.append(basket)
        remaining = leftover

    return outcome


# ============================================================================
# ENTRY POINT
# ============================================================================

def pack_units(units: List[Unit], profile: BrandProfile) -> PackingOutcome:
    """
    Pack units with the strategy configured on the brand profile.

    Args:
        units: Expanded units (non-empty)
        profile: Brand profile

    Returns:
        PackingOutcome with every unit in exactly one basket
    """
    if profile.strategy == PackingStrategy.GREEDY:
        baskets = greedy_pack(units, profile.basket_ceiling)
        return PackingOutcome(baskets=baskets, strategy="greedy")

    baskets = water_fill(units, profile)
    if baskets is not None:
        return PackingOutcome(baskets=baskets, strategy="water_fill")

    logger.info("Water-filling failed, falling back to band matching")
    return band_match_pack(units, profile)
