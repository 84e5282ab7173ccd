"""
Voucher Rules - Classification and Discount Calculation

Holds the constant voucher configuration and the two per-group pricing steps:
1. classify_voucher: which voucher kind a group total should claim
2. calculate_discount: percentage discount, floored, capped per voucher kind

Brands:
- kopken: two voucher kinds (NoMinimum + Min50k), band classification rule
- fore:   NoMinimum only

Configuration:
- VOUCHER_ADMIN_COST: default admin cost per account (env, default 5000)
"""

import logging
import math
import os
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple, Union

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

# Configuration
DEFAULT_ADMIN_COST = int(os.getenv("VOUCHER_ADMIN_COST", "5000"))

BASKET_CEILING = 70000  # Max value of a NoMinimum basket during packing
MIN50K_BAND = (50000, 60000)  # Totals in this band claim the Min50k voucher
WATER_FILL_DIVISOR = 65000  # Upper basket size used to bound the water-fill search


class VoucherKind(str, Enum):
    """Discount voucher a group can claim."""
    NO_MINIMUM = "nomin"
    MIN_50K = "min50k"


class AccountPolicy(str, Enum):
    """How many accounts a set of groups needs."""
    PER_GROUP = "per_group"  # one account per group
    COMBO = "combo"  # one account serves both voucher kinds


class PackingStrategy(str, Enum):
    GREEDY = "greedy"
    WATER_FILL = "water_fill"


@dataclass(frozen=True)
class VoucherSpec:
    """Floor, cap and rate of one voucher kind."""
    min_order: int
    max_discount: int
    discount_rate: float


VOUCHER_SPECS: Dict[VoucherKind, VoucherSpec] = {
    VoucherKind.NO_MINIMUM: VoucherSpec(min_order=0, max_discount=35000, discount_rate=0.5),
    VoucherKind.MIN_50K: VoucherSpec(min_order=50000, max_discount=30000, discount_rate=0.5),
}


@dataclass(frozen=True)
class BrandProfile:
    """
    Voucher family of one brand and the packing parameters that go with it.

    Attributes:
        name: Brand identifier (e.g., "kopken")
        voucher_kinds: Voucher kinds the brand's accounts carry
        strategy: Packing strategy used for this brand
        basket_ceiling: Max basket value during greedy packing
        band: Inclusive (floor, ceiling) of the Min50k band
        water_fill_divisor: Largest basket size considered by water-filling
        account_policy: How accounts_needed is counted
    """
    name: str
    voucher_kinds: Tuple[VoucherKind, ...]
    strategy: PackingStrategy = PackingStrategy.GREEDY
    basket_ceiling: int = BASKET_CEILING
    band: Tuple[int, int] = MIN50K_BAND
    water_fill_divisor: int = WATER_FILL_DIVISOR
    account_policy: AccountPolicy = AccountPolicy.PER_GROUP

    @property
    def is_single_voucher(self) -> bool:
        return len(self.voucher_kinds) == 1


BRAND_PROFILES: Dict[str, BrandProfile] = {
    "kopken": BrandProfile(
        name="kopken",
        voucher_kinds=(VoucherKind.NO_MINIMUM, VoucherKind.MIN_50K),
        strategy=PackingStrategy.WATER_FILL,
    ),
    "fore": BrandProfile(
        name="fore",
        voucher_kinds=(VoucherKind.NO_MINIMUM,),
        strategy=PackingStrategy.GREEDY,
    ),
}


def get_brand_profile(brand: Union[str, BrandProfile]) -> BrandProfile:
    """
    Resolve a brand selector to its profile.

    Args:
        brand: Brand name (case-insensitive) or a BrandProfile

    Returns:
        BrandProfile for the brand

    Raises:
        ValueError: If the brand is unknown
    """
    if isinstance(brand, BrandProfile):
        return brand

    profile = BRAND_PROFILES.get(str(brand).strip().lower())
    if profile is None:
        raise ValueError(
            f"Unknown brand '{brand}'. "
            f"Supported brands: {', '.join(sorted(BRAND_PROFILES))}"
        )
    return profile


def calculate_discount(total: int, kind: VoucherKind) -> int:
    """
    Calculate the discount a voucher grants on a group total.

    Returns 0 below the voucher's minimum order, otherwise
    floor(total * rate) capped at the voucher's max discount.
    """
    spec = VOUCHER_SPECS[kind]

    if total < spec.min_order:
        return 0

    raw_discount = math.floor(total * spec.discount_rate)
    return min(raw_discount, spec.max_discount)


def classify_voucher(total: int, profile: BrandProfile) -> VoucherKind:
    """
    Pick the voucher kind a group total should claim.

    Single-voucher brands always get their only kind. Two-voucher brands use
    the fixed band rule: totals inside the Min50k band claim Min50k, every
    other total claims NoMinimum.
    """
    if profile.is_single_voucher:
        return profile.voucher_kinds[0]

    band_floor, band_ceiling = profile.band
    if band_floor <= total <= band_ceiling and VoucherKind.MIN_50K in profile.voucher_kinds:
        return VoucherKind.MIN_50K

    return VoucherKind.NO_MINIMUM


def price_total(total: int, profile: BrandProfile) -> Tuple[VoucherKind, int]:
    """Classify a total and compute its discount in one step."""
    kind = classify_voucher(total, profile)
    return kind, calculate_discount(total, kind)
