"""
Core records for the Voucher Group Optimizer

Records:
- CartLine: one line of the caller's cart (validated, immutable)
- Unit: one physical item, produced by expanding a CartLine
- Group: a set of units that will be ordered on one voucher
"""

from dataclasses import dataclass, field
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from voucher_rules import VoucherKind


class CartLine(BaseModel):
    """Cart line as supplied by the caller (prices in minor currency units)."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    unit_price: int = Field(..., ge=0, alias="price")
    quantity: int = Field(..., alias="qty")

    @property
    def line_total(self) -> int:
        return self.unit_price * max(self.quantity, 0)


@dataclass(frozen=True)
class Unit:
    """One physical item."""
    name: str
    price: int


@dataclass
class Group:
    """
    Units ordered together on one account with one voucher.

    Attributes:
        id: Sequence number in formation order (1-based)
        units: Units in the group, in placement order
        total: Sum of unit prices
        voucher_kind: Voucher the group claims
        discount: Discount the voucher grants on total
    """
    id: int
    units: List[Unit] = field(default_factory=list)
    total: int = 0
    voucher_kind: VoucherKind = VoucherKind.NO_MINIMUM
    discount: int = 0

    @property
    def item_names(self) -> List[str]:
        return [unit.name for unit in self.units]

    def absorb(self, other: "Group", voucher_kind: VoucherKind, discount: int) -> None:
        """Take over another group's units with an already computed voucher/discount."""
        self.units.extend(other.units)
        self.total += other.total
        self.voucher_kind = voucher_kind
        self.discount = discount

    def copy(self) -> "Group":
        return Group(
            id=self.id,
            units=list(self.units),
            total=self.total,
            voucher_kind=self.voucher_kind,
            discount=self.discount,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "items": [{"name": u.name, "price": u.price} for u in self.units],
            "total": self.total,
            "voucher": self.voucher_kind.value,
            "discount": self.discount,
        }
