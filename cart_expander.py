"""
Cart Expander

Turns quantity-bearing cart lines into one Unit per physical item:
    CartLine("Kopi Susu", 18000, qty=2) -> [Unit("Kopi Susu", 18000), Unit("Kopi Susu", 18000)]

Lines keep their cart order; lines with a non-positive quantity contribute
nothing (the order parser upstream is expected to catch those).
"""

import logging
from typing import Dict, Iterable, List, Union

from models import CartLine, Unit

logger = logging.getLogger(__name__)

CartInput = Union[CartLine, Dict]


def to_cart_lines(items: Iterable[CartInput]) -> List[CartLine]:
    """
    Normalize caller input to CartLine records.

    Accepts CartLine instances or dicts keyed either name/price/qty or
    name/unit_price/quantity.

    Raises:
        pydantic.ValidationError: If a line is malformed (e.g. negative price)
    """
    return [
        item if isinstance(item, CartLine) else CartLine.model_validate(item)
        for item in items
    ]


def expand_cart(items: Iterable[CartInput]) -> List[Unit]:
    """
    Flatten cart lines by quantity.

    Args:
        items: Cart lines (CartLine or dict)

    Returns:
        One Unit per physical item, in cart order
    """
    units: List[Unit] = []

    for line in to_cart_lines(items):
        if line.quantity <= 0:
            logger.warning(f"Skipping '{line.name}': non-positive quantity ({line.quantity})")
            continue

        units.extend(Unit(name=line.name, price=line.unit_price) for _ in range(line.quantity))

    logger.debug(f"Expanded cart into {len(units)} units")
    return units
