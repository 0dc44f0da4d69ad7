"""Shipping fee calculation and shipment manifests.

The fee is charged once per checkout for all shippable lines together:
the combined weight is rounded *up* to the next whole kilogram and
multiplied by the per-kilogram rate.  Non-shippable lines never reach
this module.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from exceptions import ValidationError
from metrics import SHIPMENT_WEIGHT_GRAMS
from products import Product

logger = logging.getLogger(__name__)

DEFAULT_RATE_PER_KG = 10.0


@dataclass(frozen=True)
class ShipmentLine:
    quantity: int
    name: str
    weight_grams: float

    @property
    def rounded_weight_grams(self) -> int:
        # half-up, so 0.5 g rounds to 1 g
        return int(math.floor(self.weight_grams + 0.5))


@dataclass(frozen=True)
class ShipmentNotice:
    lines: Tuple[ShipmentLine, ...]
    total_weight_grams: float

    @property
    def total_weight_kg(self) -> float:
        return self.total_weight_grams / 1000.0


class ShippingService:
    """Weighs shippable cart lines and prices their shipment."""

    def __init__(self, rate_per_kg: float = DEFAULT_RATE_PER_KG) -> None:
        if not (rate_per_kg >= 0) or not math.isfinite(rate_per_kg):
            raise ValidationError("Shipping rate must not be negative")
        self.rate_per_kg = float(rate_per_kg)

    @staticmethod
    def line_weight_grams(product: Product, quantity: int) -> float:
        return product.shipping_weight_grams() * quantity

    def total_weight_grams(self, lines: Sequence[Tuple[Product, int]]) -> float:
        return sum(self.line_weight_grams(product, qty) for product, qty in lines)

    def shipping_fee(self, total_weight_grams: float) -> float:
        """Return the fee for a package of ``total_weight_grams``.

        >>> ShippingService(10).shipping_fee(21800)
        220.0
        """
        if total_weight_grams <= 0:
            return 0.0
        return math.ceil(total_weight_grams / 1000.0) * self.rate_per_kg

    def create_notice(self, lines: Sequence[Tuple[Product, int]]) -> ShipmentNotice:
        """Build the manifest for the shippable ``(product, quantity)`` lines.

        Pure apart from logging and the shipment weight metric; stock is
        not touched.

        Raises:
            ValidationError: If ``lines`` is empty or holds a product that
                does not ship.
        """
        if not lines:
            raise ValidationError("A shipment needs at least one shippable line")
        manifest: List[ShipmentLine] = []
        total = 0.0
        for product, qty in lines:
            if not product.is_shippable():
                raise ValidationError(f"{product.name} is not shippable")
            weight = self.line_weight_grams(product, qty)
            manifest.append(ShipmentLine(quantity=qty, name=product.name, weight_grams=weight))
            total += weight
        SHIPMENT_WEIGHT_GRAMS.observe(total)
        logger.info(
            "Shipment created",
            extra={"extra": {"lines": len(manifest), "total_weight_grams": total}},
        )
        return ShipmentNotice(lines=tuple(manifest), total_weight_grams=total)
