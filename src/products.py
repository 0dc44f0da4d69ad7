"""Product variants sold by the shop.

Every product has a name, a unit price and a stock count, plus two
capabilities that checkout relies on:

* :meth:`Product.is_expired` answers whether the product may still be
  sold on a given reference date.
* :meth:`Product.shipping_weight_grams` returns the per-unit weight; a
  product is shippable exactly when that weight is positive.

The set of variants is closed: :class:`PlainProduct`,
:class:`PerishableProduct` and :class:`ShippableProduct`.  Use the
``create_*`` factories to build them.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Protocol

from exceptions import InsufficientStockError, ValidationError


class YearMonth(Protocol):
    """Anything exposing ``year`` and ``month``: a :class:`ReferenceDate` or a ``datetime.date``."""

    year: int
    month: int


@dataclass(frozen=True, order=True)
class ReferenceDate:
    """The shop's notion of "now" for expiry checks (year/month only)."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValidationError(f"Month must be between 1 and 12, got {self.month}")


class Product:
    """Abstract base for all catalog products."""

    def __init__(self, name: str, price: float, quantity: int) -> None:
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError(f"Quantity must be an integer, got {quantity!r}")
        if not (price > 0) or not math.isfinite(price) or quantity <= 0:
            raise ValidationError("Price and quantity must be positive value")
        self.name = name
        self._price = float(price)
        self._stock = quantity

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, price={self._price}, stock={self._stock})"

    def price(self) -> float:
        return self._price

    @property
    def stock(self) -> int:
        return self._stock

    def reduce_stock(self, amount: int) -> None:
        """Remove ``amount`` units from stock.

        Raises:
            ValidationError: If ``amount`` is not a positive integer.
            InsufficientStockError: If ``amount`` exceeds current stock.
                Stock is left unchanged.
        """
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise ValidationError(f"Stock reduction must be a positive integer, got {amount!r}")
        if amount > self._stock:
            raise InsufficientStockError(self.name, amount, self._stock)
        self._stock -= amount

    def is_expired(self, reference_date: YearMonth) -> bool:
        return False

    def shipping_weight_grams(self) -> float:
        return 0.0

    def is_shippable(self) -> bool:
        return self.shipping_weight_grams() > 0


class PlainProduct(Product):
    """Never expires, never ships (e.g. a scratch card)."""


class PerishableProduct(Product):
    """A product with an expiry date and an optional shipping weight.

    Expiry is checked at month granularity: the product stays sellable
    through the whole of its expiry month, whatever the day.
    """

    def __init__(self, name: str, price: float, quantity: int, expiry_date: date, weight: float = 0.0) -> None:
        if not (weight >= 0) or not math.isfinite(weight):
            raise ValidationError("Weight must be a finite, non-negative number")
        super().__init__(name, price, quantity)
        self.expiry_date = expiry_date
        self._weight = float(weight)

    def is_expired(self, reference_date: YearMonth) -> bool:
        # reference_date only needs .year and .month, so datetime.date works too
        if reference_date.year > self.expiry_date.year:
            return True
        return reference_date.year == self.expiry_date.year and reference_date.month > self.expiry_date.month

    def shipping_weight_grams(self) -> float:
        return self._weight


class ShippableProduct(Product):
    """A non-perishable product that always ships at a fixed weight."""

    def __init__(self, name: str, price: float, quantity: int, weight: float) -> None:
        if not (weight > 0) or not math.isfinite(weight):
            raise ValidationError("Shippable products need a finite, positive weight")
        super().__init__(name, price, quantity)
        self._weight = float(weight)

    def shipping_weight_grams(self) -> float:
        return self._weight


# ---------- factories ----------

def create_plain_product(name: str, price: float, quantity: int) -> PlainProduct:
    return PlainProduct(name, price, quantity)


def create_perishable_product(
    name: str,
    price: float,
    quantity: int,
    year: int,
    month: int,
    day: int = 1,
    weight: float = 0.0,
) -> PerishableProduct:
    """Build a perishable product expiring in ``year``/``month``.

    ``day`` is stored but ignored by expiry checks.  A ``weight`` of 0
    means the product is collected in store rather than shipped.
    """
    try:
        expiry = date(year, month, day)
    except (TypeError, ValueError) as ex:
        raise ValidationError(f"Invalid expiry date: {ex}") from ex
    return PerishableProduct(name, price, quantity, expiry, weight)


def create_shippable_product(name: str, price: float, quantity: int, weight: float) -> ShippableProduct:
    return ShippableProduct(name, price, quantity, weight)
