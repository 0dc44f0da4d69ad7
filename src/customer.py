"""Customer accounts paying from a prepaid cash balance."""

from __future__ import annotations

import math

from exceptions import ValidationError


class Customer:
    """A named customer whose balance can never go negative."""

    def __init__(self, name: str, balance: float) -> None:
        if not (balance >= 0) or not math.isfinite(balance):
            raise ValidationError("Balance must be a finite, non-negative amount")
        self.name = name
        self._balance = float(balance)

    def __repr__(self) -> str:
        return f"Customer(name={self.name!r}, balance={self._balance})"

    @property
    def balance(self) -> float:
        return self._balance

    def pay(self, amount: float) -> bool:
        """Debit ``amount`` if the balance covers it.

        Returns:
            True if the balance was debited, False if it was left
            unchanged because ``amount`` exceeds it.
        """
        if not (amount >= 0) or not math.isfinite(amount):
            raise ValidationError("Payment amount must be a finite, non-negative amount")
        if amount > self._balance:
            return False
        self._balance -= amount
        return True


def create_customer(name: str, balance: float) -> Customer:
    return Customer(name, balance)
