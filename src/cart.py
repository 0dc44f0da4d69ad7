"""Shopping cart holding catalog product ids and requested quantities."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Tuple

from catalog import Catalog
from exceptions import InsufficientStockError, UnknownProductError
from metrics import CART_ADD_REJECTED_TOTAL

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartItem:
    """A cart line.  ``quantity`` is what the customer asked for, not stock."""
    product_id: int
    quantity: int


@dataclass(frozen=True)
class RejectedAdd:
    product_id: int
    quantity: int
    reason: str


class Cart:
    """An ordered list of :class:`CartItem` for a single checkout attempt.

    Adding the same product twice produces two lines.  Stock is checked
    against what the product has *now*; nothing is reserved, so the
    check can go stale before checkout.
    """

    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self._items: List[CartItem] = []
        self.rejections: List[RejectedAdd] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[CartItem]:
        return iter(self.items())

    def is_empty(self) -> bool:
        return not self._items

    def items(self) -> Tuple[CartItem, ...]:
        return tuple(self._items)

    def add(self, product_id: int, quantity: int) -> Tuple[bool, str]:
        """Add ``quantity`` units of a catalog product.

        A rejected request adds nothing, is logged at WARNING and is kept
        in :attr:`rejections`.

        Returns:
            Tuple of (added, message).
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            return self._reject(product_id, quantity, "invalid_quantity", "Quantity must be positive.")
        try:
            product = self.catalog.get(product_id)
        except UnknownProductError as ex:
            return self._reject(product_id, quantity, "unknown_product", str(ex))
        if quantity > product.stock:
            shortage = InsufficientStockError(product.name, quantity, product.stock)
            return self._reject(product_id, quantity, "stock_insufficient", str(shortage))

        self._items.append(CartItem(product_id=product_id, quantity=quantity))
        return True, f"Added {quantity} x {product.name} to cart"

    def _reject(self, product_id: int, quantity: int, reason: str, message: str) -> Tuple[bool, str]:
        self.rejections.append(RejectedAdd(product_id, quantity, message))
        CART_ADD_REJECTED_TOTAL.inc(reason=reason)
        logger.warning(
            "Cart add rejected",
            extra={"extra": {"product_id": product_id, "quantity": quantity, "reason": message}},
        )
        return False, message
