"""In-memory product catalog.

The catalog owns every :class:`products.Product`.  Carts refer to
products by the integer id handed out by :meth:`Catalog.add_product`,
never by holding a copy, so stock changes made during one checkout are
visible to every other cart on the same catalog.
"""

from __future__ import annotations

import logging
from typing import Dict

from exceptions import UnknownProductError
from products import (
    Product,
    create_perishable_product,
    create_plain_product,
    create_shippable_product,
)

logger = logging.getLogger(__name__)


class Catalog:
    def __init__(self) -> None:
        self._products: Dict[int, Product] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._products)

    def __contains__(self, product_id: object) -> bool:
        return product_id in self._products

    def add_product(self, product: Product) -> int:
        """Register ``product`` and return its id.  Ids start at 1 and are never reused."""
        product_id = self._next_id
        self._next_id += 1
        self._products[product_id] = product
        logger.debug(
            "Product added to catalog",
            extra={"extra": {"product_id": product_id, "product": product.name, "stock": product.stock}},
        )
        return product_id

    # The add_* helpers only register the product once construction succeeded,
    # so a ValidationError never leaves a half-built entry behind.

    def add_plain(self, name: str, price: float, quantity: int) -> int:
        return self.add_product(create_plain_product(name, price, quantity))

    def add_perishable(
        self,
        name: str,
        price: float,
        quantity: int,
        year: int,
        month: int,
        day: int = 1,
        weight: float = 0.0,
    ) -> int:
        return self.add_product(create_perishable_product(name, price, quantity, year, month, day, weight))

    def add_shippable(self, name: str, price: float, quantity: int, weight: float) -> int:
        return self.add_product(create_shippable_product(name, price, quantity, weight))

    def get(self, product_id: int) -> Product:
        """Return the product with ``product_id``.

        Raises:
            UnknownProductError: If no such product was added.
        """
        try:
            return self._products[product_id]
        except KeyError:
            raise UnknownProductError(product_id) from None

    def stock_levels(self) -> Dict[str, int]:
        """Map product name to current stock, in catalog order."""
        return {p.name: p.stock for p in self._products.values()}
