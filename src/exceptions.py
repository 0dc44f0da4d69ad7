"""Error types raised by the checkout application.

Construction errors (:class:`ValidationError`) propagate to whoever
builds the product or customer.  Checkout errors are caught by
:class:`checkout.CheckoutService` and reported through the returned
:class:`checkout.CheckoutResult`; they never abort other checkouts.
"""

from __future__ import annotations


class RetailError(Exception):
    """Base class for all application errors."""


class ValidationError(RetailError):
    """Invalid input when constructing or mutating a domain object."""


class ConfigurationError(RetailError):
    """An environment setting could not be parsed or is out of range."""


class UnknownProductError(RetailError):
    """No product with the given id exists in the catalog."""

    def __init__(self, product_id: int) -> None:
        super().__init__(f"Product {product_id} not found")
        self.product_id = product_id


class InsufficientStockError(RetailError):
    """More units were requested than the product currently has."""

    def __init__(self, product_name: str, requested: int, available: int) -> None:
        super().__init__(f"Insufficient stock for {product_name}! (requested {requested}, available {available})")
        self.product_name = product_name
        self.requested = requested
        self.available = available


class CheckoutError(RetailError):
    """Base class for errors that abort a checkout attempt."""

    #: Short label used for metrics and logs.
    error_type = "checkout_error"


class EmptyCartError(CheckoutError):
    error_type = "empty_cart"

    def __init__(self) -> None:
        super().__init__("Cart is empty!")


class ExpiredItemError(CheckoutError):
    error_type = "expired_item"

    def __init__(self, product_name: str) -> None:
        super().__init__(f"Item expired: {product_name}")
        self.product_name = product_name


class InsufficientBalanceError(CheckoutError):
    error_type = "insufficient_balance"

    def __init__(self, required: float, available: float) -> None:
        super().__init__("Insufficient balance!")
        self.required = required
        self.available = available


class StaleStockError(CheckoutError):
    """Stock fell below a cart line's quantity between ``add`` and checkout."""

    error_type = "stock_insufficient"

    def __init__(self, cause: InsufficientStockError) -> None:
        super().__init__(str(cause))
        self.product_name = cause.product_name
        self.requested = cause.requested
        self.available = cause.available


class ForeignCartError(CheckoutError):
    """The cart was filled from a different catalog than the checkout's."""

    error_type = "foreign_cart"

    def __init__(self) -> None:
        super().__init__("Cart belongs to a different catalog!")
