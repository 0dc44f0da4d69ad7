"""Checkout orchestration.

:class:`CheckoutService` walks a cart through a fixed sequence of
states::

    VALIDATING -> PRICING -> PAYING -> FULFILLING -> REPORTING -> DONE

Validation and payment failures jump straight to ``REJECTED``.  Stock is
only reduced after the customer has paid, so a rejected checkout leaves
both the customer's balance and the catalog untouched.

The service never prints.  It returns a :class:`CheckoutResult`; the
:mod:`receipt` module turns results into text.
"""

from __future__ import annotations

import enum
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from cart import Cart
from catalog import Catalog
from config import Settings
from customer import Customer
from exceptions import (
    CheckoutError,
    EmptyCartError,
    ExpiredItemError,
    ForeignCartError,
    InsufficientBalanceError,
    InsufficientStockError,
    StaleStockError,
)
from metrics import (
    CHECKOUT_DURATION_SECONDS,
    CHECKOUT_ERROR_TOTAL,
    CHECKOUT_TOTAL,
    PRODUCT_STOCK,
)
from products import Product, YearMonth
from shipping_service import ShipmentNotice, ShippingService

logger = logging.getLogger(__name__)


class CheckoutState(enum.Enum):
    VALIDATING = "validating"
    PRICING = "pricing"
    PAYING = "paying"
    FULFILLING = "fulfilling"
    REPORTING = "reporting"
    DONE = "done"
    REJECTED = "rejected"


@dataclass(frozen=True)
class ReceiptLine:
    quantity: int
    name: str
    unit_price: float

    @property
    def line_total(self) -> float:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class Receipt:
    customer_name: str
    lines: Tuple[ReceiptLine, ...]
    subtotal: float
    shipping_fee: float
    total_paid: float
    remaining_balance: float
    shipment: Optional[ShipmentNotice] = None


@dataclass(frozen=True)
class PriceQuote:
    """Charges for a cart, computed before any payment is attempted."""
    lines: Tuple[Tuple[Product, int], ...]
    shippable: Tuple[Tuple[Product, int], ...]
    subtotal: float
    total_weight_grams: float
    shipping_fee: float

    @property
    def total(self) -> float:
        return self.subtotal + self.shipping_fee


@dataclass
class CheckoutResult:
    checkout_id: str
    customer_name: str
    state: CheckoutState = CheckoutState.VALIDATING
    trail: List[CheckoutState] = field(default_factory=list)
    receipt: Optional[Receipt] = None
    error: Optional[CheckoutError] = None

    @property
    def ok(self) -> bool:
        return self.state is CheckoutState.DONE

    def enter(self, state: CheckoutState) -> None:
        self.state = state
        self.trail.append(state)


class CheckoutService:
    """Validates, prices, charges and fulfils carts drawn from one catalog.

    Args:
        catalog: The catalog every cart passed to :meth:`checkout` uses.
        shipping_service: Fee calculator; built from ``settings`` when omitted.
        settings: Supplies the default reference date and shipping rate.
    """

    def __init__(
        self,
        catalog: Catalog,
        shipping_service: Optional[ShippingService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.catalog = catalog
        self.settings = settings or Settings()
        self.shipping_service = shipping_service or ShippingService(self.settings.shipping_rate_per_kg)

    def _check_catalog(self, cart: Cart) -> None:
        # cart ids are only meaningful in the catalog they were added from
        if cart.catalog is not self.catalog:
            raise ForeignCartError()

    def _resolve(self, cart: Cart) -> List[Tuple[Product, int]]:
        self._check_catalog(cart)
        return [(self.catalog.get(item.product_id), item.quantity) for item in cart.items()]

    def validate(self, cart: Cart, reference_date: YearMonth) -> None:
        """Raise the first reason ``cart`` cannot be checked out.

        Expiry is checked before stock, in cart order, and only the first
        expired item is reported.

        Raises:
            ForeignCartError: The cart was filled from another catalog.
            EmptyCartError: The cart has no lines.
            ExpiredItemError: A product expired before ``reference_date``.
            StaleStockError: Stock dropped below what the cart asks for.
        """
        self._check_catalog(cart)
        if cart.is_empty():
            raise EmptyCartError()
        lines = self._resolve(cart)
        for product, _qty in lines:
            if product.is_expired(reference_date):
                raise ExpiredItemError(product.name)
        # several lines may name the same product, so compare per product
        requested: Dict[int, int] = {}
        for item in cart.items():
            requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity
        for product_id, qty in requested.items():
            product = self.catalog.get(product_id)
            if qty > product.stock:
                raise StaleStockError(InsufficientStockError(product.name, qty, product.stock))

    def quote(self, cart: Cart) -> PriceQuote:
        """Compute subtotal, shipping weight and fee for ``cart``.

        Raises:
            ForeignCartError: The cart was filled from another catalog.
        """
        lines = self._resolve(cart)
        subtotal = sum(product.price() * qty for product, qty in lines)
        shippable = [(product, qty) for product, qty in lines if product.is_shippable()]
        total_weight = self.shipping_service.total_weight_grams(shippable)
        return PriceQuote(
            lines=tuple(lines),
            shippable=tuple(shippable),
            subtotal=subtotal,
            total_weight_grams=total_weight,
            shipping_fee=self.shipping_service.shipping_fee(total_weight),
        )

    def checkout(self, customer: Customer, cart: Cart, reference_date: Optional[YearMonth] = None) -> CheckoutResult:
        """Run one checkout attempt for ``customer``.

        Args:
            customer: Pays from their balance.
            cart: Lines to buy; must belong to this service's catalog.
            reference_date: Anything with ``year`` and ``month``; the
                configured date is used when omitted.

        Returns:
            A :class:`CheckoutResult` in state ``DONE`` with a receipt,
            or in state ``REJECTED`` with the :class:`CheckoutError`.
        """
        if reference_date is None:
            reference_date = self.settings.reference_date
        result = CheckoutResult(checkout_id=f"CHK-{uuid.uuid4().hex[:12]}", customer_name=customer.name)
        log_ctx = {"request_id": result.checkout_id, "user_id": customer.name}
        start_time = time.perf_counter()
        logger.info("Checkout started", extra={**log_ctx, "extra": {"lines": len(cart)}})
        try:
            result.enter(CheckoutState.VALIDATING)
            self.validate(cart, reference_date)

            result.enter(CheckoutState.PRICING)
            quote = self.quote(cart)

            result.enter(CheckoutState.PAYING)
            if not customer.pay(quote.total):
                raise InsufficientBalanceError(quote.total, customer.balance)

            result.enter(CheckoutState.FULFILLING)
            for product, qty in quote.lines:
                product.reduce_stock(qty)
                PRODUCT_STOCK.set(product.stock, product=product.name)

            result.enter(CheckoutState.REPORTING)
            shipment = None
            if quote.shippable:
                shipment = self.shipping_service.create_notice(quote.shippable)
            result.receipt = Receipt(
                customer_name=customer.name,
                lines=tuple(ReceiptLine(qty, product.name, product.price()) for product, qty in quote.lines),
                subtotal=quote.subtotal,
                shipping_fee=quote.shipping_fee,
                total_paid=quote.total,
                remaining_balance=customer.balance,
                shipment=shipment,
            )
            result.enter(CheckoutState.DONE)
            logger.info(
                "Checkout completed",
                extra={
                    **log_ctx,
                    "extra": {
                        "subtotal": quote.subtotal,
                        "shipping_fee": quote.shipping_fee,
                        "total": quote.total,
                        "remaining_balance": customer.balance,
                    },
                },
            )
        except CheckoutError as ex:
            failed_in = result.state
            result.error = ex
            result.enter(CheckoutState.REJECTED)
            CHECKOUT_ERROR_TOTAL.inc(type=ex.error_type)
            logger.warning(
                "Checkout rejected",
                extra={**log_ctx, "extra": {"reason": str(ex), "type": ex.error_type, "state": failed_in.value}},
            )
        finally:
            CHECKOUT_DURATION_SECONDS.observe(time.perf_counter() - start_time)
        CHECKOUT_TOTAL.inc(outcome="completed" if result.ok else "rejected")
        return result
