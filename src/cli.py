"""
Command-line demo for the checkout application.

Builds a small catalog and replays five customers' checkouts against
it: a mixed cart with shipping, an empty cart, a customer who cannot
afford their cart, an expired product, and a cart whose TV line is
rejected because the first customer bought the remaining stock.

Run with::

    python cli.py --year 2025 --month 7

Logs go to ``logs/checkout.log`` as JSON (see :mod:`logging_config`).
"""

import argparse
import logging
import sys
from dataclasses import replace
from typing import Dict, List, Optional, TextIO, Tuple

import logging_config
from cart import Cart
from catalog import Catalog
from checkout import CheckoutResult, CheckoutService
from config import Settings
from customer import create_customer
from exceptions import ConfigurationError, ValidationError
from metrics import generate_metrics_text
from products import ReferenceDate
from receipt import ReceiptPrinter

logger = logging.getLogger(__name__)


def build_demo_catalog(err: TextIO = sys.stderr) -> Tuple[Catalog, Dict[str, int]]:
    """Populate a fresh catalog; returns ``(catalog, name -> id)``."""
    catalog = Catalog()
    ids: Dict[str, int] = {}
    try:
        ids["Cheese"] = catalog.add_perishable("Cheese", 100, 10, 2025, 7, 10, weight=400)
        ids["Biscuits"] = catalog.add_perishable("Biscuits", 150, 5, 2026, 1, 1)
        ids["TV"] = catalog.add_shippable("TV", 600, 3, 7000)
        ids["ScratchCard"] = catalog.add_plain("ScratchCard", 50, 20)
        # zero price: rejected, never reaches the catalog
        ids["Apples"] = catalog.add_plain("Apples", 0, 10)
    except ValidationError as ex:
        err.write(f"{ex}\n")
    ids["Ships"] = catalog.add_perishable("Ships", 20, 5, 2025, 1, 1)
    return catalog, ids


def run_demo(service: CheckoutService, ids: Dict[str, int], printer: ReceiptPrinter) -> List[CheckoutResult]:
    """Run the demo scenarios in order and print each result."""
    scenarios = [
        ("Ahmed", 5000, [("Cheese", 2), ("TV", 3), ("ScratchCard", 1)]),
        ("Mohamed", 10000, []),
        ("Yasser", 100, [("Biscuits", 2)]),
        ("Anas", 10000, [("Ships", 5)]),
        ("Yassen", 10000, [("ScratchCard", 1), ("TV", 1)]),
    ]
    results = []
    for name, balance, wanted in scenarios:
        customer = create_customer(name, balance)
        cart = Cart(service.catalog)
        for product_name, qty in wanted:
            added, message = cart.add(ids[product_name], qty)
            if not added:
                printer.write(message)
        result = service.checkout(customer, cart)
        printer.print_result(result)
        printer.print_separator()
        results.append(result)
    return results


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Replay the checkout demo scenarios.")
    parser.add_argument("--year", type=int, help="reference year for expiry checks")
    parser.add_argument("--month", type=int, help="reference month for expiry checks (1-12)")
    parser.add_argument("--log-dir", help="directory for checkout.log")
    parser.add_argument("--metrics", action="store_true", help="print Prometheus metrics after the demo")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None, out: Optional[TextIO] = None) -> int:
    args = parse_args(argv)
    try:
        settings = Settings.from_env()
        if args.year is not None or args.month is not None:
            current = settings.reference_date
            settings = replace(
                settings,
                reference_date=ReferenceDate(
                    args.year if args.year is not None else current.year,
                    args.month if args.month is not None else current.month,
                ),
            )
        if args.log_dir:
            settings = replace(settings, log_dir=args.log_dir)
    except (ConfigurationError, ValidationError) as ex:
        print(f"Configuration error: {ex}", file=sys.stderr)
        return 2

    logging_config.configure_logging(settings.log_dir, settings.log_level)
    catalog, ids = build_demo_catalog()
    service = CheckoutService(catalog, settings=settings)
    printer = ReceiptPrinter(out)
    results = run_demo(service, ids, printer)
    logger.info(
        "Demo finished",
        extra={"extra": {"completed": sum(r.ok for r in results), "rejected": sum(not r.ok for r in results)}},
    )
    if args.metrics:
        printer.write(generate_metrics_text().decode("utf-8"))
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user. Exiting.")
        sys.exit(0)
