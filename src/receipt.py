"""Text rendering of checkout results.

Formats follow the shop's printed slips: an optional shipment notice
followed by the receipt, or a one-line rejection message.
"""

from __future__ import annotations

import sys
from typing import List, Optional, TextIO

from checkout import CheckoutResult, Receipt
from shipping_service import ShipmentNotice

RULE = "----------------------"
SEPARATOR = "=" * 50


def format_amount(value: float) -> str:
    """Drop a trailing ``.0`` so whole amounts print as ``2220``."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"


def render_shipment_notice(notice: ShipmentNotice) -> str:
    lines: List[str] = ["** Shipment Notice **"]
    for line in notice.lines:
        lines.append(f"{line.quantity}x {line.name}    {line.rounded_weight_grams}g")
    lines.append(f"Total package weight: {notice.total_weight_kg:.1f}kg")
    return "\n".join(lines)


def render_receipt(receipt: Receipt) -> str:
    lines: List[str] = ["** Checkout Receipt **"]
    for line in receipt.lines:
        lines.append(f"{line.quantity}x {line.name}    {format_amount(line.line_total)}")
    lines.append(RULE)
    lines.append(f"Subtotal:     {format_amount(receipt.subtotal)}")
    lines.append(f"Shipping:     {format_amount(receipt.shipping_fee)}")
    lines.append(f"Total Paid:   {format_amount(receipt.total_paid)}")
    lines.append(f"Remaining Balance: {format_amount(receipt.remaining_balance)}")
    return "\n".join(lines)


def render_result(result: CheckoutResult) -> str:
    """Render a finished checkout: notice and receipt, or the rejection reason."""
    if result.error is not None:
        return str(result.error)
    if result.receipt is None:
        raise ValueError(f"Checkout {result.checkout_id} has not finished (state={result.state.value})")
    parts = []
    if result.receipt.shipment is not None:
        parts.append(render_shipment_notice(result.receipt.shipment))
    parts.append(render_receipt(result.receipt))
    return "\n\n".join(parts)


class ReceiptPrinter:
    """Writes rendered results to a text stream (stdout by default)."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self.stream = stream if stream is not None else sys.stdout

    def write(self, text: str) -> None:
        self.stream.write(text + "\n")

    def print_result(self, result: CheckoutResult) -> None:
        self.write(render_result(result))

    def print_separator(self) -> None:
        self.write(SEPARATOR)
