"""Top-level package for the retail checkout application.

The modules are imported by name (``from checkout import CheckoutService``):
:mod:`products`, :mod:`customer`, :mod:`catalog` and :mod:`cart` model
the shop, :mod:`shipping_service` and :mod:`checkout` hold the business
logic, and :mod:`receipt` and :mod:`cli` present the results.
"""
