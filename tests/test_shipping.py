# --- path/bootstrap (keep this at the very top) ---
from pathlib import Path
import sys

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
# --- end path/bootstrap ---

import unittest

import metrics
from exceptions import ValidationError
from products import create_perishable_product, create_plain_product, create_shippable_product
from shipping_service import ShipmentLine, ShippingService


class TestShippingFee(unittest.TestCase):

    def setUp(self):
        self.service = ShippingService(10)

    def test_rounds_up_to_next_kilogram(self):
        self.assertEqual(self.service.shipping_fee(21800), 220)
        self.assertEqual(self.service.shipping_fee(1), 10)
        self.assertEqual(self.service.shipping_fee(1000), 10)
        self.assertEqual(self.service.shipping_fee(1001), 20)

    def test_zero_weight_is_free(self):
        self.assertEqual(self.service.shipping_fee(0), 0)

    def test_custom_rate(self):
        self.assertEqual(ShippingService(2.5).shipping_fee(3500), 10)

    def test_negative_rate_rejected(self):
        with self.assertRaises(ValidationError):
            ShippingService(-1)


class TestShipmentNotice(unittest.TestCase):

    def setUp(self):
        metrics.reset_all()
        self.service = ShippingService()
        self.cheese = create_perishable_product("Cheese", 100, 10, 2025, 7, weight=400)
        self.tv = create_shippable_product("TV", 600, 3, 7000)

    def test_manifest_lines_and_total(self):
        notice = self.service.create_notice([(self.cheese, 2), (self.tv, 3)])
        self.assertEqual(
            notice.lines,
            (ShipmentLine(2, "Cheese", 800.0), ShipmentLine(3, "TV", 21000.0)),
        )
        self.assertEqual(notice.total_weight_grams, 21800)
        self.assertAlmostEqual(notice.total_weight_kg, 21.8)
        self.assertEqual(metrics.SHIPMENT_WEIGHT_GRAMS.count(), 1)

    def test_notice_does_not_mutate_stock(self):
        self.service.create_notice([(self.tv, 3)])
        self.assertEqual(self.tv.stock, 3)

    def test_weight_rounds_to_nearest_gram(self):
        self.assertEqual(ShipmentLine(1, "Feather", 0.5).rounded_weight_grams, 1)
        self.assertEqual(ShipmentLine(1, "Feather", 12.4).rounded_weight_grams, 12)

    def test_rejects_empty_or_unshippable_lines(self):
        with self.assertRaises(ValidationError):
            self.service.create_notice([])
        with self.assertRaises(ValidationError):
            self.service.create_notice([(create_plain_product("Card", 50, 1), 1)])


if __name__ == "__main__":
    unittest.main(verbosity=2)
