# --- path/bootstrap (keep this at the very top) ---
from pathlib import Path
import sys

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
# --- end path/bootstrap ---

import unittest

import metrics
from cart import Cart, CartItem
from catalog import Catalog
from customer import create_customer
from exceptions import UnknownProductError, ValidationError


class TestCustomer(unittest.TestCase):

    def test_pay_debits_when_covered(self):
        ahmed = create_customer("Ahmed", 5000)
        self.assertTrue(ahmed.pay(2220))
        self.assertAlmostEqual(ahmed.balance, 2780)

    def test_pay_exact_balance(self):
        c = create_customer("Exact", 100)
        self.assertTrue(c.pay(100))
        self.assertEqual(c.balance, 0)

    def test_pay_fails_closed(self):
        yasser = create_customer("Yasser", 100)
        self.assertFalse(yasser.pay(300))
        self.assertEqual(yasser.balance, 100)

    def test_non_finite_values_rejected(self):
        for bad in (float("nan"), float("inf")):
            with self.subTest(value=bad):
                with self.assertRaises(ValidationError):
                    create_customer("X", bad)
                c = create_customer("X", 100)
                with self.assertRaises(ValidationError):
                    c.pay(bad)
                self.assertEqual(c.balance, 100)

    def test_negative_values_rejected(self):
        with self.assertRaises(ValidationError):
            create_customer("Broke", -1)
        c = create_customer("Mohamed", 10)
        with self.assertRaises(ValidationError):
            c.pay(-5)
        self.assertEqual(c.balance, 10)


class TestCatalog(unittest.TestCase):

    def test_ids_are_stable_and_sequential(self):
        catalog = Catalog()
        first = catalog.add_plain("Card", 50, 20)
        second = catalog.add_shippable("TV", 600, 3, 7000)
        self.assertEqual((first, second), (1, 2))
        self.assertEqual(catalog.get(second).name, "TV")
        self.assertIn(first, catalog)
        self.assertEqual(len(catalog), 2)
        self.assertEqual(catalog.stock_levels(), {"Card": 20, "TV": 3})

    def test_failed_construction_leaves_no_entry(self):
        catalog = Catalog()
        with self.assertRaises(ValidationError):
            catalog.add_plain("Apples", 0, 10)
        self.assertEqual(len(catalog), 0)
        # the failed product does not consume an id
        self.assertEqual(catalog.add_plain("Pears", 1, 1), 1)

    def test_unknown_id(self):
        with self.assertRaises(UnknownProductError):
            Catalog().get(42)


class TestCart(unittest.TestCase):

    def setUp(self):
        metrics.reset_all()
        self.catalog = Catalog()
        self.tv = self.catalog.add_shippable("TV", 600, 3, 7000)
        self.card = self.catalog.add_plain("ScratchCard", 50, 20)
        self.cart = Cart(self.catalog)

    def test_add_preserves_order(self):
        self.assertTrue(self.cart.is_empty())
        ok, msg = self.cart.add(self.tv, 3)
        self.assertTrue(ok, msg)
        self.assertEqual(msg, "Added 3 x TV to cart")
        self.cart.add(self.card, 1)
        self.assertEqual(self.cart.items(), (CartItem(self.tv, 3), CartItem(self.card, 1)))
        self.assertEqual(len(self.cart), 2)
        self.assertFalse(self.cart.is_empty())

    def test_add_over_stock_is_rejected(self):
        ok, msg = self.cart.add(self.tv, 4)
        self.assertFalse(ok)
        self.assertIn("stock", msg.lower())
        self.assertTrue(self.cart.is_empty())
        self.assertEqual(len(self.cart.rejections), 1)
        self.assertEqual(metrics.CART_ADD_REJECTED_TOTAL.value(reason="stock_insufficient"), 1)

    def test_add_invalid_quantity_or_product(self):
        for qty in (0, -2, 1.5, True):
            with self.subTest(qty=qty):
                ok, msg = self.cart.add(self.card, qty)
                self.assertFalse(ok)
                self.assertIn("quantity", msg.lower())
        ok, msg = self.cart.add(999, 1)
        self.assertFalse(ok)
        self.assertIn("not found", msg.lower())
        self.assertTrue(self.cart.is_empty())

    def test_add_does_not_touch_stock_or_copy_products(self):
        self.cart.add(self.tv, 2)
        product = self.catalog.get(self.tv)
        self.assertEqual(product.stock, 3)
        # another cart sees a stock change made through the catalog
        product.reduce_stock(2)
        other = Cart(self.catalog)
        ok, _ = other.add(self.tv, 2)
        self.assertFalse(ok)
        self.assertEqual(self.cart.items()[0].quantity, 2)

    def test_items_view_is_read_only(self):
        self.cart.add(self.card, 1)
        items = self.cart.items()
        self.assertIsInstance(items, tuple)
        with self.assertRaises(AttributeError):
            items[0].quantity = 5


if __name__ == "__main__":
    unittest.main(verbosity=2)
