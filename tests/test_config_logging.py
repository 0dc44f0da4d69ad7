# --- path/bootstrap (keep this at the very top) ---
from pathlib import Path
import sys

SRC = Path(__file__).resolve().parents[1] / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))
# --- end path/bootstrap ---

import json
import logging
import tempfile
import unittest

import logging_config
import metrics
from config import Settings
from exceptions import ConfigurationError
from products import ReferenceDate


class TestSettings(unittest.TestCase):

    def test_defaults(self):
        settings = Settings.from_env({})
        self.assertEqual(settings.reference_date, ReferenceDate(2025, 7))
        self.assertEqual(settings.shipping_rate_per_kg, 10.0)
        self.assertEqual(settings.log_dir, "logs")
        self.assertEqual(settings.log_level, logging.INFO)

    def test_overrides(self):
        settings = Settings.from_env({
            "RETAIL_CURRENT_YEAR": "2026",
            "RETAIL_CURRENT_MONTH": "2",
            "RETAIL_SHIPPING_RATE_PER_KG": "12.5",
            "RETAIL_LOG_DIR": "/tmp/retail-logs",
            "RETAIL_LOG_LEVEL": "debug",
        })
        self.assertEqual(settings.reference_date, ReferenceDate(2026, 2))
        self.assertEqual(settings.shipping_rate_per_kg, 12.5)
        self.assertEqual(settings.log_dir, "/tmp/retail-logs")
        self.assertEqual(settings.log_level, logging.DEBUG)

    def test_malformed_values(self):
        bad = [
            {"RETAIL_CURRENT_YEAR": "next year"},
            {"RETAIL_CURRENT_MONTH": "0"},
            {"RETAIL_SHIPPING_RATE_PER_KG": "-1"},
            {"RETAIL_SHIPPING_RATE_PER_KG": "ten"},
            {"RETAIL_LOG_LEVEL": "LOUD"},
        ]
        for env in bad:
            with self.subTest(env=env):
                with self.assertRaises(ConfigurationError):
                    Settings.from_env(env)


class TestJsonLogging(unittest.TestCase):

    def setUp(self):
        root = logging.getLogger()
        self.saved = (list(root.handlers), root.level)
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        root = logging.getLogger()
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        handlers, level = self.saved
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)
        self.tmp.cleanup()

    def test_records_are_json_with_context(self):
        logging_config.configure_logging(self.tmp.name, logging.INFO)
        logging.getLogger("checkout").info(
            "Checkout completed",
            extra={"request_id": "CHK-1", "user_id": "Ahmed", "extra": {"total": 2220.0}},
        )
        for handler in logging.getLogger().handlers:
            handler.flush()
        line = (Path(self.tmp.name) / logging_config.LOG_FILE_NAME).read_text(encoding="utf-8").strip()
        record = json.loads(line.splitlines()[-1])
        self.assertEqual(record["message"], "Checkout completed")
        self.assertEqual(record["level"], "INFO")
        self.assertEqual(record["request_id"], "CHK-1")
        self.assertEqual(record["user_id"], "Ahmed")
        self.assertEqual(record["total"], 2220.0)
        self.assertTrue(record["timestamp"].endswith("Z"))

    def test_reconfiguring_replaces_handlers(self):
        logging_config.configure_logging(self.tmp.name)
        logging_config.configure_logging(self.tmp.name)
        self.assertEqual(len(logging.getLogger().handlers), 2)


class TestMetrics(unittest.TestCase):

    def setUp(self):
        metrics.reset_all()

    def test_prometheus_text(self):
        metrics.CHECKOUT_ERROR_TOTAL.inc(type="empty_cart")
        metrics.SHIPMENT_WEIGHT_GRAMS.observe(21800)
        text = metrics.generate_metrics_text().decode("utf-8")
        self.assertIn("# TYPE checkout_error_total counter", text)
        self.assertIn('checkout_error_total{type="empty_cart"} 1.0', text)
        self.assertIn('shipment_weight_grams_bucket{le="20000.0"} 0', text)
        self.assertIn('shipment_weight_grams_bucket{le="50000.0"} 1', text)
        self.assertIn('shipment_weight_grams_bucket{le="+Inf"} 1', text)
        self.assertIn("shipment_weight_grams_sum 21800.0", text)

    def test_counter_only_goes_up(self):
        with self.assertRaises(ValueError):
            metrics.CHECKOUT_TOTAL.inc(-1, outcome="completed")


if __name__ == "__main__":
    unittest.main(verbosity=2)
