"""In-process metrics for the checkout application.

Counters, gauges and histograms modelled on the Prometheus client, kept
to the standard library.  Every metric registers itself in a module
registry so :func:`generate_metrics_text` can dump them all in the
Prometheus text exposition format.
"""

from collections import defaultdict
from threading import Lock
from typing import Dict, Iterable, List, Tuple

LabelValues = Tuple[str, ...]


class Metric:
    """Base class holding the name, help text and label names."""

    kind = "untyped"

    def __init__(self, name: str, description: str, label_names: Iterable[str] = ()):
        self.name = name
        self.description = description
        self.label_names = list(label_names)
        self._lock = Lock()
        _METRIC_REGISTRY.append(self)

    def _key(self, labels: Dict[str, str]) -> LabelValues:
        return tuple(str(labels.get(k, "")) for k in self.label_names)

    def _format_labels(self, label_values: LabelValues, **extra: str) -> str:
        pairs = [f'{name}="{value}"' for name, value in zip(self.label_names, label_values)]
        pairs.extend(f'{name}="{value}"' for name, value in extra.items())
        if not pairs:
            return ""
        return "{" + ",".join(pairs) + "}"

    def _header(self) -> List[str]:
        return [f"# HELP {self.name} {self.description}", f"# TYPE {self.name} {self.kind}"]

    def reset(self) -> None:
        raise NotImplementedError

    def to_prometheus(self) -> List[str]:
        raise NotImplementedError


class Counter(Metric):
    """Monotonic counter.  ``CART_ADD_REJECTED_TOTAL.inc(reason="stock")``."""

    kind = "counter"

    def __init__(self, name: str, description: str, label_names: Iterable[str] = ()):
        super().__init__(name, description, label_names)
        self._values: Dict[LabelValues, float] = defaultdict(float)

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        if amount < 0:
            raise ValueError("Counters can only be incremented")
        with self._lock:
            self._values[self._key(labels)] += amount

    def value(self, **labels: str) -> float:
        with self._lock:
            return self._values.get(self._key(labels), 0.0)

    def reset(self) -> None:
        with self._lock:
            self._values.clear()

    def to_prometheus(self) -> List[str]:
        lines = self._header()
        with self._lock:
            for label_values, value in self._values.items():
                lines.append(f"{self.name}{self._format_labels(label_values)} {value}")
        return lines


class Gauge(Metric):
    """A value that may go up or down, e.g. remaining stock."""

    kind = "gauge"

    def __init__(self, name: str, description: str, label_names: Iterable[str] = ()):
        super().__init__(name, description, label_names)
        self._values: Dict[LabelValues, float] = {}

    def set(self, value: float, **labels: str) -> None:
        with self._lock:
            self._values[self._key(labels)] = float(value)

    def value(self, **labels: str) -> float:
        with self._lock:
            return self._values.get(self._key(labels), 0.0)

    def reset(self) -> None:
        with self._lock:
            self._values.clear()

    def to_prometheus(self) -> List[str]:
        lines = self._header()
        with self._lock:
            for label_values, value in self._values.items():
                lines.append(f"{self.name}{self._format_labels(label_values)} {value}")
        return lines


class Histogram(Metric):
    """Histogram with fixed ascending bucket upper bounds.

    Observations above the last bound only show up in the ``+Inf``
    bucket, whose value is the total observation count.
    """

    kind = "histogram"

    def __init__(self, name: str, description: str, buckets: Iterable[float], label_names: Iterable[str] = ()):
        super().__init__(name, description, label_names)
        self.buckets = sorted(float(b) for b in buckets)
        self._counts: Dict[LabelValues, List[int]] = defaultdict(lambda: [0] * len(self.buckets))
        self._sums: Dict[LabelValues, float] = defaultdict(float)
        self._totals: Dict[LabelValues, int] = defaultdict(int)

    def observe(self, value: float, **labels: str) -> None:
        key = self._key(labels)
        with self._lock:
            counts = self._counts[key]
            for idx, upper in enumerate(self.buckets):
                if value <= upper:
                    counts[idx] += 1
            self._totals[key] += 1
            self._sums[key] += float(value)

    def count(self, **labels: str) -> int:
        with self._lock:
            return self._totals.get(self._key(labels), 0)

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
            self._sums.clear()
            self._totals.clear()

    def to_prometheus(self) -> List[str]:
        lines = self._header()
        with self._lock:
            for label_values, total in self._totals.items():
                # bucket counts are per-bucket already (value <= upper), i.e. cumulative
                for idx, upper in enumerate(self.buckets):
                    labels = self._format_labels(label_values, le=str(upper))
                    lines.append(f"{self.name}_bucket{labels} {self._counts[label_values][idx]}")
                lines.append(f"{self.name}_bucket{self._format_labels(label_values, le='+Inf')} {total}")
                label_str = self._format_labels(label_values)
                lines.append(f"{self.name}_sum{label_str} {self._sums[label_values]}")
                lines.append(f"{self.name}_count{label_str} {total}")
        return lines


_METRIC_REGISTRY: List[Metric] = []


def generate_metrics_text() -> bytes:
    """Render every registered metric in Prometheus text format."""
    lines: List[str] = []
    for metric in _METRIC_REGISTRY:
        lines.extend(metric.to_prometheus())
    return "\n".join(lines).encode("utf-8")


def reset_all() -> None:
    """Zero every registered metric.  Used between test cases."""
    for metric in _METRIC_REGISTRY:
        metric.reset()


# -----------------------------------------------------------------------------
# Metrics recorded by the checkout application.
# -----------------------------------------------------------------------------

# Finished checkouts, labelled by outcome ("completed" or "rejected")
CHECKOUT_TOTAL = Counter(
    name="checkout_total",
    description="Total number of checkout attempts by outcome",
    label_names=["outcome"],
)

# Rejected checkouts, labelled by CheckoutError.error_type
CHECKOUT_ERROR_TOTAL = Counter(
    name="checkout_error_total",
    description="Total number of checkout errors, labelled by type",
    label_names=["type"],
)

CHECKOUT_DURATION_SECONDS = Histogram(
    name="checkout_duration_seconds",
    description="Duration of checkout operations in seconds",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)

CART_ADD_REJECTED_TOTAL = Counter(
    name="cart_add_rejected_total",
    description="Cart additions rejected, labelled by reason",
    label_names=["reason"],
)

# Total package weight per shipment, 1 kg to 50 kg
SHIPMENT_WEIGHT_GRAMS = Histogram(
    name="shipment_weight_grams",
    description="Total package weight per shipment in grams",
    buckets=[1000, 5000, 10000, 20000, 50000],
)

PRODUCT_STOCK = Gauge(
    name="product_stock",
    description="Remaining stock per product after the last checkout",
    label_names=["product"],
)
