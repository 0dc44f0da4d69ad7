"""Runtime settings read from environment variables.

Every value has a default, so the demo runs without any environment
set up.  Recognised variables:

``RETAIL_CURRENT_YEAR`` / ``RETAIL_CURRENT_MONTH``
    Reference date used for expiry checks (default 2025-07).
``RETAIL_SHIPPING_RATE_PER_KG``
    Shipping charge per started kilogram (default 10).
``RETAIL_LOG_DIR`` / ``RETAIL_LOG_LEVEL``
    Where and how verbosely :mod:`logging_config` writes logs.
"""

from __future__ import annotations

import logging
import math
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

from exceptions import ConfigurationError
from products import ReferenceDate

DEFAULT_YEAR = 2025
DEFAULT_MONTH = 7
DEFAULT_SHIPPING_RATE_PER_KG = 10.0


def _read_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got {raw!r}") from None


def _read_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    reference_date: ReferenceDate = field(default_factory=lambda: ReferenceDate(DEFAULT_YEAR, DEFAULT_MONTH))
    shipping_rate_per_kg: float = DEFAULT_SHIPPING_RATE_PER_KG
    log_dir: str = "logs"
    log_level: int = logging.INFO

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from ``env`` (``os.environ`` when omitted).

        Raises:
            ConfigurationError: If a variable is present but malformed.
        """
        env = os.environ if env is None else env
        year = _read_int(env, "RETAIL_CURRENT_YEAR", DEFAULT_YEAR)
        month = _read_int(env, "RETAIL_CURRENT_MONTH", DEFAULT_MONTH)
        if not 1 <= month <= 12:
            raise ConfigurationError(f"RETAIL_CURRENT_MONTH must be between 1 and 12, got {month}")
        rate = _read_float(env, "RETAIL_SHIPPING_RATE_PER_KG", DEFAULT_SHIPPING_RATE_PER_KG)
        if not (rate >= 0) or not math.isfinite(rate):
            raise ConfigurationError(f"RETAIL_SHIPPING_RATE_PER_KG must be a finite, non-negative number, got {rate}")
        level_name = env.get("RETAIL_LOG_LEVEL", "INFO").strip().upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            raise ConfigurationError(f"Unknown RETAIL_LOG_LEVEL {level_name!r}")
        return cls(
            reference_date=ReferenceDate(year, month),
            shipping_rate_per_kg=rate,
            log_dir=env.get("RETAIL_LOG_DIR", "logs"),
            log_level=level,
        )
