from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional, Tuple

MIB = 1024 * 1024
REQUIRED_COLUMNS: Tuple[str, ...] = ("date", "product", "quantity", "revenue")
PLACEHOLDER_PRODUCTS: Tuple[str, ...] = ("Product A", "Product B", "Product C")

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class DashboardSettings:
    max_upload_bytes: int = 10 * MIB
    required_columns: Tuple[str, ...] = REQUIRED_COLUMNS
    placeholder_products: Tuple[str, ...] = field(default=PLACEHOLDER_PRODUCTS)
    placeholder_points: int = 3
    breakdown_decimals: int = 1
    revenue_decimals: int = 2
    log_level: str = "INFO"

    @property
    def max_upload_mb(self) -> float:
        return self.max_upload_bytes / MIB


def _as_str_tuple(values: Optional[Iterable[object]], default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not values:
        return default
    out = tuple(str(v) for v in values if v is not None)
    return out or default


def _as_int(value: object, default: int, *, lo: int, hi: int) -> int:
    try:
        out = int(value)  # type: ignore[arg-type]
    except Exception:
        return default
    return max(lo, min(hi, out))


def normalize_settings(raw: Mapping[str, object]) -> DashboardSettings:
    """Build settings from a loose mapping, falling back to defaults on bad values."""
    defaults = DashboardSettings()

    max_upload_bytes = _as_int(raw.get("max_upload_bytes", defaults.max_upload_bytes), defaults.max_upload_bytes, lo=1, hi=1024 * MIB)

    log_level = str(raw.get("log_level") or defaults.log_level).strip().upper()
    if log_level not in _LOG_LEVELS:
        log_level = defaults.log_level

    # extra required columns are allowed; the four transaction fields always are required
    extra_columns = _as_str_tuple(raw.get("required_columns"), ())  # type: ignore[arg-type]
    required_columns = tuple(dict.fromkeys(REQUIRED_COLUMNS + extra_columns))

    return DashboardSettings(
        max_upload_bytes=max_upload_bytes,
        required_columns=required_columns,
        placeholder_products=_as_str_tuple(raw.get("placeholder_products"), defaults.placeholder_products),  # type: ignore[arg-type]
        placeholder_points=_as_int(raw.get("placeholder_points", defaults.placeholder_points), defaults.placeholder_points, lo=0, hi=50),
        breakdown_decimals=_as_int(raw.get("breakdown_decimals", defaults.breakdown_decimals), defaults.breakdown_decimals, lo=0, hi=6),
        revenue_decimals=_as_int(raw.get("revenue_decimals", defaults.revenue_decimals), defaults.revenue_decimals, lo=0, hi=6),
        log_level=log_level,
    )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> DashboardSettings:
    """Read overrides from SALES_DASHBOARD_* environment variables."""
    env = os.environ if environ is None else environ
    raw: dict = {}

    max_mb = env.get("SALES_DASHBOARD_MAX_UPLOAD_MB")
    if max_mb:
        try:
            raw["max_upload_bytes"] = int(float(max_mb) * MIB)
        except (ValueError, OverflowError):
            pass
    if env.get("SALES_DASHBOARD_LOG_LEVEL"):
        raw["log_level"] = env["SALES_DASHBOARD_LOG_LEVEL"]
    return normalize_settings(raw)


def configure_logging(settings: DashboardSettings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


DEFAULT_SETTINGS = DashboardSettings()
