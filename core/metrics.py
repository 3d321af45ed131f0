from __future__ import annotations

import unicodedata
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from core.config import DEFAULT_SETTINGS, DashboardSettings
from core.data import round_half_up
from core.models import Dataset, Summary

AGGREGATE_FIELDS = ("revenue", "quantity")


def to_frame(dataset: Dataset) -> pd.DataFrame:
    return pd.DataFrame.from_records(
        [(t.date, t.product, t.quantity, t.revenue) for t in dataset],
        columns=["date", "product", "quantity", "revenue"],
    )


def collation_key(label: str) -> Tuple[str, str, str]:
    """Sort key approximating locale collation: accent/case-insensitive first, lowercase before uppercase on ties."""
    decomposed = unicodedata.normalize("NFKD", label)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return base, label.swapcase(), label


def parse_dates(values: pd.Series) -> pd.Series:
    """Parse date strings in one pass; unparseable values become NaT, aware values are compared in UTC."""
    return pd.to_datetime(values, errors="coerce", format="mixed", utc=True)


def aggregate_by_field(
    dataset: Dataset,
    field: str,
    default_value: float = 0,
    settings: DashboardSettings = DEFAULT_SETTINGS,
) -> List[Dict[str, Any]]:
    if field not in AGGREGATE_FIELDS:
        raise ValueError(f"cannot aggregate by {field!r}; expected one of {AGGREGATE_FIELDS}")

    if not dataset:
        return [{"product": label, field: default_value} for label in settings.placeholder_products]

    grouped = to_frame(dataset).groupby("product", sort=False)[field].sum()
    rows = []
    for product in sorted(grouped.index, key=collation_key):
        value = float(grouped.loc[product])
        if field == "revenue":
            value = round_half_up(value, settings.revenue_decimals)
        rows.append({"product": product, field: value})
    return rows


def revenue_by_product(dataset: Dataset, settings: DashboardSettings = DEFAULT_SETTINGS) -> List[Dict[str, Any]]:
    return aggregate_by_field(dataset, "revenue", 0, settings)


def quantity_by_product(dataset: Dataset, settings: DashboardSettings = DEFAULT_SETTINGS) -> List[Dict[str, Any]]:
    return aggregate_by_field(dataset, "quantity", 0, settings)


def summary(dataset: Dataset, settings: DashboardSettings = DEFAULT_SETTINGS) -> Optional[Summary]:
    if not dataset:
        return None

    df = to_frame(dataset)
    total_revenue = float(df["revenue"].sum())
    total_quantity = float(df["quantity"].sum())
    count = len(df)

    # strict ">" over the sorted aggregate: alphabetically earliest wins ties
    best: Optional[Dict[str, Any]] = None
    for row in revenue_by_product(dataset, settings):
        if best is None or row["revenue"] > best["revenue"]:
            best = row

    return Summary(
        total_revenue=total_revenue,
        total_quantity=total_quantity,
        number_of_transactions=count,
        avg_revenue=total_revenue / count,
        avg_quantity=total_quantity / count,
        best_product=best["product"] if best else "N/A",
        best_product_revenue=float(best["revenue"]) if best else 0.0,
    )


def revenue_over_time(dataset: Dataset, settings: DashboardSettings = DEFAULT_SETTINGS) -> List[Dict[str, Any]]:
    if not dataset:
        return [{"date": "", "revenue": 0} for _ in range(settings.placeholder_points)]

    df = to_frame(dataset)[["date", "revenue"]].copy()
    df["parsed"] = parse_dates(df["date"])
    # unparseable dates go last; stable sort keeps file order on ties
    ordered = df.sort_values("parsed", kind="stable", na_position="last")
    return ordered[["date", "revenue"]].to_dict(orient="records")


def revenue_breakdown(dataset: Dataset, settings: DashboardSettings = DEFAULT_SETTINGS) -> List[Dict[str, Any]]:
    if not dataset:
        return []

    by_product = revenue_by_product(dataset, settings)
    total = sum(row["revenue"] for row in by_product)
    if total == 0:
        return [{"name": row["product"], "value": 0.0} for row in by_product]
    return [
        {"name": row["product"], "value": round_half_up(row["revenue"] / total * 100, settings.breakdown_decimals)}
        for row in by_product
    ]


def compute_dashboard(dataset: Dataset, settings: DashboardSettings = DEFAULT_SETTINGS) -> Dict[str, Any]:
    """All derived views for one dataset, recomputed on every call."""
    stats = summary(dataset, settings)
    return {
        "has_data": bool(dataset),
        "summary": stats.to_dict() if stats else None,
        "revenue_by_product": revenue_by_product(dataset, settings),
        "quantity_by_product": quantity_by_product(dataset, settings),
        "revenue_over_time": revenue_over_time(dataset, settings),
        "revenue_breakdown": revenue_breakdown(dataset, settings),
        "transactions": [t.to_dict() for t in dataset],
    }
