import time

import pytest

from core.data import round_half_up
from core.metrics import (
    aggregate_by_field,
    collation_key,
    compute_dashboard,
    quantity_by_product,
    revenue_breakdown,
    revenue_by_product,
    revenue_over_time,
    summary,
)
from core.models import Transaction


def make_tx(product: str, revenue: float, quantity: float = 1.0, date: str = "2024-01-01") -> Transaction:
    return Transaction(date=date, product=product, quantity=quantity, revenue=revenue)


EXAMPLE = (
    Transaction(date="2024-01-02", product="A", quantity=3.0, revenue=10.0),
    Transaction(date="2024-01-01", product="B", quantity=0.0, revenue=5.5),
)


def test_summary_example():
    stats = summary(EXAMPLE)

    assert stats.total_revenue == pytest.approx(15.5)
    assert stats.total_quantity == 3.0
    assert stats.number_of_transactions == 2
    assert stats.avg_revenue == pytest.approx(7.75)
    assert stats.avg_quantity == pytest.approx(1.5)
    assert stats.best_product == "A"
    assert stats.best_product_revenue == 10.0


def test_summary_empty_is_none():
    assert summary(()) is None


def test_summary_counts_every_row():
    dataset = tuple(make_tx(p, 1.0) for p in ["A", "B", "A", "C", "A"])

    assert summary(dataset).number_of_transactions == 5


def test_best_product_tie_goes_to_alphabetically_first():
    dataset = (make_tx("b", 5.0), make_tx("a", 5.0), make_tx("c", 1.0))

    assert summary(dataset).best_product == "a"


def test_summary_to_dict_exposes_both_key_styles():
    out = summary(EXAMPLE).to_dict()

    assert out["number_of_transactions"] == 2
    assert out["numberOfTransactions"] == 2
    assert out["bestProduct"] == "A"


def test_revenue_aggregate_matches_total():
    dataset = (
        make_tx("Widget", 19.99),
        make_tx("Gadget", 5.01),
        make_tx("Widget", 0.1),
        make_tx("Gizmo", 0.2),
    )

    rows = revenue_by_product(dataset)

    assert round(sum(r["revenue"] for r in rows), 2) == round(sum(t.revenue for t in dataset), 2)
    assert rows == [
        {"product": "Gadget", "revenue": 5.01},
        {"product": "Gizmo", "revenue": 0.2},
        {"product": "Widget", "revenue": 20.09},
    ]


def test_quantity_aggregate_is_not_rounded():
    dataset = (make_tx("A", 1.0, quantity=0.333), make_tx("A", 1.0, quantity=0.333))

    assert quantity_by_product(dataset) == [{"product": "A", "quantity": pytest.approx(0.666)}]


def test_aggregate_sorted_locale_aware_without_duplicates():
    dataset = tuple(make_tx(p, 1.0) for p in ["Zebra", "apple", "B", "b", "apple", "Éclair", "a", "A"])

    labels = [r["product"] for r in aggregate_by_field(dataset, "revenue")]

    assert labels == ["a", "A", "apple", "b", "B", "Éclair", "Zebra"]
    assert len(labels) == len(set(labels))
    keys = [collation_key(label) for label in labels]
    assert all(k1 < k2 for k1, k2 in zip(keys, keys[1:]))


def test_aggregate_keeps_whitespace_distinct():
    dataset = (make_tx("A", 1.0), make_tx(" A", 2.0))

    assert len(revenue_by_product(dataset)) == 2


def test_aggregate_placeholder_when_empty():
    assert aggregate_by_field((), "revenue") == [
        {"product": "Product A", "revenue": 0},
        {"product": "Product B", "revenue": 0},
        {"product": "Product C", "revenue": 0},
    ]
    assert quantity_by_product(()) == [
        {"product": "Product A", "quantity": 0},
        {"product": "Product B", "quantity": 0},
        {"product": "Product C", "quantity": 0},
    ]


def test_aggregate_unknown_field():
    with pytest.raises(ValueError):
        aggregate_by_field(EXAMPLE, "date")


def test_revenue_over_time_sorted_by_date():
    assert revenue_over_time(EXAMPLE) == [
        {"date": "2024-01-01", "revenue": 5.5},
        {"date": "2024-01-02", "revenue": 10.0},
    ]


def test_revenue_over_time_one_point_per_transaction():
    dataset = (make_tx("A", 1.0, date="2024-03-01"), make_tx("B", 2.0, date="2024-03-01"))

    assert revenue_over_time(dataset) == [
        {"date": "2024-03-01", "revenue": 1.0},
        {"date": "2024-03-01", "revenue": 2.0},
    ]


def test_unparseable_dates_sort_last_in_file_order():
    dataset = (
        make_tx("A", 1.0, date="not a date"),
        make_tx("B", 2.0, date="2024-02-01"),
        make_tx("C", 3.0, date=""),
        make_tx("D", 4.0, date="2024-01-15"),
    )

    assert [p["date"] for p in revenue_over_time(dataset)] == ["2024-01-15", "2024-02-01", "not a date", ""]


def test_revenue_over_time_placeholder_when_empty():
    assert revenue_over_time(()) == [
        {"date": "", "revenue": 0},
        {"date": "", "revenue": 0},
        {"date": "", "revenue": 0},
    ]


def test_breakdown_percentages():
    slices = revenue_breakdown(EXAMPLE)

    assert slices == [{"name": "A", "value": 64.5}, {"name": "B", "value": 35.5}]


def test_breakdown_sums_to_about_100():
    dataset = (make_tx("A", 1.0), make_tx("B", 1.0), make_tx("C", 1.0))

    slices = revenue_breakdown(dataset)

    assert [s["value"] for s in slices] == [33.3, 33.3, 33.3]
    assert abs(sum(s["value"] for s in slices) - 100.0) <= 0.5


def test_breakdown_zero_total_is_zero_percent():
    dataset = (make_tx("A", 0.0), make_tx("B", 0.0))

    assert revenue_breakdown(dataset) == [{"name": "A", "value": 0.0}, {"name": "B", "value": 0.0}]


def test_breakdown_empty_has_no_placeholder():
    assert revenue_breakdown(()) == []


def test_views_are_repeatable():
    assert compute_dashboard(EXAMPLE) == compute_dashboard(EXAMPLE)


def test_compute_dashboard_payload():
    payload = compute_dashboard(EXAMPLE)

    assert payload["has_data"] is True
    assert payload["summary"]["totalRevenue"] == pytest.approx(15.5)
    assert payload["transactions"][1] == {"date": "2024-01-01", "product": "B", "quantity": 0.0, "revenue": 5.5}
    assert payload["revenue_over_time"][0]["date"] == "2024-01-01"


def test_compute_dashboard_empty():
    payload = compute_dashboard(())

    assert payload["has_data"] is False
    assert payload["summary"] is None
    assert len(payload["revenue_by_product"]) == 3
    assert len(payload["revenue_over_time"]) == 3
    assert payload["revenue_breakdown"] == []
    assert payload["transactions"] == []


def test_timezone_aware_dates_compare_in_utc():
    dataset = (
        make_tx("A", 1.0, date="2024-01-01T03:00:00"),
        make_tx("B", 2.0, date="2024-01-01T05:00:00+05:00"),
    )

    assert [p["revenue"] for p in revenue_over_time(dataset)] == [2.0, 1.0]


def test_large_dataset_stays_fast():
    dataset = tuple(
        make_tx(f"P{i % 50}", float(i % 97), quantity=float(i % 7), date=f"2024-{i % 12 + 1:02d}-{i % 28 + 1:02d}")
        for i in range(200_000)
    )

    started = time.perf_counter()
    payload = compute_dashboard(dataset)
    elapsed = time.perf_counter() - started

    assert len(payload["revenue_over_time"]) == 200_000
    assert payload["revenue_over_time"][0]["date"] == "2024-01-01"
    assert elapsed < 15.0


def test_round_half_up_uses_decimal_text():
    assert round_half_up(1.005, 2) == 1.01
    assert round_half_up(2.5) == 3.0
