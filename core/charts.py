from __future__ import annotations

from typing import Any, Dict, List

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def product_bar_chart(records: List[Dict[str, Any]], field: str) -> alt.Chart:
    df = pd.DataFrame(records, columns=["product", field])
    axis_format = "$~s" if field == "revenue" else "~s"
    hover = alt.selection_point(fields=["product"], on="mouseover", empty="all")
    return (
        alt.Chart(df)
        .mark_bar()
        .encode(
            x=alt.X("product:N", title="Product", sort=None, axis=alt.Axis(labelAngle=0)),
            y=alt.Y(f"{field}:Q", title=field.capitalize(), axis=alt.Axis(format=axis_format, gridDash=[4, 4], domain=False, ticks=False)),
            opacity=alt.condition(hover, alt.value(1), alt.value(0.6)),
            tooltip=[alt.Tooltip("product:N", title="Product"), alt.Tooltip(f"{field}:Q", title=field.capitalize(), format=",.2f")],
        )
        .add_params(hover)
        .properties(height=260)
    )


def revenue_line_chart(points: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(points, columns=["date", "revenue"])
    return (
        alt.Chart(df)
        .mark_line(point={"filled": True, "size": 60})
        .encode(
            # points arrive already date-sorted; keep that order on the axis
            x=alt.X("date:N", title="Date", sort=None, axis=alt.Axis(grid=False)),
            y=alt.Y("revenue:Q", title="Revenue", axis=alt.Axis(format="$~s", gridDash=[4, 4], domain=False, ticks=False)),
            tooltip=[alt.Tooltip("date:N", title="Date"), alt.Tooltip("revenue:Q", title="Revenue", format="$,.2f")],
        )
        .properties(height=260)
    )


def breakdown_pie_chart(slices: List[Dict[str, Any]]) -> alt.Chart:
    df = pd.DataFrame(slices, columns=["name", "value"])
    return (
        alt.Chart(df)
        .mark_arc()
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color("name:N", title="Product"),
            tooltip=[alt.Tooltip("name:N", title="Product"), alt.Tooltip("value:Q", title="Share %", format=".1f")],
        )
        .properties(height=260)
    )


def build_dashboard_charts(payload: Dict[str, Any]) -> Dict[str, Dict[str, Any]]:
    return {
        "revenue_by_product": to_vega_spec(product_bar_chart(payload["revenue_by_product"], "revenue")),
        "quantity_by_product": to_vega_spec(product_bar_chart(payload["quantity_by_product"], "quantity")),
        "revenue_over_time": to_vega_spec(revenue_line_chart(payload["revenue_over_time"])),
        "revenue_breakdown": to_vega_spec(breakdown_pie_chart(payload["revenue_breakdown"])),
    }
