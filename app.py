import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Optional

from core.charts import breakdown_pie_chart, product_bar_chart, revenue_line_chart
from core.config import configure_logging, load_settings
from core.data import format_currency, format_number
from core.metrics import compute_dashboard
from core.session import SessionState, upload

alt.data_transformers.disable_max_rows()
SETTINGS = load_settings()
configure_logging(SETTINGS)


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;margin-bottom: 8px;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(f"<div class='card'><div class='card-title'>{title}</div>", unsafe_allow_html=True)
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def get_state() -> SessionState:
    return st.session_state.setdefault("session", SessionState())


def on_file_selected():
    st.session_state["session"] = upload(get_state(), st.session_state.get("csv_upload"), SETTINGS)


def uploader_label(state: SessionState) -> str:
    if state.is_loading:
        return "Processing..."
    return state.filename or "Choose CSV File"


# ---------- UI setup ----------
st.set_page_config(page_title="CSV Data Dashboard", layout="wide")
inject_base_styles()
st.markdown(
    "<div class='app-top-bar'><div class='page-title'>CSV Data Dashboard</div></div>",
    unsafe_allow_html=True,
)
st.caption("Upload sales data to view analytics")

state = get_state()
st.file_uploader(
    uploader_label(state),
    type=["csv"],
    key="csv_upload",
    on_change=on_file_selected,
    disabled=not state.can_upload,
)

state = get_state()
if state.error is not None:
    st.error(state.error.message)

payload = compute_dashboard(state.dataset, SETTINGS)
stats: Optional[dict] = payload["summary"]

# ----- KPIs -----
k1, k2, k3, k4, k5, k6 = st.columns(6)
k1.metric("Total Revenue", format_currency(stats["total_revenue"]) if stats else "$0.00")
k2.metric("Total Quantity", format_number(stats["total_quantity"], 0) if stats else "0")
k3.metric("Transactions", stats["number_of_transactions"] if stats else 0)
k4.metric("Avg Revenue", format_currency(stats["avg_revenue"]) if stats else "$0.00")
k5.metric("Avg Quantity", format_number(stats["avg_quantity"], 1) if stats else "0.0")
k6.metric(
    "Best Product",
    stats["best_product"] if stats else "N/A",
    format_currency(stats["best_product_revenue"]) if stats else None,
    delta_color="off",
)

# ----- Charts -----
c1, c2 = st.columns(2)
with c1:
    with card("Revenue by Product"):
        st.altair_chart(product_bar_chart(payload["revenue_by_product"], "revenue"), use_container_width=True)
with c2:
    with card("Quantity by Product"):
        st.altair_chart(product_bar_chart(payload["quantity_by_product"], "quantity"), use_container_width=True)

c3, c4 = st.columns(2)
with c3:
    with card("Revenue Over Time"):
        st.altair_chart(revenue_line_chart(payload["revenue_over_time"]), use_container_width=True)
with c4:
    with card("Revenue Breakdown"):
        if payload["revenue_breakdown"]:
            st.altair_chart(breakdown_pie_chart(payload["revenue_breakdown"]), use_container_width=True)
        else:
            st.info("Upload a CSV to see the revenue breakdown.")

# ----- Table -----
if payload["has_data"]:
    with card("Transactions"):
        table = pd.DataFrame(payload["transactions"])
        table["revenue"] = table["revenue"].apply(format_currency)
        st.dataframe(table, use_container_width=True, hide_index=True)
