from __future__ import annotations

from datetime import datetime

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from holdings import config
from holdings.data_pipeline.table import (
    ALL_EXCHANGES,
    ALL_STATUSES,
    DEFAULT_PAGE_SIZE,
    EXCHANGE_OPTIONS,
    STATUS_OPTIONS,
    filter_holdings,
    holdings_to_csv,
    page_count,
    paginate,
    sort_holdings,
)
from holdings.main import run_pipeline


TABLE_COLUMNS = {
    "name": "Stock Name",
    "symbol": "Symbol",
    "purchase_price": "Purchase Price",
    "qty": "Qty",
    "investment": "Investment (₹)",
    "portfolio_percent": "Portfolio %",
    "exchange": "Exchange",
    "cmp": "CMP",
    "present_value": "Present Value (₹)",
    "gain_loss": "Gain/Loss (₹)",
    "pe_ratio": "P/E Ratio",
    "earnings": "Earnings",
    "sector": "Sector",
}
SECTOR_TABLE_COLUMNS = {
    "sector": "Sector",
    "count": "Stocks",
    "investment": "Investment (₹)",
    "present_value": "Present Value (₹)",
    "gain_loss": "Gain/Loss (₹)",
    "return_percent": "Return %",
}
GAIN_COLOR = "#10B981"
LOSS_COLOR = "#EF4444"


def format_inr(v: float | int | None) -> str:
    if v is None or pd.isna(v):
        return "N/A"
    return f"₹{v:,.2f}"


def format_pct_signed(v: float | int | None) -> str:
    if v is None or pd.isna(v):
        return "N/A"
    return f"{v:+.2f}%"


def render_summary_cards(summary: dict) -> None:
    st.markdown(
        """
        <style>
        .kpi-card {padding: 8px 6px 2px 0;}
        .kpi-label {font-size: 14px; color: #6b7280; margin-bottom: 6px;}
        .kpi-value {font-size: 30px; font-weight: 700; line-height: 1.08; white-space: nowrap;}
        .kpi-value.up {color: #0f9f57;}
        .kpi-value.down {color: #d64545;}
        .kpi-value.neutral {color: #2f3646;}
        </style>
        """,
        unsafe_allow_html=True,
    )

    return_class = "up" if summary["is_gain"] else "down"
    cards = [
        ("Total Investment", format_inr(summary["total_investment"]), "neutral"),
        ("Total Revenue", format_inr(summary["total_revenue"]), "neutral"),
        ("Total Profit", "+" + format_inr(summary["total_gain"]), "up"),
        ("Total Loss", "-" + format_inr(summary["total_loss"]), "down"),
        ("Overall Return %", format_pct_signed(summary["overall_return"]), return_class),
    ]
    for col, (label, value, css) in zip(st.columns(len(cards)), cards):
        with col:
            st.markdown(
                f"<div class='kpi-card'><div class='kpi-label'>{label}</div>"
                f"<div class='kpi-value {css}'>{value}</div></div>",
                unsafe_allow_html=True,
            )


def render_data_quality(holdings: pd.DataFrame, fetch_error: str | None) -> None:
    if fetch_error:
        st.warning(f"Live market fetch failed; showing spreadsheet figures only. Details: {fetch_error}")
    total = len(holdings)
    missing = int((holdings["price_source"] == "unavailable").sum()) if total else 0
    if missing == 0:
        st.caption("Market data status: all prices available")
    else:
        st.warning(f"{missing}/{total} holdings have no current price; related metrics shown as N/A")


def allocation_figure(allocation: list[dict]) -> go.Figure:
    fig = go.Figure(
        go.Pie(
            labels=[p["name"] for p in allocation],
            values=[p["value"] for p in allocation],
            marker=dict(colors=[p["color"] for p in allocation]),
            customdata=[p["percent"] for p in allocation],
            hole=0.45,
            sort=False,
            hovertemplate="<b>%{label}</b><br>Investment: ₹%{value:,.0f}<br>Share: %{customdata:.1%}<extra></extra>",
        )
    )
    fig.update_layout(margin=dict(t=10, l=0, r=0, b=0), height=380, showlegend=True)
    return fig


def gain_loss_figure(series: list[dict]) -> go.Figure:
    fig = go.Figure(
        go.Bar(
            x=[p["name"] for p in series],
            y=[p["value"] for p in series],
            marker_color=[GAIN_COLOR if p["is_gain"] else LOSS_COLOR for p in series],
            customdata=[p["full_name"] for p in series],
            hovertemplate="<b>%{customdata}</b><br>Gain/Loss: ₹%{y:,.0f}<extra></extra>",
        )
    )
    fig.update_layout(margin=dict(t=10, l=0, r=0, b=0), height=380, yaxis_title="Gain/Loss (₹)")
    return fig


def render_charts(allocation: list[dict], gain_loss: list[dict]) -> None:
    left, right = st.columns(2)
    with left:
        st.subheader("Top Holdings by Investment")
        if allocation:
            st.plotly_chart(allocation_figure(allocation), use_container_width=True)
        else:
            st.info("No allocation data available")
    with right:
        st.subheader("Top Gainers & Losers")
        if gain_loss:
            st.plotly_chart(gain_loss_figure(gain_loss), use_container_width=True)
        else:
            st.info("No gain/loss data available")


def render_holdings_table(holdings: pd.DataFrame) -> None:
    st.subheader("Filter Holdings")
    st.caption("Filter by stock name, exchange, or performance status.")

    c1, c2, c3 = st.columns([2, 1, 1])
    search = c1.text_input("Stock Name / Symbol", placeholder="Eg: HDFC Bank")
    exchange = c2.selectbox("Exchange", EXCHANGE_OPTIONS, index=0)
    status = c3.selectbox("Status", STATUS_OPTIONS, index=0)

    s1, s2 = st.columns([2, 1])
    sort_by = s1.selectbox(
        "Sort by",
        list(TABLE_COLUMNS.keys()),
        format_func=lambda key: TABLE_COLUMNS[key],
    )
    ascending = s2.radio("Order", ["Ascending", "Descending"], horizontal=True) == "Ascending"

    view = sort_holdings(filter_holdings(holdings, search, exchange, status), sort_by, ascending)
    filtered = bool(search) or exchange != ALL_EXCHANGES or status != ALL_STATUSES

    st.download_button(
        "Download CSV",
        data=holdings_to_csv(view),
        file_name=f"portfolio-{datetime.now():%Y-%m-%d}.csv",
        mime="text/csv",
    )

    pages = page_count(len(view))
    page = st.number_input("Page", min_value=1, max_value=pages, value=1, step=1) if pages > 1 else 1
    page_df = paginate(view, int(page))
    show = page_df[list(TABLE_COLUMNS.keys())].rename(columns=TABLE_COLUMNS)
    st.dataframe(show, use_container_width=True, hide_index=True)

    start = (int(page) - 1) * DEFAULT_PAGE_SIZE
    suffix = " (filtered)" if filtered else ""
    if len(view):
        st.caption(f"Showing {start + 1} to {start + len(page_df)} of {len(view)} entries{suffix}")
    else:
        st.caption(f"No holdings match the current filters{suffix}")


def render_sector_summary(sectors: pd.DataFrame) -> None:
    if sectors.empty:
        return
    st.subheader("Sector-wise Summary")
    show = sectors[list(SECTOR_TABLE_COLUMNS.keys())].rename(columns=SECTOR_TABLE_COLUMNS)
    st.dataframe(show, use_container_width=True, hide_index=True)


def main() -> None:
    st.set_page_config(page_title="Investment Portfolio Dashboard", layout="wide")
    st.title("Investment Portfolio Dashboard")
    st.caption("A consolidated view of all your holdings")

    toolbar_left, toolbar_right = st.columns([3, 1])
    with toolbar_left:
        offline_mode = st.checkbox(
            "Offline mode (use spreadsheet figures only)",
            value=config.offline_mode(),
            help="Skip live market data fetches.",
        )
    with toolbar_right:
        if st.button("Refresh", use_container_width=True):
            st.rerun()

    workbook = config.workbook_path()
    try:
        with st.spinner("Loading portfolio..."):
            data = run_pipeline(
                workbook,
                allow_online_fetch=not offline_mode,
                max_workers=config.fetch_workers(),
            )
    except (OSError, ValueError) as exc:
        st.error(f"Failed to load portfolio: {exc}")
        st.stop()
        return

    st.caption(f"Data source: `{workbook}` · Last updated {datetime.now():%H:%M:%S}")
    render_data_quality(data["holdings"], data["fetch_error"])
    render_summary_cards(data["summary"])
    render_charts(data["allocation"], data["gain_loss"])
    render_holdings_table(data["holdings"])
    render_sector_summary(data["sectors"])


if __name__ == "__main__":
    main()
