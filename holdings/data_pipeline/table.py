from __future__ import annotations

import math

import pandas as pd


ALL_EXCHANGES = "All Exchanges"
ALL_STATUSES = "All Statuses"
EXCHANGE_OPTIONS = [ALL_EXCHANGES, "NSE", "BSE"]
STATUS_OPTIONS = [ALL_STATUSES, "Gain", "Loss", "Neutral"]
TEXT_COLUMNS = {
    "name",
    "symbol",
    "ticker",
    "exchange",
    "sector",
    "price_source",
    "pe_source",
    "earnings_source",
}
CSV_COLUMNS = {
    "name": "Stock Name",
    "purchase_price": "Purchase Price",
    "qty": "Qty",
    "investment": "Investment",
    "present_value": "Present Value",
    "gain_loss": "Gain/Loss",
    "pe_ratio": "P/E Ratio",
    "earnings": "Earnings",
    "exchange": "Exchange",
    "sector": "Sector",
}
DEFAULT_PAGE_SIZE = 10


def filter_holdings(
    df: pd.DataFrame,
    search: str = "",
    exchange: str = ALL_EXCHANGES,
    status: str = ALL_STATUSES,
) -> pd.DataFrame:
    if exchange not in EXCHANGE_OPTIONS:
        raise ValueError(f"Unknown exchange filter: {exchange!r}")
    if status not in STATUS_OPTIONS:
        raise ValueError(f"Unknown status filter: {status!r}")

    view = df
    needle = (search or "").strip().lower()
    if needle:
        names = view["name"].fillna("").astype(str).str.lower()
        symbols = view["symbol"].fillna("").astype(str).str.lower()
        view = view[names.str.contains(needle, regex=False) | symbols.str.contains(needle, regex=False)]

    if exchange != ALL_EXCHANGES:
        view = view[view["exchange"] == exchange]

    gain_loss = view["gain_loss"].fillna(0.0)
    if status == "Gain":
        view = view[gain_loss > 0]
    elif status == "Loss":
        view = view[gain_loss < 0]
    elif status == "Neutral":
        view = view[gain_loss == 0]

    return view.reset_index(drop=True)


def sort_holdings(df: pd.DataFrame, by: str = "name", ascending: bool = True) -> pd.DataFrame:
    if by not in df.columns:
        raise ValueError(f"Cannot sort holdings by unknown column: {by!r}")

    if by in TEXT_COLUMNS or not pd.api.types.is_numeric_dtype(df[by]):
        key = df[by].fillna("").astype(str)
    else:
        key = pd.to_numeric(df[by], errors="coerce").fillna(0.0)
    order = key.reset_index(drop=True).sort_values(ascending=ascending, kind="stable").index
    return df.iloc[order].reset_index(drop=True)


def holdings_to_csv(df: pd.DataFrame) -> str:
    export = df.reindex(columns=list(CSV_COLUMNS.keys())).rename(columns=CSV_COLUMNS)
    return export.to_csv(index=False)


def page_count(total_rows: int, per_page: int = DEFAULT_PAGE_SIZE) -> int:
    if per_page < 1:
        raise ValueError("per_page must be >= 1")
    return max(1, math.ceil(total_rows / per_page))


def paginate(df: pd.DataFrame, page: int, per_page: int = DEFAULT_PAGE_SIZE) -> pd.DataFrame:
    pages = page_count(len(df), per_page)
    page = min(max(1, page), pages)
    start = (page - 1) * per_page
    return df.iloc[start:start + per_page]
