"""
Fundamentals / quote client backed by Yahoo Finance (yfinance).

Every figure that cannot be read comes back as ``None`` so the enrichment
step can fall back to whatever the spreadsheet holds. Nothing here raises
for a bad ticker or a network failure; those are logged and reported as
unavailable.
"""
from __future__ import annotations

import logging
import math
from concurrent.futures import ThreadPoolExecutor, as_completed

import pandas as pd
import yfinance as yf


logger = logging.getLogger(__name__)

OUTPUT_COLUMNS = [
    "ticker",
    "price",
    "pe_ratio",
    "earnings",
]
INFO_FIELDS = {
    "price": ("currentPrice", "regularMarketPrice"),
    "pe_ratio": ("trailingPE",),
    "earnings": ("trailingEps", "epsTrailingTwelveMonths"),
}


def _as_number(value) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _unavailable(ticker: str | None) -> dict:
    return {"ticker": ticker, "price": None, "pe_ratio": None, "earnings": None}


def _pick(info: dict, keys: tuple[str, ...]) -> float | None:
    for key in keys:
        number = _as_number(info.get(key))
        if number is not None:
            return number
    return None


def fetch_fundamentals(ticker: str | None) -> dict:
    if not ticker:
        return _unavailable(ticker)

    try:
        info = yf.Ticker(ticker).info or {}
    except Exception as exc:
        logger.warning("Fundamentals fetch failed for %s: %s", ticker, exc)
        return _unavailable(ticker)

    if not isinstance(info, dict):
        logger.warning("Unexpected fundamentals payload for %s: %r", ticker, type(info))
        return _unavailable(ticker)

    result = {"ticker": ticker}
    for field, keys in INFO_FIELDS.items():
        result[field] = _pick(info, keys)
    return result


def empty_market_data(tickers: list[str]) -> pd.DataFrame:
    unique_tickers = list(dict.fromkeys(t for t in tickers if t))
    return pd.DataFrame(
        [_unavailable(t) for t in unique_tickers],
        columns=OUTPUT_COLUMNS,
    )


def fetch_market_data(tickers: list[str], max_workers: int = 8) -> pd.DataFrame:
    unique_tickers = list(dict.fromkeys(t for t in tickers if t))
    if not unique_tickers:
        return pd.DataFrame(columns=OUTPUT_COLUMNS)

    results: dict[str, dict] = {}
    workers = max(1, min(max_workers, len(unique_tickers)))
    with ThreadPoolExecutor(max_workers=workers) as executor:
        future_to_ticker = {
            executor.submit(fetch_fundamentals, ticker): ticker
            for ticker in unique_tickers
        }
        for future in as_completed(future_to_ticker):
            ticker = future_to_ticker[future]
            try:
                results[ticker] = future.result()
            except Exception as exc:
                logger.warning("Fundamentals worker failed for %s: %s", ticker, exc)
                results[ticker] = _unavailable(ticker)

    missing = sum(1 for r in results.values() if r["price"] is None and r["pe_ratio"] is None)
    logger.info("Fetched fundamentals for %d tickers (%d unavailable)", len(unique_tickers), missing)
    rows = [results[ticker] for ticker in unique_tickers]
    return pd.DataFrame(rows, columns=OUTPUT_COLUMNS)
