from __future__ import annotations

import pandas as pd


EXCHANGE_SUFFIX_MAP = {
    "NSE": ".NS",
    "BSE": ".BO",
}


def normalize_symbol(symbol) -> str:
    if symbol is None or (not isinstance(symbol, str) and pd.isna(symbol)):
        return ""
    if isinstance(symbol, float) and symbol.is_integer():
        return str(int(symbol))
    return str(symbol).strip()


def classify_exchange(symbol) -> str:
    text = normalize_symbol(symbol).upper()
    for exchange, suffix in EXCHANGE_SUFFIX_MAP.items():
        if text.endswith(suffix.upper()):
            return exchange
    # BSE scrip codes are numeric, NSE symbols are not.
    return "BSE" if text.isdigit() else "NSE"


def _to_ticker(symbol: str, exchange: str) -> str | None:
    if not symbol:
        return None
    if "." in symbol:
        return symbol
    return symbol.upper() + EXCHANGE_SUFFIX_MAP[exchange]


def build_yahoo_tickers(df: pd.DataFrame) -> pd.DataFrame:
    result = df.copy()
    symbols = result["symbol"].map(normalize_symbol)
    result["symbol"] = symbols
    result["exchange"] = symbols.map(classify_exchange)
    result["ticker"] = [
        _to_ticker(symbol, exchange)
        for symbol, exchange in zip(symbols, result["exchange"])
    ]
    return result
