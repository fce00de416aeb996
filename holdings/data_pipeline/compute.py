from __future__ import annotations

import logging
import re

import pandas as pd

from holdings.data_pipeline.reader import RAW_COLUMNS


logger = logging.getLogger(__name__)

NUMERIC_COLUMNS = [
    "purchase_price",
    "qty",
    "investment",
    "cmp",
    "present_value",
    "gain_loss",
    "pe_ratio",
    "earnings",
    "revenue",
]
HEADER_LABELS = {"particulars", "stock name", "name"}
DEFAULT_SECTOR = "Other"
OUTPUT_COLUMNS = [
    "name",
    "symbol",
    "ticker",
    "exchange",
    "sector",
    "purchase_price",
    "qty",
    "investment",
    "portfolio_percent",
    "cmp",
    "present_value",
    "gain_loss",
    "gain_loss_pct",
    "pe_ratio",
    "earnings",
    "price_source",
    "pe_source",
    "earnings_source",
]
_NUMBER_NOISE = re.compile(r"[,\s₹$%]")


def to_number(value) -> float:
    if value is None or isinstance(value, bool):
        return float("nan")
    if isinstance(value, str):
        cleaned = _NUMBER_NOISE.sub("", value)
        if not cleaned or cleaned.upper() == "N/A":
            return float("nan")
        value = cleaned
    try:
        return float(value)
    except (TypeError, ValueError):
        return float("nan")


def coerce_numeric(series: pd.Series) -> pd.Series:
    return pd.to_numeric(series.map(to_number), errors="coerce").astype(float)


def _clean_name(value) -> str:
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return ""
    return str(value).strip()


def _sector_heading(name: str) -> str | None:
    if not name.lower().endswith("sector"):
        return None
    label = name[: -len("sector")].strip()
    return label or None


def filter_valid_rows(raw: pd.DataFrame) -> pd.DataFrame:
    """Keep holding rows only, tagging each with the sector heading above it.

    Sector heading rows (e.g. "Financial Sector") carry no investment; they
    are dropped from the output but set the sector of the rows that follow.
    """
    records: list[dict] = []
    current_sector = DEFAULT_SECTOR
    for row in raw.to_dict(orient="records"):
        name = _clean_name(row.get("name"))
        investment = to_number(row.get("investment"))
        has_investment = pd.notna(investment) and investment > 0

        if not has_investment:
            heading = _sector_heading(name)
            if heading:
                current_sector = heading
            continue
        if not name or name.lower() in HEADER_LABELS:
            continue

        records.append({**row, "name": name, "sector": current_sector})

    return pd.DataFrame(records, columns=RAW_COLUMNS + ["sector"])


def normalize_holdings(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    for col in NUMERIC_COLUMNS:
        if col in out.columns:
            out[col] = coerce_numeric(out[col])
    return out


def _missing(series: pd.Series) -> pd.Series:
    return series.isna() | (series == 0)


def tickers_needing_fetch(df: pd.DataFrame) -> list[str]:
    if df.empty:
        return []
    needs = _missing(df["pe_ratio"]) | _missing(df["earnings"]) | _missing(df["cmp"])
    tickers = df.loc[needs, "ticker"].dropna().tolist()
    return list(dict.fromkeys(t for t in tickers if t))


def _merge_figure(sheet: pd.Series, fetched: pd.Series) -> tuple[pd.Series, pd.Series]:
    fetched = pd.to_numeric(fetched, errors="coerce").astype(float)
    sheet_ok = ~_missing(sheet)
    value = sheet.where(sheet_ok, fetched)
    source = pd.Series("unavailable", index=sheet.index, dtype=object)
    source = source.mask(fetched.notna(), "yahoo_finance")
    source = source.mask(sheet_ok, "sheet")
    return value, source


def enrich_holdings(holdings: pd.DataFrame, market: pd.DataFrame) -> pd.DataFrame:
    fetched = market.rename(
        columns={
            "price": "fetched_price",
            "pe_ratio": "fetched_pe_ratio",
            "earnings": "fetched_earnings",
        }
    )
    merged = holdings.merge(fetched, on="ticker", how="left")

    merged["cmp"], merged["price_source"] = _merge_figure(merged["cmp"], merged["fetched_price"])
    merged["pe_ratio"], merged["pe_source"] = _merge_figure(merged["pe_ratio"], merged["fetched_pe_ratio"])
    merged["earnings"], merged["earnings_source"] = _merge_figure(
        merged["earnings"], merged["fetched_earnings"]
    )

    merged["present_value"] = merged["present_value"].where(
        merged["present_value"].notna(),
        merged["qty"] * merged["cmp"],
    )
    merged["gain_loss"] = merged["gain_loss"].where(
        merged["gain_loss"].notna(),
        merged["present_value"] - merged["investment"],
    )
    merged["gain_loss_pct"] = (merged["gain_loss"] / merged["investment"] * 100).round(2)

    total_investment = merged["investment"].sum()
    if total_investment > 0:
        merged["portfolio_percent"] = (merged["investment"] / total_investment * 100).round(2)
    else:
        merged["portfolio_percent"] = 0.0

    unavailable = int((merged["price_source"] == "unavailable").sum())
    if unavailable:
        logger.warning("%d of %d holdings have no current market price", unavailable, len(merged))
    return merged[OUTPUT_COLUMNS]
