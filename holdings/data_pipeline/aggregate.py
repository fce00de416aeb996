from __future__ import annotations

import pandas as pd

from holdings.data_pipeline.compute import (
    DEFAULT_SECTOR,
    HEADER_LABELS,
    coerce_numeric,
)


SECTOR_COLUMNS = [
    "sector",
    "investment",
    "present_value",
    "gain_loss",
    "count",
    "return_percent",
]


def _pct(numerator: float, denominator: float) -> float:
    if not denominator or pd.isna(denominator) or denominator <= 0:
        return 0.0
    return round(float(numerator) / float(denominator) * 100, 2)


def total_revenue(raw: pd.DataFrame) -> float:
    if raw.empty:
        return 0.0
    names = raw["name"].map(lambda v: str(v).strip() if isinstance(v, str) else "")
    named = (names != "") & ~names.str.lower().isin(HEADER_LABELS) & ~names.str.lower().str.endswith("sector")
    revenue = coerce_numeric(raw.loc[named, "revenue"])
    return float(revenue.sum())


def build_summary(df: pd.DataFrame, revenue: float = 0.0) -> dict:
    gain_loss = df["gain_loss"].fillna(0.0)
    total_investment = float(df["investment"].fillna(0.0).sum())
    total_gain_loss = float(gain_loss.sum())

    return {
        "total_investment": total_investment,
        "current_value": float(df["present_value"].fillna(0.0).sum()),
        "total_gain_loss": total_gain_loss,
        "total_gain": float(gain_loss[gain_loss > 0].sum()),
        "total_loss": float(gain_loss[gain_loss < 0].abs().sum()),
        "total_revenue": float(revenue),
        "overall_return": _pct(total_gain_loss, total_investment),
        "is_gain": total_gain_loss > 0,
        "holding_count": int(len(df)),
    }


def aggregate_by_sector(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return pd.DataFrame(columns=SECTOR_COLUMNS)

    view = df.copy()
    view["sector"] = view["sector"].fillna("").astype(str).str.strip().replace("", DEFAULT_SECTOR)
    for col in ["investment", "present_value", "gain_loss"]:
        view[col] = view[col].fillna(0.0)

    grouped = (
        view.groupby("sector", as_index=False, sort=False)
        .agg(
            investment=("investment", "sum"),
            present_value=("present_value", "sum"),
            gain_loss=("gain_loss", "sum"),
            count=("name", "size"),
        )
    )
    grouped["return_percent"] = [
        _pct(gl, inv) for gl, inv in zip(grouped["gain_loss"], grouped["investment"])
    ]
    grouped = grouped.sort_values("investment", ascending=False, kind="stable")
    return grouped[SECTOR_COLUMNS].reset_index(drop=True)
