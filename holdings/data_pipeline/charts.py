from __future__ import annotations

import pandas as pd


ALLOCATION_COLORS = [
    "#3B82F6",
    "#8B5CF6",
    "#10B981",
    "#F59E0B",
    "#EF4444",
    "#06B6D4",
    "#EC4899",
    "#84CC16",
]
LABEL_MAX_CHARS = 12
MOVERS_PER_SIDE = 3


def short_label(name: str, max_chars: int = LABEL_MAX_CHARS) -> str:
    return name[:max_chars] + "..." if len(name) > max_chars else name


def build_allocation_series(df: pd.DataFrame, top_n: int = 8) -> list[dict]:
    """Top holdings by investment, with each slice's share of the top-N total."""
    view = df.assign(investment=df["investment"].fillna(0.0))
    top = view.sort_values("investment", ascending=False, kind="stable").head(top_n)
    top_sum = float(top["investment"].sum())

    series: list[dict] = []
    for rank, row in enumerate(top.itertuples(index=False)):
        investment = float(row.investment)
        series.append(
            {
                "name": row.name,
                "value": investment,
                "investment": investment,
                "color": ALLOCATION_COLORS[rank % len(ALLOCATION_COLORS)],
                "percent": investment / top_sum if top_sum > 0 else 0.0,
            }
        )
    return series


def _gain_loss_point(name: str, value: float) -> dict:
    return {
        "name": short_label(name),
        "full_name": name,
        "value": value,
        "is_gain": value > 0,
    }


def build_gain_loss_series(df: pd.DataFrame, limit: int = 5) -> list[dict]:
    """Largest movers by absolute gain/loss, mixing gainers and losers when both exist."""
    view = df.assign(gain_loss=df["gain_loss"].fillna(0.0))
    view = view.assign(abs_gain_loss=view["gain_loss"].abs())
    ranked = view.sort_values("abs_gain_loss", ascending=False, kind="stable")

    gains = ranked[ranked["gain_loss"] > 0].head(MOVERS_PER_SIDE)
    losses = ranked[ranked["gain_loss"] < 0].head(MOVERS_PER_SIDE)
    if not gains.empty and not losses.empty:
        picked = pd.concat([gains, losses]).sort_values("abs_gain_loss", ascending=False, kind="stable")
    else:
        picked = ranked

    return [
        _gain_loss_point(row.name, float(row.gain_loss))
        for row in picked.head(limit).itertuples(index=False)
    ]
