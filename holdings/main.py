from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import pandas as pd

from holdings import config
from holdings.data_pipeline.aggregate import aggregate_by_sector, build_summary, total_revenue
from holdings.data_pipeline.charts import build_allocation_series, build_gain_loss_series
from holdings.data_pipeline.compute import (
    enrich_holdings,
    filter_valid_rows,
    normalize_holdings,
    tickers_needing_fetch,
)
from holdings.data_pipeline.market_fetch import empty_market_data, fetch_market_data
from holdings.data_pipeline.reader import read_holdings_sheet
from holdings.data_pipeline.ticker_builder import build_yahoo_tickers


logger = logging.getLogger(__name__)


def frame_records(df: pd.DataFrame) -> list[dict]:
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


def run_pipeline(
    path: str | Path,
    allow_online_fetch: bool = True,
    max_workers: int = config.DEFAULT_FETCH_WORKERS,
) -> dict:
    raw = read_holdings_sheet(path)
    holdings_df = build_yahoo_tickers(normalize_holdings(filter_valid_rows(raw)))
    tickers = tickers_needing_fetch(holdings_df)

    fetch_error = None
    if allow_online_fetch and tickers:
        try:
            market_df = fetch_market_data(tickers, max_workers=max_workers)
        except Exception as exc:
            logger.warning("Market data fetch failed; continuing with spreadsheet figures: %s", exc)
            fetch_error = str(exc)
            market_df = empty_market_data(tickers)
    else:
        market_df = empty_market_data(tickers)

    enriched = enrich_holdings(holdings_df, market_df)
    logger.info("Enriched %d holdings (%d tickers queried)", len(enriched), len(tickers))

    return {
        "holdings": enriched,
        "market": market_df,
        "summary": build_summary(enriched, total_revenue(raw)),
        "sectors": aggregate_by_sector(enriched),
        "allocation": build_allocation_series(enriched),
        "gain_loss": build_gain_loss_series(enriched),
        "fetch_error": fetch_error,
    }


def views_to_json(data: dict) -> str:
    payload = {
        "summary": data["summary"],
        "sectors": frame_records(data["sectors"]),
        "charts": {
            "pie_chart": data["allocation"],
            "line_chart": data["gain_loss"],
        },
        "holdings": frame_records(data["holdings"]),
    }
    return json.dumps(payload, indent=2)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Enrich a holdings workbook with live market data.")
    parser.add_argument("--workbook", default=None, help="Path to the holdings .xlsx file.")
    parser.add_argument("--offline", action="store_true", help="Skip market data fetches.")
    parser.add_argument("--json", action="store_true", help="Print every view as JSON.")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)

    try:
        data = run_pipeline(
            args.workbook or config.workbook_path(),
            allow_online_fetch=not (args.offline or config.offline_mode()),
            max_workers=config.fetch_workers(),
        )
    except (OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    if args.json:
        print(views_to_json(data))
        return 0

    print(json.dumps(data["summary"], indent=2))
    print(data["sectors"].to_string(index=False))
    print(data["holdings"].head())
    return 0


if __name__ == "__main__":
    sys.exit(main())
