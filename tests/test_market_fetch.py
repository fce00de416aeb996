from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest import mock

import pandas as pd

from holdings.data_pipeline import market_fetch
from holdings.data_pipeline.market_fetch import (
    OUTPUT_COLUMNS,
    empty_market_data,
    fetch_fundamentals,
    fetch_market_data,
)


def _fake_ticker(infos: dict):
    def factory(ticker: str):
        info = infos[ticker]
        if isinstance(info, Exception):
            raise info
        return SimpleNamespace(info=info)

    return factory


class FetchFundamentalsTests(unittest.TestCase):
    def test_fetch_fundamentals_reads_price_pe_and_eps(self) -> None:
        infos = {"INFY.NS": {"currentPrice": 1510.4, "trailingPE": 24.3, "trailingEps": 62.1}}
        with mock.patch.object(market_fetch.yf, "Ticker", side_effect=_fake_ticker(infos)):
            result = fetch_fundamentals("INFY.NS")
        self.assertEqual(result, {"ticker": "INFY.NS", "price": 1510.4, "pe_ratio": 24.3, "earnings": 62.1})

    def test_fetch_fundamentals_uses_fallback_fields(self) -> None:
        infos = {"TCS.NS": {"regularMarketPrice": 3900, "epsTrailingTwelveMonths": "125.5"}}
        with mock.patch.object(market_fetch.yf, "Ticker", side_effect=_fake_ticker(infos)):
            result = fetch_fundamentals("TCS.NS")
        self.assertEqual(result["price"], 3900.0)
        self.assertEqual(result["earnings"], 125.5)
        self.assertIsNone(result["pe_ratio"])

    def test_fetch_fundamentals_marks_non_numeric_values_unavailable(self) -> None:
        infos = {"X.NS": {"currentPrice": "Infinity", "trailingPE": float("nan"), "trailingEps": "n/a"}}
        with mock.patch.object(market_fetch.yf, "Ticker", side_effect=_fake_ticker(infos)):
            result = fetch_fundamentals("X.NS")
        self.assertIsNone(result["price"])
        self.assertIsNone(result["pe_ratio"])
        self.assertIsNone(result["earnings"])

    def test_fetch_fundamentals_returns_sentinels_on_error(self) -> None:
        infos = {"BAD.NS": RuntimeError("HTTP 404")}
        with mock.patch.object(market_fetch.yf, "Ticker", side_effect=_fake_ticker(infos)):
            with self.assertLogs(market_fetch.logger, level="WARNING"):
                result = fetch_fundamentals("BAD.NS")
        self.assertEqual(result, {"ticker": "BAD.NS", "price": None, "pe_ratio": None, "earnings": None})

    def test_fetch_fundamentals_skips_empty_ticker(self) -> None:
        with mock.patch.object(market_fetch.yf, "Ticker") as ticker_cls:
            result = fetch_fundamentals("")
        ticker_cls.assert_not_called()
        self.assertIsNone(result["price"])


class FetchMarketDataTests(unittest.TestCase):
    def test_fetch_market_data_returns_one_row_per_unique_ticker_in_order(self) -> None:
        infos = {
            "A.NS": {"currentPrice": 10.0, "trailingPE": 5.0, "trailingEps": 2.0},
            "B.BO": RuntimeError("boom"),
            "C.NS": {"currentPrice": 30.0},
        }
        with mock.patch.object(market_fetch.yf, "Ticker", side_effect=_fake_ticker(infos)):
            df = fetch_market_data(["A.NS", "B.BO", "A.NS", None, "C.NS"], max_workers=3)

        self.assertListEqual(list(df.columns), OUTPUT_COLUMNS)
        self.assertListEqual(df["ticker"].tolist(), ["A.NS", "B.BO", "C.NS"])
        self.assertEqual(df.iloc[0]["pe_ratio"], 5.0)
        self.assertTrue(pd.isna(df.iloc[1]["price"]))
        self.assertEqual(df.iloc[2]["price"], 30.0)

    def test_fetch_market_data_empty_input(self) -> None:
        df = fetch_market_data([])
        self.assertListEqual(list(df.columns), OUTPUT_COLUMNS)
        self.assertTrue(df.empty)

    def test_empty_market_data_marks_everything_unavailable(self) -> None:
        df = empty_market_data(["A.NS", "A.NS", "B.NS"])
        self.assertListEqual(df["ticker"].tolist(), ["A.NS", "B.NS"])
        self.assertTrue(df["price"].isna().all())


if __name__ == "__main__":
    unittest.main()
