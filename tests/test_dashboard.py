from __future__ import annotations

import unittest
from types import SimpleNamespace

from holdings import dashboard
from sample_data import enriched_frame


class _Column:
    def __enter__(self):
        return self

    def __exit__(self, *exc) -> bool:
        return False


class DashboardTests(unittest.TestCase):
    def setUp(self) -> None:
        self.calls: list[tuple[str, tuple]] = []
        self.original_st = dashboard.st

        def record(kind: str):
            return lambda *args, **kwargs: self.calls.append((kind, args))

        dashboard.st = SimpleNamespace(
            markdown=record("markdown"),
            dataframe=record("dataframe"),
            subheader=record("subheader"),
            caption=record("caption"),
            warning=record("warning"),
            info=record("info"),
            columns=lambda spec: [_Column() for _ in range(spec if isinstance(spec, int) else len(spec))],
        )

    def tearDown(self) -> None:
        dashboard.st = self.original_st

    def _kinds(self, kind: str) -> list[tuple]:
        return [args for k, args in self.calls if k == kind]

    def test_render_summary_cards_formats_totals(self) -> None:
        summary = {
            "total_investment": 200000.0,
            "total_revenue": 0.0,
            "total_gain": 1500.5,
            "total_loss": 250.0,
            "overall_return": -1.25,
            "is_gain": False,
        }
        dashboard.render_summary_cards(summary)
        html = " ".join(args[0] for args in self._kinds("markdown"))
        self.assertIn("₹200,000.00", html)
        self.assertIn("+₹1,500.50", html)
        self.assertIn("-₹250.00", html)
        self.assertIn("-1.25%", html)

    def test_render_data_quality_warns_about_missing_prices(self) -> None:
        holdings = enriched_frame(
            [
                {"name": "A", "price_source": "sheet"},
                {"name": "B", "price_source": "unavailable"},
            ]
        )
        dashboard.render_data_quality(holdings, fetch_error="timeout")
        warnings = [args[0] for args in self._kinds("warning")]
        self.assertEqual(len(warnings), 2)
        self.assertIn("timeout", warnings[0])
        self.assertIn("1/2", warnings[1])

    def test_render_data_quality_handles_empty_holdings(self) -> None:
        dashboard.render_data_quality(enriched_frame([]), fetch_error=None)
        self.assertEqual(self._kinds("warning"), [])
        self.assertEqual(len(self._kinds("caption")), 1)

    def test_render_sector_summary_skips_empty_and_renders_rows(self) -> None:
        from holdings.data_pipeline.aggregate import aggregate_by_sector

        dashboard.render_sector_summary(aggregate_by_sector(enriched_frame([])))
        self.assertEqual(self.calls, [])

        sectors = aggregate_by_sector(
            enriched_frame([{"name": "A", "sector": "Tech", "investment": 10.0, "gain_loss": 1.0}])
        )
        dashboard.render_sector_summary(sectors)
        shown = self._kinds("dataframe")[0][0]
        self.assertListEqual(list(shown.columns), list(dashboard.SECTOR_TABLE_COLUMNS.values()))

    def test_figures_follow_series_colors(self) -> None:
        allocation = [{"name": "A", "value": 10.0, "investment": 10.0, "color": "#3B82F6", "percent": 1.0}]
        pie = dashboard.allocation_figure(allocation)
        self.assertEqual(list(pie.data[0].marker.colors), ["#3B82F6"])

        bars = dashboard.gain_loss_figure(
            [
                {"name": "A", "full_name": "A", "value": 5.0, "is_gain": True},
                {"name": "B", "full_name": "B", "value": -5.0, "is_gain": False},
            ]
        )
        self.assertEqual(list(bars.data[0].marker.color), [dashboard.GAIN_COLOR, dashboard.LOSS_COLOR])

    def test_format_helpers(self) -> None:
        self.assertEqual(dashboard.format_inr(None), "N/A")
        self.assertEqual(dashboard.format_inr(1234.5), "₹1,234.50")
        self.assertEqual(dashboard.format_pct_signed(2.5), "+2.50%")


if __name__ == "__main__":
    unittest.main()
