"""
tests/test_calculations.py

Unit tests for the per-product KPI engine and the dashboard summary.

Coverage
--------
- Blended delivery rate and confirmation rate arithmetic
- Delivered-exceeds-confirmed normalization
- Unrecognized statuses diluting denominators
- Empty order sets and missing ad spend
- Bounds and invariants over a grid of status mixes
- Date filtering inside the engine
- Purity (identical inputs, identical outputs)
- Totals across products
"""

from __future__ import annotations

import itertools
from datetime import date

import pytest

from order_dashboard.data_sources.base import OrderRecord, ProductOrders
from order_dashboard.metrics.calculations import (
    _delivery_rate,
    _rate,
    build_dashboard_summary,
    compute_metrics,
)


# ---------------------------------------------------------------------------
# Rate arithmetic
# ---------------------------------------------------------------------------


class TestRateArithmetic:
    def test_rates_for_ten_orders_six_confirmed_five_delivered(self) -> None:
        assert _rate(6, 10) == pytest.approx(60.0)
        assert _delivery_rate(5, 10, 6) == pytest.approx((5 / 10 + 5 / 6) / 2 * 100)
        assert round(_delivery_rate(5, 10, 6), 1) == 66.7
        assert _rate(1, 10) == pytest.approx(10.0)

    def test_delivery_rate_zero_when_nothing_delivered(self) -> None:
        assert _delivery_rate(0, 10, 6) == 0.0

    def test_delivery_rate_with_zero_total_uses_confirmed_ratio_only(self) -> None:
        assert _delivery_rate(2, 0, 2) == pytest.approx(50.0)

    def test_rates_are_clamped(self) -> None:
        assert _rate(15, 10) == 100.0
        assert _delivery_rate(20, 10, 10) == 100.0

    def test_rate_with_zero_total(self) -> None:
        assert _rate(3, 0) == 0.0


# ---------------------------------------------------------------------------
# compute_metrics scenarios
# ---------------------------------------------------------------------------


class TestComputeMetrics:
    def test_blended_scenario_with_ad_spend(self, make_orders) -> None:
        orders = make_orders(confirmed=6, delivered=5, returned=1, other=8, delivered_profit=200.0)

        metrics = compute_metrics("Gant", orders, 200.0)

        assert metrics.total_orders == 20
        assert metrics.confirmed_count == 6
        assert metrics.effective_confirmed_count == 6
        assert metrics.delivered_count == 5
        assert metrics.returned_count == 1
        assert metrics.confirmation_rate == pytest.approx(30.0)
        assert metrics.delivery_rate == pytest.approx((5 / 20 + 5 / 6) / 2 * 100)
        assert metrics.return_rate == pytest.approx(5.0)
        assert metrics.gross_profit == pytest.approx(1000.0)
        assert metrics.ad_spend == pytest.approx(200.0)
        assert metrics.net_profit == pytest.approx(800.0)

    def test_delivered_exceeding_confirmed_uses_delivered_as_denominator(self, make_orders) -> None:
        orders = make_orders(confirmed=2, delivered=7, other=1)

        metrics = compute_metrics("Gant", orders, 0)

        assert metrics.confirmed_count == 2
        assert metrics.effective_confirmed_count == 7
        assert metrics.confirmation_rate == pytest.approx(70.0)
        assert metrics.delivery_rate == pytest.approx((7 / 10 + 7 / 7) / 2 * 100)

    def test_unrecognized_status_only_counts_in_total(self, make_orders) -> None:
        orders = make_orders(confirmed=1, delivered=1, returned=1, other=1)

        metrics = compute_metrics("Gant", orders, 0)

        assert metrics.total_orders == 4
        assert metrics.confirmed_count + metrics.delivered_count + metrics.returned_count == 3
        assert metrics.return_rate == pytest.approx(25.0)
        assert metrics.confirmation_rate == pytest.approx(25.0)

    def test_status_match_is_exact(self) -> None:
        orders = [
            OrderRecord(reference="1", date="01/01/2024", status="confirmed"),
            OrderRecord(reference="2", date="01/01/2024", status="complete"),
        ]

        metrics = compute_metrics("Gant", orders, 0)

        assert metrics.total_orders == 2
        assert metrics.confirmed_count == 0
        assert metrics.delivered_count == 0

    def test_empty_orders_degrade_to_zero(self) -> None:
        metrics = compute_metrics("Gant", [], 150.0)

        assert metrics.total_orders == 0
        assert metrics.confirmation_rate == 0.0
        assert metrics.delivery_rate == 0.0
        assert metrics.return_rate == 0.0
        assert metrics.gross_profit == 0.0
        assert metrics.net_profit == pytest.approx(-150.0)

    def test_missing_ad_spend_defaults_to_zero(self, make_orders) -> None:
        metrics = compute_metrics("Gant", make_orders(delivered=2, delivered_profit=100.0), None)

        assert metrics.ad_spend == 0.0
        assert metrics.net_profit == pytest.approx(200.0)

    def test_net_profit_can_be_negative(self, make_orders) -> None:
        metrics = compute_metrics("Gant", make_orders(delivered=1, delivered_profit=100.0), 500.0)

        assert metrics.net_profit == pytest.approx(-400.0)

    def test_identical_inputs_give_identical_outputs(self, make_orders) -> None:
        orders = make_orders(confirmed=3, delivered=2, returned=1, delivered_profit=75.0)

        first = compute_metrics("Gant", orders, 20.0, date(2024, 1, 1), date(2024, 1, 31))
        second = compute_metrics("Gant", orders, 20.0, date(2024, 1, 1), date(2024, 1, 31))

        assert first == second

    def test_no_filter_matches_unfiltered_input(self, make_orders) -> None:
        orders = make_orders(confirmed=3, delivered=2, returned=1, delivered_profit=75.0)
        orders.append(OrderRecord(reference="x", date="not a date", status="completed", net_profit=10.0))

        metrics = compute_metrics("Gant", orders, 0)

        assert metrics.total_orders == len(orders)
        assert metrics.gross_profit == pytest.approx(160.0)


class TestComputeMetricsDateRange:
    @pytest.fixture()
    def orders(self) -> list[OrderRecord]:
        return [
            OrderRecord(reference="1", date="31/12/2023", status="completed", net_profit=10.0),
            OrderRecord(reference="2", date="01/01/2024", status="completed", net_profit=20.0),
            OrderRecord(reference="3", date="2024-01-15", status="confirmer"),
            OrderRecord(reference="4", date="31-01-2024", status="failed"),
            OrderRecord(reference="5", date="01/02/2024", status="completed", net_profit=40.0),
            OrderRecord(reference="6", date="2024-13-01", status="completed", net_profit=80.0),
        ]

    def test_bounds_are_inclusive(self, orders) -> None:
        metrics = compute_metrics("Gant", orders, 0, date(2024, 1, 1), date(2024, 1, 31))

        assert metrics.total_orders == 3
        assert metrics.delivered_count == 1
        assert metrics.returned_count == 1
        assert metrics.gross_profit == pytest.approx(20.0)

    def test_unparseable_date_excluded_only_when_filtering(self, orders) -> None:
        unfiltered = compute_metrics("Gant", orders, 0)
        open_ended = compute_metrics("Gant", orders, 0, start=date(2000, 1, 1))

        assert unfiltered.total_orders == 6
        assert open_ended.total_orders == 5
        assert open_ended.gross_profit == pytest.approx(70.0)

    def test_range_with_no_orders(self, orders) -> None:
        metrics = compute_metrics("Gant", orders, 30.0, date(2030, 1, 1), date(2030, 12, 31))

        assert metrics.total_orders == 0
        assert metrics.delivery_rate == 0.0
        assert metrics.net_profit == pytest.approx(-30.0)


# ---------------------------------------------------------------------------
# Invariants over status mixes
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "confirmed, delivered, returned, other",
    list(itertools.product(range(4), repeat=4)),
)
def test_rates_bounded_and_effective_confirmed_invariant(
    make_orders, confirmed: int, delivered: int, returned: int, other: int
) -> None:
    metrics = compute_metrics(
        "Gant",
        make_orders(confirmed=confirmed, delivered=delivered, returned=returned, other=other),
        0,
    )

    for rate in (metrics.confirmation_rate, metrics.delivery_rate, metrics.return_rate):
        assert 0.0 <= rate <= 100.0
    assert metrics.effective_confirmed_count == max(metrics.confirmed_count, metrics.delivered_count)
    assert metrics.delivered_count <= metrics.effective_confirmed_count <= metrics.total_orders


# ---------------------------------------------------------------------------
# Dashboard summary
# ---------------------------------------------------------------------------


class TestDashboardSummary:
    def test_totals_sum_across_products(self, make_orders) -> None:
        products = [
            ProductOrders(name="Gant", orders=make_orders(delivered=2, returned=1, delivered_profit=100.0)),
            ProductOrders(name="Gilet de travail", orders=make_orders(confirmed=1, delivered=1, delivered_profit=300.0)),
        ]

        summary = build_dashboard_summary(
            source_name="test",
            products=products,
            ad_spend={"Gant": 50.0},
        )

        assert [item.product_name for item in summary.products] == ["Gant", "Gilet de travail"]
        assert summary.products[1].ad_spend == 0.0
        assert summary.totals.total_orders == 5
        assert summary.totals.delivered_count == 3
        assert summary.totals.returned_count == 1
        assert summary.totals.net_profit == pytest.approx(150.0 + 300.0)

    def test_empty_summary(self) -> None:
        summary = build_dashboard_summary(source_name="test", products=[], ad_spend={})

        assert summary.products == []
        assert summary.totals.total_orders == 0
        assert summary.totals.net_profit == 0
