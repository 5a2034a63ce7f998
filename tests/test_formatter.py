from __future__ import annotations

import json
from datetime import date

import pytest

from order_dashboard.data_sources.base import OrderRecord, ProductOrders
from order_dashboard.metrics.calculations import build_dashboard_summary
from order_dashboard.reporting.formatter import (
    format_currency,
    format_percent,
    format_text_report,
    summary_to_dict,
)

NNBSP = "\u202f"


class TestFormatCurrency:
    @pytest.mark.parametrize(
        "amount, expected",
        [
            (1234.5, f"1{NNBSP}234,5 DZD"),
            (1000, f"1{NNBSP}000 DZD"),
            (1234567.891, f"1{NNBSP}234{NNBSP}567,89 DZD"),
            (999.999, f"1{NNBSP}000 DZD"),
            (-250.756, "-250,76 DZD"),
            (0, "0 DZD"),
            (-0.001, "0 DZD"),
            (12.3, "12,3 DZD"),
        ],
    )
    def test_grouping_and_fraction_digits(self, amount: float, expected: str) -> None:
        assert format_currency(amount) == expected

    def test_currency_code_suffix(self) -> None:
        assert format_currency(5, "EUR") == "5 EUR"


@pytest.mark.parametrize(
    "value, expected",
    [(66.6666, "66.7%"), (60, "60.0%"), (0, "0.0%"), (100.0, "100.0%")],
)
def test_format_percent(value: float, expected: str) -> None:
    assert format_percent(value) == expected


@pytest.fixture()
def summary():
    products = [
        ProductOrders(
            name="Gant",
            orders=[
                OrderRecord(reference="1", date="01/01/2024", status="completed", net_profit=1500.0),
                OrderRecord(reference="2", date="02/01/2024", status="confirmer"),
                OrderRecord(reference="3", date="03/01/2024", status="failed"),
            ],
        )
    ]
    return build_dashboard_summary(
        source_name="test",
        products=products,
        ad_spend={"Gant": 2000.0},
        start=date(2024, 1, 1),
    )


class TestSummaryToDict:
    def test_is_json_serializable(self, summary) -> None:
        payload = summary_to_dict(summary)

        assert json.loads(json.dumps(payload)) == payload

    def test_window_and_totals(self, summary) -> None:
        payload = summary_to_dict(summary)

        assert payload["window"] == {"start": "2024-01-01", "end": ""}
        assert payload["totals"] == {
            "total_orders": 3,
            "delivered_count": 1,
            "returned_count": 1,
            "net_profit": -500.0,
        }
        product = payload["products"][0]
        assert product["product_name"] == "Gant"
        assert product["confirmation_rate"] == pytest.approx(33.3333)
        assert product["delivery_rate"] == pytest.approx(66.6667)


class TestTextReport:
    def test_contains_cards_and_summary(self, summary) -> None:
        report = format_text_report(summary)

        assert "Window: 2024-01-01 to *" in report
        assert "[Gant]" in report
        assert "Confirmation 33.3%" in report
        assert "Delivery 66.7%" in report
        assert "Return 33.3%" in report
        assert f"Gross profit 1{NNBSP}500 DZD" in report
        assert f"Ad spend - 2{NNBSP}000 DZD" in report
        assert "Net profit -500 DZD" in report
        assert report.splitlines()[-1].startswith("Summary (all products): Orders 3, Delivered 1, Returned 1")

    def test_empty_summary(self) -> None:
        report = format_text_report(build_dashboard_summary(source_name="test", products=[], ad_spend={}))

        assert "Window: all dates" in report
        assert "No product data available." in report
