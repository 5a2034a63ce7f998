from __future__ import annotations

from typing import Callable, List

import pytest

from order_dashboard.data_sources.base import OrderRecord


def _make_orders(
    *,
    confirmed: int = 0,
    delivered: int = 0,
    returned: int = 0,
    other: int = 0,
    date: str = "15/01/2024",
    delivered_profit: float = 0.0,
) -> List[OrderRecord]:
    orders: List[OrderRecord] = []
    for status, count in (
        ("confirmer", confirmed),
        ("completed", delivered),
        ("failed", returned),
        ("shipped", other),
    ):
        for idx in range(count):
            orders.append(
                OrderRecord(
                    reference=f"{status}-{idx}",
                    date=date,
                    net_profit=delivered_profit if status == "completed" else 50.0,
                    status=status,
                )
            )
    return orders


@pytest.fixture()
def make_orders() -> Callable[..., List[OrderRecord]]:
    """Build order lists by status count; non-delivered rows carry a profit that must be ignored."""
    return _make_orders
