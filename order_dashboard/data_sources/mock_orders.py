"""提供可复现的模拟订单数据源，方便本地开发与测试。"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List

from ..config import AppConfig
from .base import AdSpend, OrderDataProvider, OrderRecord, ProductOrders

_STATUS_WEIGHTS = [
    ("confirmer", 0.30),
    ("completed", 0.40),
    ("failed", 0.12),
    ("annuler", 0.10),
    ("en attente", 0.08),
]
_REGIONS = ["Alger", "Oran", "Constantine", "Blida", "Setif", "Annaba"]


@dataclass
class MockOrderSettings:
    """
    控制模拟数据源行为的配置项。

    属性:
        seed (int): 伪随机种子，确保数据可复现。
        days (int): 生成订单覆盖的天数（截至 end_day）。
        orders_per_day (int): 每个商品每天的平均订单数。
        end_day (date | None): 最后一天，None 表示今天。
    """

    seed: int = 2024
    days: int = 30
    orders_per_day: int = 4
    end_day: date | None = None


class MockOrderDataProvider(OrderDataProvider):
    """
    基于线性同余发生器的可复现模拟数据源。

    生成的行与商品工作表的列保持一致，日期采用 DD/MM/YYYY 文本。
    """

    def __init__(self, products: List[str], settings: MockOrderSettings | None = None) -> None:
        self.name = "mock_orders"
        self._products = list(products)
        self._settings = settings or MockOrderSettings()

    async def fetch_all_products(self) -> List[ProductOrders]:
        return [
            ProductOrders(name=product, orders=self._generate_orders(index, product))
            for index, product in enumerate(self._products)
        ]

    async def fetch_ad_spend(self) -> AdSpend:
        rng = _PseudoRandom(self._settings.seed + 97)
        return {product: float(rng.randint(5, 40) * 500) for product in self._products}

    def _generate_orders(self, index: int, product: str) -> List[OrderRecord]:
        rng = _PseudoRandom(self._settings.seed + index + 1)
        end_day = self._settings.end_day or date.today()
        start_day = end_day - timedelta(days=max(self._settings.days, 1) - 1)
        unit_price = float(rng.randint(15, 60) * 100)
        records: List[OrderRecord] = []
        sequence = 0
        for day in _iter_days(start_day, end_day):
            # 在平均值附近上下波动，模拟每天订单量的变化。
            count = max(0, int(self._settings.orders_per_day * rng.uniform(0.4, 1.6)))
            for _ in range(count):
                sequence += 1
                quantity = 1 + rng.randint(0, 3)
                sale_price = unit_price * quantity
                records.append(
                    OrderRecord(
                        reference=f"{product[:3].upper()}-{sequence:05d}",
                        date=day.strftime("%d/%m/%Y"),
                        client=f"Client {sequence}",
                        phone=f"05{rng.randint(10000000, 99999999)}",
                        region=_REGIONS[rng.randint(0, len(_REGIONS))],
                        quantity=float(quantity),
                        sale_price=sale_price,
                        net_profit=round(sale_price * rng.uniform(0.15, 0.35), 2),
                        status=_pick_status(rng.uniform(0, 1)),
                    )
                )
        return records


def create_default_mock_source(config: AppConfig) -> MockOrderDataProvider:
    """
    功能说明:
        使用应用配置中的商品列表构建默认的模拟数据源。
    参数:
        config (AppConfig): 应用配置。
    返回:
        MockOrderDataProvider: 预配置的模拟数据源实例。
    """
    return MockOrderDataProvider(products=config.sheets.product_sheets)


def _pick_status(draw: float) -> str:
    cumulative = 0.0
    for status, weight in _STATUS_WEIGHTS:
        cumulative += weight
        if draw < cumulative:
            return status
    return _STATUS_WEIGHTS[-1][0]


def _iter_days(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


class _PseudoRandom:
    """简单的线性同余伪随机数发生器，用于生成可复现的数据。"""

    def __init__(self, seed: int) -> None:
        self._state = seed % 2147483647 or 42

    def _next(self) -> float:
        # MINSTD 参数。
        self._state = (self._state * 48271) % 2147483647
        return self._state / 2147483647

    def uniform(self, low: float, high: float) -> float:
        return low + (high - low) * self._next()

    def randint(self, low: int, high: int) -> int:
        return int(low + (high - low) * self._next())
