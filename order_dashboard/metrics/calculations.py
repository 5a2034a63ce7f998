"""提供单个商品 KPI 及全部商品汇总的计算逻辑。"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List, Mapping, Optional, Sequence

from ..data_sources.base import OrderRecord, OrderStatus, ProductOrders
from .date_filter import filter_by_date

MAX_RATE = 100.0


@dataclass(frozen=True)
class ProductMetrics:
    """
    记录单个商品在一次计算中的核心指标。

    属性:
        product_name (str): 商品名称。
        total_orders (int): 过滤后的订单总数。
        confirmed_count (int): 状态为已确认的订单数。
        effective_confirmed_count (int): max(已确认, 已送达)，作为确认口径的分母。
        delivered_count (int): 状态为已送达的订单数。
        returned_count (int): 状态为退回的订单数。
        confirmation_rate (float): 确认率，0-100。
        delivery_rate (float): 送达率，0-100，两种分母比值的平均。
        return_rate (float): 退回率，0-100。
        gross_profit (float): 已送达订单的净利润合计。
        ad_spend (float): 广告花费。
        net_profit (float): gross_profit - ad_spend，可为负。
    """

    product_name: str
    total_orders: int
    confirmed_count: int
    effective_confirmed_count: int
    delivered_count: int
    returned_count: int
    confirmation_rate: float
    delivery_rate: float
    return_rate: float
    gross_profit: float
    ad_spend: float
    net_profit: float


@dataclass(frozen=True)
class DashboardTotals:
    """全部商品的汇总值。"""

    total_orders: int
    delivered_count: int
    returned_count: int
    net_profit: float


@dataclass
class DashboardSummary:
    """
    封装仪表盘汇总结果，供前端或导出使用。

    属性:
        start (Optional[date]): 过滤起始日期，None 表示无下界。
        end (Optional[date]): 过滤结束日期，None 表示无上界。
        source_name (str): 数据来源名称。
        products (List[ProductMetrics]): 按数据源顺序排列的商品指标。
        totals (DashboardTotals): 汇总值。
    """

    start: Optional[date]
    end: Optional[date]
    source_name: str
    products: List[ProductMetrics]
    totals: DashboardTotals


def compute_metrics(
    product_name: str,
    orders: Sequence[OrderRecord],
    ad_spend: Optional[float] = 0.0,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> ProductMetrics:
    """
    功能说明:
        计算单个商品的确认率、送达率、退回率与扣除广告后的利润。
        纯函数，任何输入都返回确定的数值，不抛出异常。
    参数:
        product_name (str): 商品名称。
        orders (Sequence[OrderRecord]): 该商品的全部订单。
        ad_spend (Optional[float]): 广告花费，None 视为 0。
        start (Optional[date]): 过滤起始日期（含）。
        end (Optional[date]): 过滤结束日期（含）。
    返回:
        ProductMetrics: 计算结果。
    """
    filtered = filter_by_date(orders, start, end)

    total_orders = len(filtered)
    confirmed_count = 0
    delivered_count = 0
    returned_count = 0
    gross_profit = 0.0
    for order in filtered:
        tag = order.status_tag
        if tag is OrderStatus.CONFIRMED:
            confirmed_count += 1
        elif tag is OrderStatus.DELIVERED:
            delivered_count += 1
            gross_profit += order.net_profit
        elif tag is OrderStatus.RETURNED:
            returned_count += 1

    # 源数据中送达数可能多于确认数，送达的订单必然经过确认。
    effective_confirmed = max(confirmed_count, delivered_count)
    spend = float(ad_spend or 0.0)

    return ProductMetrics(
        product_name=product_name,
        total_orders=total_orders,
        confirmed_count=confirmed_count,
        effective_confirmed_count=effective_confirmed,
        delivered_count=delivered_count,
        returned_count=returned_count,
        confirmation_rate=_rate(effective_confirmed, total_orders),
        delivery_rate=_delivery_rate(delivered_count, total_orders, effective_confirmed),
        return_rate=_rate(returned_count, total_orders),
        gross_profit=gross_profit,
        ad_spend=spend,
        net_profit=gross_profit - spend,
    )


def build_dashboard_summary(
    *,
    source_name: str,
    products: Sequence[ProductOrders],
    ad_spend: Mapping[str, float],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> DashboardSummary:
    """
    功能说明:
        对每个商品执行 KPI 计算并汇总订单、送达、退回与最终利润。
    参数:
        source_name (str): 数据来源名称。
        products (Sequence[ProductOrders]): 各商品订单。
        ad_spend (Mapping[str, float]): 商品名到广告花费的映射。
        start (Optional[date]): 过滤起始日期。
        end (Optional[date]): 过滤结束日期。
    返回:
        DashboardSummary: 汇总后的仪表盘摘要。
    """
    metrics = [
        compute_metrics(product.name, product.orders, ad_spend.get(product.name, 0.0), start, end)
        for product in products
    ]
    totals = DashboardTotals(
        total_orders=sum(item.total_orders for item in metrics),
        delivered_count=sum(item.delivered_count for item in metrics),
        returned_count=sum(item.returned_count for item in metrics),
        net_profit=sum(item.net_profit for item in metrics),
    )
    return DashboardSummary(
        start=start,
        end=end,
        source_name=source_name,
        products=metrics,
        totals=totals,
    )


def _rate(count: int, total: int) -> float:
    """count / total * 100，total 为 0 时返回 0，并截断到 [0, 100]。"""
    if total <= 0:
        return 0.0
    return _clamp(count / total * 100)


def _delivery_rate(delivered: int, total: int, effective_confirmed: int) -> float:
    """
    送达率 = (送达/总数 + 送达/有效确认数) / 2 * 100。

    两个比值口径不同，保持平均，不要合并为单一比值。
    """
    if delivered == 0:
        return 0.0
    ratio_to_total = delivered / total if total > 0 else 0.0
    ratio_to_confirmed = delivered / effective_confirmed if effective_confirmed > 0 else 0.0
    return _clamp((ratio_to_total + ratio_to_confirmed) / 2 * 100)


def _clamp(value: float) -> float:
    return max(0.0, min(MAX_RATE, value))
