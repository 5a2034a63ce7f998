"""按闭区间日期过滤订单。"""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..data_sources.base import OrderRecord
from ..utils.dates import parse_order_date


def is_in_range(order: OrderRecord, start: Optional[date], end: Optional[date]) -> bool:
    """
    功能说明:
        判断订单日期是否落在 [start, end] 内，任一边界可为空。
        日期无法解析的订单永远不满足带边界的查询。
    参数:
        order (OrderRecord): 订单记录。
        start (Optional[date]): 起始日期（含）。
        end (Optional[date]): 结束日期（含）。
    返回:
        bool: 是否在范围内。
    """
    if start is None and end is None:
        return True
    order_day = parse_order_date(order.date)
    if order_day is None:
        return False
    if start is not None and order_day < start:
        return False
    if end is not None and order_day > end:
        return False
    return True


def filter_by_date(
    orders: Sequence[OrderRecord],
    start: Optional[date],
    end: Optional[date],
) -> Sequence[OrderRecord]:
    """
    功能说明:
        过滤订单；两个边界都为空时原样返回同一个对象，调用方据此判断未发生过滤。
    参数:
        orders (Sequence[OrderRecord]): 订单列表。
        start (Optional[date]): 起始日期（含）。
        end (Optional[date]): 结束日期（含）。
    返回:
        Sequence[OrderRecord]: 过滤后的订单。
    """
    if start is None and end is None:
        return orders
    return [order for order in orders if is_in_range(order, start, end)]
