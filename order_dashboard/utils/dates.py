"""封装日期解析与窗口计算的常用辅助函数。"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser

_DAY_FIRST = re.compile(r"^(\d{1,2})[/-](\d{1,2})[/-](\d{4})$")
_YEAR_FIRST = re.compile(r"^(\d{4})[/-](\d{1,2})[/-](\d{1,2})$")
# 缺失的年/月/日由此补齐，不依赖当天日期。
_FALLBACK_DEFAULT = datetime(2000, 1, 1)


def _calendar_date(year: str, month: str, day: str) -> Optional[date]:
    try:
        return date(int(year), int(month), int(day))
    except ValueError:
        return None


def parse_order_date(value: Optional[str]) -> Optional[date]:
    """
    功能说明:
        解析订单表中的日期文本。依次尝试 DD/MM/YYYY（或 -）与 YYYY/MM/DD（或 -）；
        两者都不匹配时交给 dateutil 通用解析，缺失的月或日按 1 补齐。
    参数:
        value (Optional[str]): 原始日期文本。
    返回:
        Optional[date]: 解析成功的日历日期；无法解析时返回 None。
    """
    if not value:
        return None
    text = value.strip()
    match = _DAY_FIRST.match(text)
    if match:
        day, month, year = match.groups()
        return _calendar_date(year, month, day)
    match = _YEAR_FIRST.match(text)
    if match:
        year, month, day = match.groups()
        return _calendar_date(year, month, day)
    try:
        return date_parser.parse(text, default=_FALLBACK_DEFAULT).date()
    except (ValueError, OverflowError):
        return None


def parse_filter_date(value: Optional[str]) -> Optional[date]:
    """
    功能说明:
        将界面传入的 `YYYY-MM-DD` 字符串解析为日期，空字符串表示不设边界。
    参数:
        value (Optional[str]): 过滤条件文本。
    返回:
        Optional[date]: 日期或 None。
    异常:
        ValueError: 文本非空但格式不合法。
    """
    if value is None or not value.strip():
        return None
    return date.fromisoformat(value.strip())


def recent_period(days: int, today: Optional[date] = None) -> tuple[date, date]:
    """
    功能说明:
        根据给定天数返回最近的起止日期（包含当天）。
    参数:
        days (int): 包含的天数，至少为 1。
        today (Optional[date]): 视为“今天”的日期，默认取系统日期。
    返回:
        tuple[date, date]: (start, end) 日期元组。
    """
    end = today or date.today()
    start = end - timedelta(days=max(days, 1) - 1)
    return start, end
