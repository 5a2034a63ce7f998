"""将表格导出的 CSV 文本解析为订单记录与广告花费。"""

from __future__ import annotations

import math
import re
from typing import Iterable, List, Optional, Sequence

from .base import AdSpend, OrderRecord

HEADER_REFERENCE = "Ref"
MIN_ORDER_FIELDS = 9
# DASH 表中 K 列为商品名，L 列为花费。
AD_SPEND_NAME_COLUMN = 10
AD_SPEND_VALUE_COLUMN = 11

_LEADING_NUMBER = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def to_number(raw: Optional[str]) -> float:
    """
    功能说明:
        读取文本开头的数字部分，无法识别时返回 0。
    参数:
        raw (Optional[str]): 单元格文本。
    返回:
        float: 解析出的数值。
    """
    if not raw:
        return 0.0
    match = _LEADING_NUMBER.match(raw.strip())
    if not match:
        return 0.0
    value = float(match.group(0))
    if math.isnan(value) or math.isinf(value):
        return 0.0
    return value


def split_csv_line(line: str) -> List[str]:
    """
    功能说明:
        按逗号拆分一行，双引号内的逗号不拆分；引号本身不保留，字段去除首尾空白。
    参数:
        line (str): 单行文本。
    返回:
        List[str]: 字段列表。
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    for char in line:
        if char == '"':
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
    fields.append("".join(current).strip())
    return fields


def parse_csv(text: str) -> List[List[str]]:
    """将整段 CSV 文本拆分为行与字段。"""
    return [split_csv_line(line) for line in text.strip().split("\n")]


def parse_order_row(fields: Sequence[str]) -> Optional[OrderRecord]:
    """
    功能说明:
        将一行字段转换为订单记录，字段不足或编号为空/表头时返回 None。
    参数:
        fields (Sequence[str]): 按列顺序排列的字段。
    返回:
        Optional[OrderRecord]: 有效订单或 None。
    """
    if len(fields) < MIN_ORDER_FIELDS:
        return None
    reference, day, client, phone, region, quantity, sale_price, net_profit, status = fields[:MIN_ORDER_FIELDS]
    if not reference or reference == HEADER_REFERENCE:
        return None
    return OrderRecord(
        reference=reference,
        date=day,
        client=client,
        phone=phone,
        region=region,
        quantity=to_number(quantity),
        sale_price=to_number(sale_price),
        net_profit=to_number(net_profit),
        status=(status or "").strip().lower(),
    )


def parse_orders_csv(text: str) -> List[OrderRecord]:
    """
    功能说明:
        解析商品工作表导出的 CSV，跳过首行表头并丢弃无效行。
    参数:
        text (str): CSV 文本。
    返回:
        List[OrderRecord]: 有效订单列表。
    """
    orders: List[OrderRecord] = []
    for fields in parse_csv(text)[1:]:
        order = parse_order_row(fields)
        if order is not None:
            orders.append(order)
    return orders


def parse_ad_spend_csv(text: str, products: Iterable[str] = ()) -> AdSpend:
    """
    功能说明:
        从汇总表中读取每个商品的广告花费，未出现的已知商品补 0。
    参数:
        text (str): 汇总表 CSV 文本。
        products (Iterable[str]): 已知商品名称。
    返回:
        AdSpend: 商品名到花费的映射。
    """
    ad_spend: AdSpend = {}
    for fields in parse_csv(text)[1:]:
        if len(fields) <= AD_SPEND_VALUE_COLUMN:
            continue
        name = fields[AD_SPEND_NAME_COLUMN].strip()
        spend = fields[AD_SPEND_VALUE_COLUMN]
        if name and spend:
            ad_spend[name] = to_number(spend)
    for product in products:
        ad_spend.setdefault(product, 0.0)
    return ad_spend


def zero_ad_spend(products: Iterable[str]) -> AdSpend:
    return {product: 0.0 for product in products}
