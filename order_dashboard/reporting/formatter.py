"""提供仪表盘摘要的结构化与文本格式化工具。"""

from __future__ import annotations

from typing import Dict, List

from ..metrics.calculations import DashboardSummary, ProductMetrics

# fr-DZ 数字格式：窄不换行空格分组，逗号作小数点。
GROUP_SEPARATOR = "\u202f"
DECIMAL_SEPARATOR = ","


def format_currency(amount: float, currency_code: str = "DZD") -> str:
    """
    功能说明:
        按本地分组格式化金额，保留 0-2 位小数并追加货币代码。
    参数:
        amount (float): 金额。
        currency_code (str): 货币代码后缀。
    返回:
        str: 例如 ``1\u202f234,5 DZD``。
    """
    rounded = round(amount, 2)
    if rounded == 0:
        return f"0 {currency_code}"
    text = format(abs(rounded), ",.2f")
    integer_part, _, fraction = text.partition(".")
    fraction = fraction.rstrip("0")
    number = integer_part.replace(",", GROUP_SEPARATOR)
    if fraction:
        number = f"{number}{DECIMAL_SEPARATOR}{fraction}"
    sign = "-" if rounded < 0 else ""
    return f"{sign}{number} {currency_code}"


def format_percent(value: float) -> str:
    """保留一位小数并追加 ``%``。"""
    return f"{value:.1f}%"


def _product_to_dict(product: ProductMetrics) -> Dict[str, object]:
    return {
        "product_name": product.product_name,
        "total_orders": product.total_orders,
        "confirmed_count": product.confirmed_count,
        "effective_confirmed_count": product.effective_confirmed_count,
        "delivered_count": product.delivered_count,
        "returned_count": product.returned_count,
        "confirmation_rate": round(product.confirmation_rate, 4),
        "delivery_rate": round(product.delivery_rate, 4),
        "return_rate": round(product.return_rate, 4),
        "gross_profit": round(product.gross_profit, 2),
        "ad_spend": round(product.ad_spend, 2),
        "net_profit": round(product.net_profit, 2),
    }


def summary_to_dict(summary: DashboardSummary) -> Dict[str, object]:
    """
    功能说明:
        将 DashboardSummary 转换为可 JSON 序列化的字典。
    参数:
        summary (DashboardSummary): 仪表盘汇总对象。
    返回:
        Dict[str, object]: 序列化后的摘要结构，未设置的日期边界为空字符串。
    """
    return {
        "source": summary.source_name,
        "window": {
            "start": summary.start.isoformat() if summary.start else "",
            "end": summary.end.isoformat() if summary.end else "",
        },
        "totals": {
            "total_orders": summary.totals.total_orders,
            "delivered_count": summary.totals.delivered_count,
            "returned_count": summary.totals.returned_count,
            "net_profit": round(summary.totals.net_profit, 2),
        },
        "products": [_product_to_dict(product) for product in summary.products],
    }


def _format_product_block(product: ProductMetrics, currency_code: str) -> List[str]:
    """
    功能说明:
        将单个商品指标格式化为类似卡片的多行文本。
    参数:
        product (ProductMetrics): 商品指标。
        currency_code (str): 货币代码。
    返回:
        List[str]: 文本行。
    """
    return [
        f"[{product.product_name}]",
        (
            f"  Orders {product.total_orders} | Confirmed {product.effective_confirmed_count} | "
            f"Delivered {product.delivered_count} | Returned {product.returned_count}"
        ),
        (
            f"  Confirmation {format_percent(product.confirmation_rate)} | "
            f"Delivery {format_percent(product.delivery_rate)} | "
            f"Return {format_percent(product.return_rate)}"
        ),
        (
            f"  Gross profit {format_currency(product.gross_profit, currency_code)} | "
            f"Ad spend - {format_currency(product.ad_spend, currency_code)} | "
            f"Net profit {format_currency(product.net_profit, currency_code)}"
        ),
    ]


def format_text_report(summary: DashboardSummary, currency_code: str = "DZD") -> str:
    """
    功能说明:
        生成适合在控制台展示的商品指标报告。
    参数:
        summary (DashboardSummary): 仪表盘汇总对象。
        currency_code (str): 金额后缀。
    返回:
        str: 多行字符串，包含过滤窗口、各商品指标与汇总。
    """
    start = summary.start.isoformat() if summary.start else "*"
    end = summary.end.isoformat() if summary.end else "*"
    lines: List[str] = []
    if summary.start or summary.end:
        lines.append(f"Window: {start} to {end}")
    else:
        lines.append("Window: all dates")
    lines.append(f"Source: {summary.source_name}")
    if not summary.products:
        lines.append("No product data available.")
        return "\n".join(lines)

    for product in summary.products:
        lines.extend(_format_product_block(product, currency_code))

    totals = summary.totals
    lines.append(
        f"Summary (all products): Orders {totals.total_orders}, "
        f"Delivered {totals.delivered_count}, Returned {totals.returned_count}, "
        f"Net profit {format_currency(totals.net_profit, currency_code)}"
    )
    return "\n".join(lines)
