"""订单仪表盘 MCP 服务模块，基于 FastMCP 暴露刷新与指标计算工具。"""

import argparse
import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, cast

from typing_extensions import TypedDict

from mcp.server.fastmcp import Context, FastMCP

from order_dashboard.config import AppConfig
from order_dashboard.services import (
    ServiceContext,
    compute_dashboard_metrics as _compute_dashboard_metrics,
    create_service_context,
    refresh_dashboard_data as _refresh_dashboard_data,
)


logger = logging.getLogger(__name__)
logging.basicConfig(level=os.getenv('MCP_SERVER_LOG_LEVEL', 'INFO').upper(), format='%(asctime)s [%(levelname)s] %(name)s: %(message)s')

GLOBAL_SERVICE_CONTEXT: Optional[ServiceContext] = None


class ProductOrdersPayload(TypedDict):
    name: str
    orders: int


class RefreshDashboardDataResult(TypedDict):
    source: str
    refreshed_at: Optional[str]
    error: Optional[str]
    products: List[ProductOrdersPayload]
    ad_spend: Dict[str, float]


class SummaryWindowPayload(TypedDict):
    start: str
    end: str


class SummaryTotalsPayload(TypedDict):
    total_orders: int
    delivered_count: int
    returned_count: int
    net_profit: float


class ProductMetricsPayload(TypedDict):
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


class DashboardSummaryPayload(TypedDict):
    source: str
    window: SummaryWindowPayload
    totals: SummaryTotalsPayload
    products: List[ProductMetricsPayload]


class ComputeDashboardMetricsResult(TypedDict):
    summary: DashboardSummaryPayload
    report: str
    refreshed_at: Optional[str]
    error: Optional[str]


class DashboardAppContext:
    """封装 MCP 生命周期中共享的业务依赖。

    Attributes:
        service_context (ServiceContext): 包含数据源、管道与口令门的聚合上下文。
    """

    def __init__(self, service_context: ServiceContext) -> None:
        self.service_context = service_context


@asynccontextmanager
async def app_lifespan(server: FastMCP) -> AsyncIterator[DashboardAppContext]:
    """FastMCP 生命周期钩子，创建并共享业务上下文。

    Args:
        server (FastMCP): FastMCP 框架传入的服务器实例，本实现中仅为保持签名一致。

    Yields:
        DashboardAppContext: 包含业务依赖的上下文对象，供请求期间复用。
    """

    service_context = create_service_context(AppConfig.from_env())
    global GLOBAL_SERVICE_CONTEXT
    GLOBAL_SERVICE_CONTEXT = service_context
    yield DashboardAppContext(service_context=service_context)


mcp = FastMCP(
    name="Order Dashboard",
    instructions=(
        "Expose per-product order metrics (confirmation, delivery and return rates, "
        "profit after ad spend) through MCP tools. Refresh the data, then compute "
        "metrics with an optional inclusive date range."
    ),
    lifespan=app_lifespan,
)


def _service(ctx: Context) -> ServiceContext:
    """从请求上下文里提取共享业务依赖。

    Args:
        ctx (Context): FastMCP 提供的请求上下文。

    Returns:
        ServiceContext: 预先构建的业务上下文实例。
    """

    try:
        return ctx.request_context.lifespan_context.service_context
    except (AttributeError, ValueError):
        pass
    if GLOBAL_SERVICE_CONTEXT is not None:
        return GLOBAL_SERVICE_CONTEXT
    raise RuntimeError("Service context is not available; lifespan may not be initialized.")


@mcp.resource("order-dashboard://config", mime_type="application/json")
def read_configuration() -> Dict[str, Any]:
    """返回当前数据源配置，供客户端参考。"""

    if GLOBAL_SERVICE_CONTEXT is None:
        config = AppConfig.from_env()
        source = None
    else:
        config = GLOBAL_SERVICE_CONTEXT.config
        source = GLOBAL_SERVICE_CONTEXT.data_source.name
    return {
        "source": source,
        "product_sheets": list(config.sheets.product_sheets),
        "ad_spend_sheet": config.sheets.ad_spend_sheet,
        "currency": config.dashboard.currency_code,
        "gate_enabled": config.gate.passphrase is not None,
    }


@mcp.tool(name="refresh_dashboard_data")
async def tool_refresh_dashboard_data(ctx: Context) -> RefreshDashboardDataResult:
    """并发拉取全部商品订单与广告花费，返回每个商品的订单数量。

    Args:
        ctx (Context): FastMCP 请求上下文。

    Returns:
        Dict[str, Any]: 刷新时间、错误信息与各商品订单数。
    """

    result = await _refresh_dashboard_data(_service(ctx))
    return cast(RefreshDashboardDataResult, result)


@mcp.tool(name="compute_dashboard_metrics")
async def tool_compute_dashboard_metrics(
    ctx: Context,
    start: str = "",
    end: str = "",
    refresh: bool = False,
) -> ComputeDashboardMetricsResult:
    """按可选日期范围（闭区间）计算各商品指标与汇总。

    Args:
        ctx (Context): FastMCP 请求上下文。
        start (str): 起始日期 YYYY-MM-DD，空字符串表示无下界。
        end (str): 结束日期 YYYY-MM-DD，空字符串表示无上界。
        refresh (bool): 计算前是否重新拉取数据。

    Returns:
        Dict[str, Any]: 结构化摘要与文本报告。
    """

    result = await _compute_dashboard_metrics(
        _service(ctx),
        start=start,
        end=end,
        refresh=refresh,
    )
    return cast(ComputeDashboardMetricsResult, result)


def main(argv: Optional[list[str]] = None) -> None:
    """命令行入口，支持选择传输方式与监听参数。

    Args:
        argv (Optional[list[str]]): 手动传入的参数列表，通常由命令行自动提供。
    """

    parser = argparse.ArgumentParser(
        description="Run the Order Dashboard MCP server."
    )
    parser.add_argument(
        "transport",
        nargs="?",
        default="stdio",
        choices=["stdio", "sse", "streamable-http"],
        help="Transport mechanism to expose (default: stdio).",
    )
    parser.add_argument("--host", default=None, help="Optional host binding for HTTP-based transports.")
    parser.add_argument("--port", type=int, default=None, help="Optional port binding for HTTP-based transports.")
    args = parser.parse_args(argv)

    if args.host:
        mcp.settings.host = args.host
    if args.port is not None:
        mcp.settings.port = args.port

    logger.info("Starting MCP server transport=%s host=%s port=%s",
                args.transport, mcp.settings.host, mcp.settings.port)
    mcp.run(transport=args.transport)


if __name__ == "__main__":
    main()
