from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..data_sources.base import AdSpend, OrderDataProvider, ProductOrders
from ..metrics.calculations import DashboardSummary, build_dashboard_summary

logger = logging.getLogger(__name__)


@dataclass
class RefreshResult:
    """
    一次刷新后的数据快照。

    属性:
        products: 各商品订单。
        ad_spend: 商品广告花费。
        refreshed_at: 最近一次成功刷新的时间，从未成功时为 None。
        error: 本次刷新失败时的提示信息，成功时为 None。
    """

    products: List[ProductOrders] = field(default_factory=list)
    ad_spend: AdSpend = field(default_factory=dict)
    refreshed_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def has_data(self) -> bool:
        return bool(self.products)


class DashboardPipeline:
    """调度数据拉取与 KPI 计算的主流程。"""

    def __init__(self, *, data_source: OrderDataProvider) -> None:
        """初始化管道。

        参数:
            data_source: 实际的订单数据源（可为表格或模拟）。
        """
        self._data_source = data_source
        self._snapshot = RefreshResult()

    @property
    def snapshot(self) -> RefreshResult:
        return self._snapshot

    async def refresh(self) -> RefreshResult:
        """并发拉取订单与广告花费，两者都完成后替换快照。

        任一请求抛出异常时保留上一次的数据，并在结果中给出错误信息。

        返回:
            RefreshResult，包含当前快照与本次错误（若有）。
        """
        products, ad_spend = await asyncio.gather(
            self._data_source.fetch_all_products(),
            self._data_source.fetch_ad_spend(),
            return_exceptions=True,
        )
        failures = [item for item in (products, ad_spend) if isinstance(item, BaseException)]
        for failure in failures:
            # 取消等非 Exception 信号继续向上传播。
            if not isinstance(failure, Exception):
                raise failure
            logger.error("Dashboard refresh failed source=%s error=%r", self._data_source.name, failure)
        if failures:
            message = "; ".join(str(failure) for failure in failures if str(failure)) or "Failed to fetch data"
            self._snapshot = RefreshResult(
                products=self._snapshot.products,
                ad_spend=self._snapshot.ad_spend,
                refreshed_at=self._snapshot.refreshed_at,
                error=message,
            )
            return self._snapshot

        self._snapshot = RefreshResult(
            products=list(products),
            ad_spend=dict(ad_spend),
            refreshed_at=datetime.now(),
        )
        logger.info(
            "Dashboard refreshed source=%s products=%s orders=%s",
            self._data_source.name,
            len(products),
            sum(len(product.orders) for product in products),
        )
        return self._snapshot

    def compute(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> DashboardSummary:
        """基于当前快照重新计算指标，不访问数据源。

        参数:
            start: 过滤起始日期（含），None 表示无下界。
            end: 过滤结束日期（含），None 表示无上界。

        返回:
            DashboardSummary，包含各商品指标与汇总。
        """
        return build_dashboard_summary(
            source_name=self._data_source.name,
            products=self._snapshot.products,
            ad_spend=self._snapshot.ad_spend,
            start=start,
            end=end,
        )

    async def refresh_and_compute(
        self,
        *,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> tuple[RefreshResult, DashboardSummary]:
        result = await self.refresh()
        return result, self.compute(start=start, end=end)
