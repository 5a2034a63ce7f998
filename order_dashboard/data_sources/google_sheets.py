"""基于 Google Sheets CSV 导出接口的订单数据源。"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional
from urllib.parse import quote

import requests

from ..config import SheetsConfig
from .base import AdSpend, OrderDataProvider, ProductOrders
from .csv_parsing import parse_ad_spend_csv, parse_orders_csv, zero_ad_spend

logger = logging.getLogger(__name__)

SHEET_CSV_URL = "https://docs.google.com/spreadsheets/d/{spreadsheet_id}/gviz/tq?tqx=out:csv&sheet={sheet}"


class SheetFetchError(RuntimeError):
    """单个工作表无法下载（网络错误或非 2xx 响应）时抛出。"""


class GoogleSheetsOrderProvider(OrderDataProvider):
    """
    每个商品一张工作表，广告花费位于汇总表。

    所有工作表在一次刷新中并发拉取，单表失败只影响该表的结果。
    """

    def __init__(
        self,
        settings: SheetsConfig,
        *,
        http_get: Optional[Callable[..., Any]] = None,
    ) -> None:
        """
        功能说明:
            创建数据源实例。
        参数:
            settings (SheetsConfig): 表格 ID、工作表名称与超时设置。
            http_get (Optional[Callable]): 与 ``requests.get`` 签名一致的请求函数，便于替换。
        """
        self.name = "google_sheets"
        self._settings = settings
        self._http_get = http_get or requests.get

    def sheet_url(self, sheet_name: str) -> str:
        return SHEET_CSV_URL.format(
            spreadsheet_id=self._settings.spreadsheet_id,
            sheet=quote(sheet_name, safe=""),
        )

    def _download(self, sheet_name: str) -> str:
        url = self.sheet_url(sheet_name)
        try:
            response = self._http_get(
                url,
                headers={"Accept": "text/csv"},
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise SheetFetchError(f"Failed to fetch sheet {sheet_name}: {exc}") from exc
        if not response.ok:
            raise SheetFetchError(
                f"Failed to fetch sheet {sheet_name}: {response.status_code} {response.reason}"
            )
        return response.text

    async def fetch_sheet_csv(self, sheet_name: str) -> str:
        """
        功能说明:
            在线程中下载单张工作表，避免阻塞事件循环。
        参数:
            sheet_name (str): 工作表名称。
        返回:
            str: CSV 文本。
        异常:
            SheetFetchError: 下载失败时抛出。
        """
        return await asyncio.to_thread(self._download, sheet_name)

    async def _fetch_product(self, sheet_name: str) -> ProductOrders:
        try:
            csv_text = await self.fetch_sheet_csv(sheet_name)
        except SheetFetchError as exc:
            logger.error("Error fetching %s: %s", sheet_name, exc)
            return ProductOrders(name=sheet_name, orders=[])
        orders = parse_orders_csv(csv_text)
        logger.debug("Fetched sheet %s rows=%s", sheet_name, len(orders))
        return ProductOrders(name=sheet_name, orders=orders)

    async def fetch_all_products(self) -> List[ProductOrders]:
        results = await asyncio.gather(
            *(self._fetch_product(sheet_name) for sheet_name in self._settings.product_sheets)
        )
        return list(results)

    async def fetch_ad_spend(self) -> AdSpend:
        try:
            csv_text = await self.fetch_sheet_csv(self._settings.ad_spend_sheet)
        except SheetFetchError as exc:
            logger.error("Error fetching ad spend: %s", exc)
            return zero_ad_spend(self._settings.product_sheets)
        return parse_ad_spend_csv(csv_text, self._settings.product_sheets)
