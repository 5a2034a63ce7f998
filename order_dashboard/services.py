from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .config import AppConfig
from .data_sources.base import OrderDataProvider
from .data_sources.google_sheets import GoogleSheetsOrderProvider
from .data_sources.mock_orders import create_default_mock_source
from .pipeline.pipeline import DashboardPipeline, RefreshResult
from .reporting.formatter import format_text_report, summary_to_dict
from .session_gate import SessionGate
from .utils.dates import parse_filter_date

logger = logging.getLogger(__name__)

MODES = ("auto", "mock", "sheets")


class DashboardLockedError(RuntimeError):
    """口令门已启用但尚未解锁。"""


@dataclass
class ServiceContext:
    config: AppConfig
    data_source: OrderDataProvider
    pipeline: DashboardPipeline
    gate: SessionGate


def create_data_source(config: AppConfig, mode: str = "auto") -> OrderDataProvider:
    """按模式选择数据源；auto 模式下未配置表格 ID 时回退到模拟数据。"""
    if mode not in MODES:
        raise ValueError(f"Unknown data source mode: {mode}")
    if mode == "mock":
        return create_default_mock_source(config)
    if mode == "sheets" and not config.sheets.enabled:
        raise RuntimeError("SHEETS_SPREADSHEET_ID is not configured; cannot read Google Sheets.")
    if config.sheets.enabled:
        return GoogleSheetsOrderProvider(config.sheets)
    logger.info("No spreadsheet configured, using mock order data")
    return create_default_mock_source(config)


def create_service_context(
    config: AppConfig,
    *,
    data_source: Optional[OrderDataProvider] = None,
    mode: str = "auto",
) -> ServiceContext:
    data_source = data_source or create_data_source(config, mode)
    pipeline = DashboardPipeline(data_source=data_source)
    return ServiceContext(
        config=config,
        data_source=data_source,
        pipeline=pipeline,
        gate=SessionGate.from_config(config.gate),
    )


def _require_unlocked(context: ServiceContext) -> None:
    if not context.gate.is_unlocked():
        raise DashboardLockedError("Dashboard is locked. Unlock it with the shared passphrase first.")


def _refresh_payload(result: RefreshResult) -> Dict[str, Any]:
    return {
        "refreshed_at": result.refreshed_at.isoformat() if result.refreshed_at else None,
        "error": result.error,
        "products": [
            {"name": product.name, "orders": len(product.orders)}
            for product in result.products
        ],
        "ad_spend": dict(result.ad_spend),
    }


async def refresh_dashboard_data(context: ServiceContext) -> Dict[str, Any]:
    _require_unlocked(context)
    result = await context.pipeline.refresh()
    payload = _refresh_payload(result)
    payload["source"] = context.data_source.name
    return payload


async def compute_dashboard_metrics(
    context: ServiceContext,
    *,
    start: Optional[str] = None,
    end: Optional[str] = None,
    refresh: bool = False,
) -> Dict[str, Any]:
    """按日期过滤重新计算指标；首次调用或要求刷新时先拉取数据。

    start/end 为空字符串或 None 时表示不设边界，两者都为空即清除过滤。
    """
    _require_unlocked(context)
    parsed_start = parse_filter_date(start)
    parsed_end = parse_filter_date(end)
    snapshot = context.pipeline.snapshot
    if refresh or snapshot.refreshed_at is None:
        snapshot = await context.pipeline.refresh()
    summary = context.pipeline.compute(start=parsed_start, end=parsed_end)
    currency_code = context.config.dashboard.currency_code
    return {
        "summary": summary_to_dict(summary),
        "report": format_text_report(summary, currency_code),
        "refreshed_at": snapshot.refreshed_at.isoformat() if snapshot.refreshed_at else None,
        "error": snapshot.error,
    }


def unlock_dashboard(context: ServiceContext, passphrase: str) -> Dict[str, Any]:
    return {"unlocked": context.gate.unlock(passphrase)}


def lock_dashboard(context: ServiceContext) -> Dict[str, Any]:
    context.gate.lock()
    return {"unlocked": context.gate.is_unlocked()}
