"""订单仪表盘的命令行入口，串联数据拉取、指标计算与报告输出。"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import AppConfig
from .reporting.formatter import format_text_report, summary_to_dict
from .services import MODES, create_service_context, lock_dashboard, unlock_dashboard
from .utils.dates import parse_filter_date, recent_period

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    功能说明:
        构建并解析命令行参数，返回解析后的命名空间。
    参数:
        argv (Optional[List[str]]): 参数列表，默认读取 sys.argv。
    返回:
        argparse.Namespace: 包含用户指定的运行选项。
    """
    parser = argparse.ArgumentParser(description="Per-product order metrics dashboard")
    parser.add_argument(
        "--mode",
        choices=list(MODES),
        default="auto",
        help="Read Google Sheets, use mock data, or pick automatically from the environment.",
    )
    parser.add_argument("--start", type=str, default="", help="Optional start date, format YYYY-MM-DD.")
    parser.add_argument("--end", type=str, default="", help="Optional end date, format YYYY-MM-DD.")
    parser.add_argument(
        "--window-days",
        type=int,
        default=0,
        help="Filter to the last N days when --start/--end are not given.",
    )
    parser.add_argument("--output-json", type=Path, help="Path to save the JSON payload.")
    parser.add_argument("--unlock", metavar="PASSPHRASE", help="Unlock the dashboard on this machine.")
    parser.add_argument("--lock", action="store_true", help="Forget a previous unlock and exit.")
    return parser.parse_args(argv)


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    功能说明:
        命令行主入口：读取参数、刷新数据、输出报告，可选写出 JSON。
    返回:
        int: 进程退出码。
    """
    args = parse_args(argv)
    config = AppConfig.from_env()
    logging.basicConfig(level=config.dashboard.log_level, format=LOG_FORMAT)

    context = create_service_context(config, mode=args.mode)

    if args.lock:
        lock_dashboard(context)
        print("Dashboard locked.")
        return 0
    if args.unlock is not None and not unlock_dashboard(context, args.unlock)["unlocked"]:
        print("Incorrect passphrase.", file=sys.stderr)
        return 1
    if not context.gate.is_unlocked():
        print("Dashboard is locked. Run with --unlock PASSPHRASE first.", file=sys.stderr)
        return 1

    start = parse_filter_date(args.start)
    end = parse_filter_date(args.end)
    if start is None and end is None and args.window_days > 0:
        start, end = recent_period(args.window_days)

    result, summary = asyncio.run(context.pipeline.refresh_and_compute(start=start, end=end))
    if result.error:
        print(f"Refresh failed: {result.error}", file=sys.stderr)
        if not result.has_data:
            return 1

    print(format_text_report(summary, config.dashboard.currency_code))
    if result.refreshed_at:
        print(f"Last updated: {result.refreshed_at:%H:%M:%S}")

    if args.output_json:
        payload = summary_to_dict(summary)
        payload["refreshed_at"] = result.refreshed_at.isoformat() if result.refreshed_at else None
        args.output_json.parent.mkdir(parents=True, exist_ok=True)
        args.output_json.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        print(f"JSON report written to: {args.output_json}")
    return 0


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":  # pragma: no cover
    main()
