"""订单仪表盘项目的配置模型，支持环境变量加载。"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

DEFAULT_PRODUCT_SHEETS: List[str] = [
    "Gant",
    "Tenu De Travail",
    "Gilet de securite",
    "Gilet de travail",
]


def _split_csv_env(raw: Optional[str], default: List[str]) -> List[str]:
    """将逗号分隔的环境变量拆分为去空白后的列表，空值时返回默认列表。"""
    if not raw:
        return list(default)
    items = [item.strip() for item in raw.split(",")]
    return [item for item in items if item] or list(default)


@dataclass
class SheetsConfig:
    """
    描述 Google Sheets 数据源的访问参数。

    属性:
        spreadsheet_id (str): 表格 ID，为空时回退到模拟数据源。
        product_sheets (List[str]): 每个商品对应的工作表名称，顺序即展示顺序。
        ad_spend_sheet (str): 存放广告花费的汇总工作表名称。
        timeout_seconds (float): 单次 HTTP 请求的超时时间。
    """

    spreadsheet_id: str = ""
    product_sheets: List[str] = field(default_factory=lambda: list(DEFAULT_PRODUCT_SHEETS))
    ad_spend_sheet: str = "DASH"
    timeout_seconds: float = 30.0

    @property
    def enabled(self) -> bool:
        return bool(self.spreadsheet_id)

    @classmethod
    def from_env(cls, prefix: str = "SHEETS_") -> "SheetsConfig":
        """
        功能说明:
            从环境变量读取表格配置，缺失的字段使用默认值。
        参数:
            prefix (str): 变量名前缀。
        返回:
            SheetsConfig: 填充完成的配置实例。
        """
        spreadsheet_id = os.getenv(f"{prefix}SPREADSHEET_ID", "").strip()
        product_sheets = _split_csv_env(os.getenv(f"{prefix}PRODUCT_SHEETS"), DEFAULT_PRODUCT_SHEETS)
        ad_spend_sheet = os.getenv(f"{prefix}AD_SPEND_SHEET", "DASH").strip() or "DASH"
        timeout_seconds = float(os.getenv(f"{prefix}TIMEOUT_SECONDS", "30"))
        return cls(
            spreadsheet_id=spreadsheet_id,
            product_sheets=product_sheets,
            ad_spend_sheet=ad_spend_sheet,
            timeout_seconds=timeout_seconds,
        )


@dataclass
class DashboardConfig:
    """
    定义仪表盘层面的展示参数。

    属性:
        currency_code (str): 金额后缀使用的货币代码。
        log_level (str): 命令行与 MCP 入口使用的日志级别。
    """

    currency_code: str = "DZD"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, prefix: str = "DASHBOARD_") -> "DashboardConfig":
        currency_code = os.getenv(f"{prefix}CURRENCY", "DZD").strip() or "DZD"
        log_level = os.getenv(f"{prefix}LOG_LEVEL", "INFO").upper()
        return cls(currency_code=currency_code, log_level=log_level)


@dataclass
class GateConfig:
    """
    访问口令的本地设置，仅用于界面层面的“记住解锁”体验，并非安全边界。

    属性:
        passphrase (Optional[str]): 共享口令，为空表示不启用口令。
        state_path (str): 解锁标记文件的位置。
    """

    passphrase: Optional[str] = None
    state_path: str = ".order_dashboard_unlocked"

    @classmethod
    def from_env(cls, prefix: str = "DASHBOARD_ACCESS_") -> "GateConfig":
        passphrase = os.getenv(f"{prefix}PASSPHRASE") or None
        state_path = os.getenv(f"{prefix}STATE_PATH", ".order_dashboard_unlocked")
        return cls(passphrase=passphrase, state_path=state_path)


@dataclass
class AppConfig:
    """
    顶层组合配置，聚合数据源、仪表盘与口令设置。

    属性:
        sheets (SheetsConfig): 表格数据源设置。
        dashboard (DashboardConfig): 仪表盘展示参数。
        gate (GateConfig): 本地口令设置。
    """

    sheets: SheetsConfig
    dashboard: DashboardConfig
    gate: GateConfig = field(default_factory=GateConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        功能说明:
            统一从环境变量载入所有子配置。
        返回:
            AppConfig: 完整的应用配置实例。
        """
        return cls(
            sheets=SheetsConfig.from_env(),
            dashboard=DashboardConfig.from_env(),
            gate=GateConfig.from_env(),
        )
