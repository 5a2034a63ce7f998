"""定义订单仪表盘所需的订单记录、状态标签与数据源抽象。"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List


class OrderStatus(str, Enum):
    """
    表格中状态列可识别的封闭标签集合。

    未识别的标签统一归入 ``OTHER``，只计入订单总数。
    """

    CONFIRMED = "confirmer"
    DELIVERED = "completed"
    RETURNED = "failed"
    OTHER = "other"

    @classmethod
    def from_label(cls, label: str) -> "OrderStatus":
        """
        功能说明:
            将小写、去空白后的状态文本映射为标签，采用精确匹配。
        参数:
            label (str): 原始状态文本。
        返回:
            OrderStatus: 对应的标签，无法识别时返回 ``OTHER``。
        """
        normalized = (label or "").strip().lower()
        for status in (cls.CONFIRMED, cls.DELIVERED, cls.RETURNED):
            if normalized == status.value:
                return status
        return cls.OTHER


@dataclass(frozen=True)
class OrderRecord:
    """
    表示商品工作表中的一行订单。

    属性:
        reference (str): 订单编号，非空。
        date (str): 原始日期文本，可能无法解析。
        client (str): 客户名称。
        phone (str): 联系电话。
        region (str): 配送地区。
        quantity (float): 数量，非数字时为 0。
        sale_price (float): 售价，非数字时为 0。
        net_profit (float): 单笔净利润，非数字时为 0。
        status (str): 小写、去空白后的状态文本。
    """

    reference: str
    date: str
    client: str = ""
    phone: str = ""
    region: str = ""
    quantity: float = 0.0
    sale_price: float = 0.0
    net_profit: float = 0.0
    status: str = ""

    @property
    def status_tag(self) -> OrderStatus:
        return OrderStatus.from_label(self.status)


@dataclass
class ProductOrders:
    """单个商品工作表的订单集合。"""

    name: str
    orders: List[OrderRecord] = field(default_factory=list)


AdSpend = Dict[str, float]


class OrderDataProvider(ABC):
    """
    抽象基类，描述如何获取各商品订单与广告花费。

    两个方法都应尽力返回结果：单个来源失败时记录日志并降级为空/零值，
    而不是向调用方抛出异常。
    """

    name: str

    @abstractmethod
    async def fetch_all_products(self) -> List[ProductOrders]:
        """
        功能说明:
            获取所有已配置商品的订单，顺序与配置一致。
        返回:
            List[ProductOrders]: 每个商品的订单集合。
        """

    @abstractmethod
    async def fetch_ad_spend(self) -> AdSpend:
        """
        功能说明:
            获取每个商品的广告花费。
        返回:
            AdSpend: 商品名到花费金额的映射，未知商品为 0。
        """
