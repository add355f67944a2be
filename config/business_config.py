"""
业务配置 - 按店铺可替换。

新店铺只需实现 ``BusinessConfig``，即可更换报表品牌信息以及
``scripts/init_db.py`` 使用的演示目录数据。
"""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Dict, Any


class BusinessConfig(ABC):
    """业务配置抽象基类"""

    @abstractmethod
    def get_report_title(self) -> str:
        """报表标题"""
        pass

    @abstractmethod
    def get_report_subtitle(self) -> str:
        """显示在店铺名称下方的副标题"""
        pass

    @abstractmethod
    def get_service_catalog(self) -> List[Dict[str, Any]]:
        """新库初始化时插入的服务项目"""
        pass

    @abstractmethod
    def get_staff_roster(self) -> List[Dict[str, Any]]:
        """新库初始化时插入的员工"""
        pass


class BarbershopConfig(BusinessConfig):
    """默认理发店配置"""

    def get_report_title(self) -> str:
        return "Appointments & Commissions Report"

    def get_report_subtitle(self) -> str:
        return "Digital management system"

    def get_service_catalog(self) -> List[Dict[str, Any]]:
        return [
            {"name": "Haircut", "price": Decimal("15.00"), "description": "Classic cut"},
            {"name": "Beard trim", "price": Decimal("8.00"), "description": "Trim and shape"},
            {"name": "Cut & beard", "price": Decimal("20.00"), "description": "Combo"},
            {"name": "Shave", "price": Decimal("10.00"), "description": "Hot towel shave"},
            {"name": "Kids cut", "price": Decimal("12.00"), "description": "Under 12"},
        ]

    def get_staff_roster(self) -> List[Dict[str, Any]]:
        return [
            {"name": "Carlos", "commission_rate": Decimal("30")},
            {"name": "Miguel", "commission_rate": Decimal("35")},
            {"name": "Lucas", "commission_rate": Decimal("25")},
        ]


# 当前使用的业务配置（可在 app.py 中替换）
business_config: BusinessConfig = BarbershopConfig()
