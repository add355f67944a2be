"""记录模型 - 报表核心使用的只读快照。

所有实体都是不可变的 dataclass。报表核心从不修改它们：每次计算都基于
加载器（远程 API 或本地库）交来的快照，重新加载会产生新的快照。

核心概念：
- Appointment: 核心事实记录。``price`` 是预约时的价格快照，
  不会根据服务价格重新计算。
- StaffMember / Service / Client: 通过 ID 引用的目录数据。删除后引用可能
  悬空，显示名称的解析在 ``reports.resolver`` 中完成。
- Snapshot: 一起加载的四个集合。
"""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Tuple, Union

EntityId = Union[int, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def quantize(amount: Decimal) -> Decimal:
    """金额四舍五入到分（ROUND_HALF_UP）。"""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class StaffMember:
    """员工及其提成比例（百分比）。"""
    id: EntityId
    name: str
    commission_rate: Decimal = Decimal("0")
    is_active: bool = True


@dataclass(frozen=True)
class Service:
    """服务项目。``price`` 仅作为新建预约时的模板价格。"""
    id: EntityId
    name: str
    price: Decimal = ZERO
    description: Optional[str] = None


@dataclass(frozen=True)
class Client:
    """顾客。预约可以没有顾客（散客）。"""
    id: EntityId
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    registered_at: Optional[date] = None


@dataclass(frozen=True)
class Appointment:
    """预约记录。

    Attributes:
        id: 唯一标识。
        price: 实收金额，预约时从服务价格复制。
        occurred_at: 预约发生时间。
        client_id: 顾客引用，可选（散客为 ``None``）。
        staff_id: 员工引用，可选，可能悬空。
        service_id: 服务引用，可选，可能悬空。
        notes: 备注。
    """
    id: EntityId
    price: Decimal
    occurred_at: datetime
    client_id: Optional[EntityId] = None
    staff_id: Optional[EntityId] = None
    service_id: Optional[EntityId] = None
    notes: Optional[str] = None


@dataclass(frozen=True)
class CommissionSplit:
    """单笔预约价格的三方分配。"""
    staff_share: Decimal
    house_share: Decimal
    net_owner_profit: Decimal


@dataclass(frozen=True)
class RejectedRecord:
    """标准化时被丢弃的原始记录。"""
    kind: str
    raw_id: Any
    reason: str


@dataclass(frozen=True)
class Snapshot:
    """一次报表计算所需的全部数据，在同一时刻加载。"""
    appointments: Tuple[Appointment, ...] = ()
    staff_members: Tuple[StaffMember, ...] = ()
    services: Tuple[Service, ...] = ()
    clients: Tuple[Client, ...] = ()
    loaded_at: datetime = field(default_factory=datetime.now)
    rejected: Tuple[RejectedRecord, ...] = ()

    def staff_by_id(self) -> Dict[EntityId, StaffMember]:
        return {s.id: s for s in self.staff_members}

    def counts(self) -> Dict[str, int]:
        """各集合的记录数，用于日志。"""
        return {
            "appointments": len(self.appointments),
            "staff_members": len(self.staff_members),
            "services": len(self.services),
            "clients": len(self.clients),
            "rejected": len(self.rejected),
        }


@dataclass(frozen=True)
class Totals:
    """一组预约的汇总统计。"""
    count: int = 0
    gross_revenue: Decimal = ZERO
    total_staff_share: Decimal = ZERO
    total_house_share: Decimal = ZERO
    total_net_owner_profit: Decimal = ZERO
    average_price: Decimal = ZERO


@dataclass(frozen=True)
class StaffBreakdown:
    """按员工的汇总，在 ``AggregationResult.by_staff`` 中以显示名称为键。"""
    count: int = 0
    gross_revenue: Decimal = ZERO
    staff_share: Decimal = ZERO
    house_share: Decimal = ZERO
    net_owner_profit: Decimal = ZERO

    @property
    def average_price(self) -> Decimal:
        if self.count == 0:
            return ZERO
        return quantize(self.gross_revenue / self.count)


MONTH_LABELS = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)
WEEKDAY_LABELS = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)


@dataclass(frozen=True)
class AggregationResult:
    """``reports.aggregator.aggregate`` 的输出。

    Attributes:
        totals: 汇总统计。
        by_staff: 员工显示名称 -> ``StaffBreakdown``。
        by_month: 12 个月的营收（一月到十二月，不区分年份）。
        by_weekday: 7 天的预约数（周一到周日）。
        by_service: 服务显示名称 -> 预约数。
        house_rate: 本次计算使用的店铺提成比例。
    """
    totals: Totals
    by_staff: Dict[str, StaffBreakdown]
    by_month: Tuple[Decimal, ...]
    by_weekday: Tuple[int, ...]
    by_service: Dict[str, int]
    house_rate: Decimal

    def month_series(self) -> List[Tuple[str, Decimal]]:
        return list(zip(MONTH_LABELS, self.by_month))

    def weekday_series(self) -> List[Tuple[str, int]]:
        return list(zip(WEEKDAY_LABELS, self.by_weekday))

    def to_dict(self) -> Dict[str, Any]:
        """可直接序列化为 JSON 的表示，金额以字符串输出。"""
        t = self.totals
        return {
            "totals": {
                "count": t.count,
                "gross_revenue": str(t.gross_revenue),
                "total_staff_share": str(t.total_staff_share),
                "total_house_share": str(t.total_house_share),
                "total_net_owner_profit": str(t.total_net_owner_profit),
                "average_price": str(t.average_price),
            },
            "by_staff": {
                name: {
                    "count": b.count,
                    "gross_revenue": str(b.gross_revenue),
                    "staff_share": str(b.staff_share),
                    "house_share": str(b.house_share),
                    "net_owner_profit": str(b.net_owner_profit),
                    "average_price": str(b.average_price),
                }
                for name, b in self.by_staff.items()
            },
            "by_month": {label: str(v) for label, v in self.month_series()},
            "by_weekday": dict(self.weekday_series()),
            "by_service": dict(self.by_service),
            "house_rate": str(self.house_rate),
        }
