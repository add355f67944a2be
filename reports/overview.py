"""仪表盘概览 - 基于整个快照的关键指标。"""
from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Iterable, Optional

from .aggregator import aggregate
from .models import Appointment, Snapshot


@dataclass(frozen=True)
class DashboardOverview:
    """仪表盘首页展示的关键指标。"""
    client_count: int
    appointment_count: int
    active_staff_count: int
    gross_revenue: Decimal
    total_staff_share: Decimal
    total_house_share: Decimal
    total_net_owner_profit: Decimal


def overview(snapshot: Snapshot, house_rate: Optional[Any] = None) -> DashboardOverview:
    """基于快照中全部预约计算仪表盘指标。"""
    result = aggregate(snapshot.appointments, snapshot.staff_members,
                       snapshot.services, house_rate=house_rate)
    return DashboardOverview(
        client_count=len(snapshot.clients),
        appointment_count=result.totals.count,
        active_staff_count=sum(1 for s in snapshot.staff_members if s.is_active),
        gross_revenue=result.totals.gross_revenue,
        total_staff_share=result.totals.total_staff_share,
        total_house_share=result.totals.total_house_share,
        total_net_owner_profit=result.totals.total_net_owner_profit,
    )


def service_usage(appointments: Iterable[Appointment]) -> Counter:
    """按 ``service_id`` 统计预约数。

    删除服务前使用：相关预约保留价格和日期，之后该服务显示为已删除。
    """
    return Counter(a.service_id for a in appointments if a.service_id is not None)
