"""聚合器 - 一次遍历得到汇总统计和图表分布。

输出总计、按员工汇总、12 个月的营收序列（按月份，不区分年份）、
7 天的星期序列以及按服务的计数。该函数是纯函数：相同的预约、目录和
店铺比例总是得到相同结果，且不修改输入。
"""
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from .commission import CommissionCalculator, validate_price
from .models import (
    AggregationResult, Appointment, Service, StaffBreakdown, StaffMember,
    Totals, ZERO, quantize,
)
from .resolver import NameResolver


def aggregate(appointments: Iterable[Appointment],
              staff_members: Iterable[StaffMember] = (),
              services: Iterable[Service] = (),
              house_rate: Optional[Any] = None,
              resolver: Optional[NameResolver] = None) -> AggregationResult:
    """聚合一组（通常已过滤的）预约。

    Args:
        appointments: 要聚合的预约。
        staff_members: 员工目录，提供提成比例和名称。
        services: 服务目录，提供名称。
        house_rate: 店铺提成比例，为 ``None`` 时使用配置值。
        resolver: 预先构建的解析器（其目录优先于上面两个参数）。

    Returns:
        ``AggregationResult``。空输入得到全零的总计和分布。

    Raises:
        ValidationError: 某笔预约价格为负数或非数字。
    """
    calculator = CommissionCalculator(house_rate)
    if resolver is None:
        resolver = NameResolver(staff_members, services)

    count = 0
    gross = ZERO
    staff_total = ZERO
    house_total = ZERO
    net_total = ZERO
    by_staff: Dict[str, Dict[str, Any]] = {}
    by_month: List[Decimal] = [ZERO] * 12
    by_weekday: List[int] = [0] * 7
    by_service: Dict[str, int] = {}

    for appointment in appointments:
        member = resolver.staff_member(appointment)
        shares = calculator.split(appointment, member)
        price = quantize(validate_price(appointment.price))

        count += 1
        gross += price
        staff_total += shares.staff_share
        house_total += shares.house_share
        net_total += shares.net_owner_profit

        staff_name = member.name if member is not None else resolver.removed_label
        bucket = by_staff.setdefault(staff_name, {
            "count": 0, "gross_revenue": ZERO, "staff_share": ZERO,
            "house_share": ZERO, "net_owner_profit": ZERO,
        })
        bucket["count"] += 1
        bucket["gross_revenue"] += price
        bucket["staff_share"] += shares.staff_share
        bucket["house_share"] += shares.house_share
        bucket["net_owner_profit"] += shares.net_owner_profit

        by_month[appointment.occurred_at.month - 1] += price
        by_weekday[appointment.occurred_at.weekday()] += 1

        service_name = resolver.service_name(appointment)
        by_service[service_name] = by_service.get(service_name, 0) + 1

    average = quantize(gross / count) if count else ZERO

    return AggregationResult(
        totals=Totals(
            count=count,
            gross_revenue=gross,
            total_staff_share=staff_total,
            total_house_share=house_total,
            total_net_owner_profit=net_total,
            average_price=average,
        ),
        by_staff={name: StaffBreakdown(**sums) for name, sums in by_staff.items()},
        by_month=tuple(by_month),
        by_weekday=tuple(by_weekday),
        by_service=by_service,
        house_rate=calculator.house_rate,
    )
