"""提成计算器。

把一笔预约价格拆成三份::

    staff_share      = price * staff.commission_rate / 100   （无员工时为 0）
    house_share      = price * house_rate / 100
    net_owner_profit = price - staff_share - house_share

两个比例相互独立，员工提成比例超过 ``100 - house_rate`` 时店主净利润为负数。
该结果原样返回，不做截断。
"""
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from config.settings import settings

from .errors import ValidationError
from .models import Appointment, CommissionSplit, StaffMember, quantize

HUNDRED = Decimal("100")


def to_decimal(value: Any, field: str) -> Decimal:
    """把数值转换为 ``Decimal``。

    Args:
        value: int、float、Decimal 或数字字符串。
        field: 错误信息中使用的字段名。

    Returns:
        有限的 ``Decimal`` 值。

    Raises:
        ValidationError: 值缺失、为布尔值、非数字、NaN 或无穷大。
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(field, value, "expected a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(field, value, "expected a finite number")
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValidationError(field, value, "expected a number")
    else:
        raise ValidationError(field, value, "expected a number")

    if not result.is_finite():
        raise ValidationError(field, value, "expected a finite number")
    return result


def validate_price(value: Any) -> Decimal:
    """返回 ``Decimal`` 价格，拒绝负数或非数字输入。"""
    price = to_decimal(value, "price")
    if price < 0:
        raise ValidationError("price", value, "must not be negative")
    return price


class CommissionCalculator:
    """绑定一个店铺提成比例的计算器。

    Attributes:
        house_rate: 每笔价格中归店铺所有的百分比。

    Example::

        calc = CommissionCalculator(Decimal("45"))
        calc.split(appointment, staff)
    """

    def __init__(self, house_rate: Optional[Any] = None) -> None:
        if house_rate is None:
            house_rate = settings.house_commission_rate
        self.house_rate: Decimal = to_decimal(house_rate, "house_rate")

    def split(self, appointment: Appointment,
              staff_member: Optional[StaffMember] = None) -> CommissionSplit:
        """拆分一笔预约价格。

        Args:
            appointment: 要拆分的预约。
            staff_member: 解析出的员工；引用为空或悬空时为 ``None``。

        Returns:
            ``CommissionSplit``，所有金额均四舍五入到分。净利润由舍入后的
            两份提成推出，保证 ``net == price - staff - house`` 严格成立。

        Raises:
            ValidationError: 价格或比例为负数/非数字。
        """
        price = validate_price(appointment.price)

        rate = Decimal("0")
        if staff_member is not None and staff_member.commission_rate is not None:
            rate = to_decimal(staff_member.commission_rate, "commission_rate")

        staff_share = quantize(price * rate / HUNDRED)
        house_share = quantize(price * self.house_rate / HUNDRED)
        net_owner_profit = quantize(price) - staff_share - house_share

        return CommissionSplit(
            staff_share=staff_share,
            house_share=house_share,
            net_owner_profit=net_owner_profit,
        )


def split(appointment: Appointment,
          staff_member: Optional[StaffMember] = None,
          house_rate: Optional[Any] = None) -> CommissionSplit:
    """用配置的（或指定的）店铺比例拆分一笔预约。"""
    return CommissionCalculator(house_rate).split(appointment, staff_member)
