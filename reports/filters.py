"""过滤引擎。

按员工、顾客以及包含两端的日历日期范围筛选预约。过滤保持输入顺序、
可重复执行，空结果也是合法结果。
"""
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Iterable, List, Mapping, Optional

from .errors import ValidationError
from .models import Appointment, EntityId


def _as_date(value: Any, field: str) -> Optional[date]:
    """标准化日期边界，datetime 截断为日期。"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            raise ValidationError(field, value, "expected YYYY-MM-DD")
    raise ValidationError(field, value, "expected a date")


def _as_id(value: Any) -> Optional[EntityId]:
    """表单输入的 ID 是字符串，纯数字字符串转为 int。"""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = value.strip()
        if value.isdigit():
            return int(value)
    return value


@dataclass(frozen=True)
class FilterCriteria:
    """过滤条件。所有字段可选，未设置表示不限制。

    ID 与日期边界在构造时统一标准化，因此直接构造与 ``from_mapping``
    得到的条件行为一致。

    Attributes:
        staff_id: 只保留该员工的预约。
        client_id: 只保留该顾客的预约。
        date_from: 预约日期下界（包含）。
        date_to: 预约日期上界（包含）。
    """
    staff_id: Optional[EntityId] = None
    client_id: Optional[EntityId] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    def __post_init__(self) -> None:
        # frozen dataclass，只能通过 object.__setattr__ 标准化
        object.__setattr__(self, "staff_id", _as_id(self.staff_id))
        object.__setattr__(self, "client_id", _as_id(self.client_id))
        object.__setattr__(self, "date_from", _as_date(self.date_from, "date_from"))
        object.__setattr__(self, "date_to", _as_date(self.date_to, "date_to"))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "FilterCriteria":
        """从原始表单或命令行输入构建过滤条件。

        空字符串和 ``None`` 表示未设置。

        Raises:
            ValidationError: 未知选项或日期格式错误。
        """
        known = {f.name for f in fields(cls)}
        unknown = set(mapping) - known
        if unknown:
            raise ValidationError(
                "criteria", sorted(unknown),
                f"unknown options, expected any of {sorted(known)}",
            )
        return cls(
            staff_id=mapping.get("staff_id"),
            client_id=mapping.get("client_id"),
            date_from=mapping.get("date_from"),
            date_to=mapping.get("date_to"),
        )

    @property
    def is_empty(self) -> bool:
        return (self.staff_id is None and self.client_id is None
                and self.date_from is None and self.date_to is None)

    def matches(self, appointment: Appointment) -> bool:
        if self.staff_id is not None and appointment.staff_id != self.staff_id:
            return False
        if self.client_id is not None and appointment.client_id != self.client_id:
            return False
        if self.date_from is not None or self.date_to is not None:
            day = appointment.occurred_at.date()
            if self.date_from is not None and day < self.date_from:
                return False
            if self.date_to is not None and day > self.date_to:
                return False
        return True

    def describe(self, staff_names: Optional[Mapping[EntityId, str]] = None,
                 client_names: Optional[Mapping[EntityId, str]] = None) -> str:
        """可读的条件描述，用于导出文件的表头。"""
        staff_names = staff_names or {}
        client_names = client_names or {}
        parts = []
        if self.staff_id is not None:
            parts.append(f"Staff: {staff_names.get(self.staff_id, self.staff_id)}")
        if self.client_id is not None:
            parts.append(f"Client: {client_names.get(self.client_id, self.client_id)}")
        if self.date_from is not None:
            parts.append(f"From: {self.date_from.isoformat()}")
        if self.date_to is not None:
            parts.append(f"To: {self.date_to.isoformat()}")
        return ", ".join(parts) if parts else "All appointments"


def filter_appointments(appointments: Iterable[Appointment],
                        criteria: Optional[FilterCriteria] = None,
                        **options: Any) -> List[Appointment]:
    """按输入顺序返回符合 ``criteria`` 的预约。

    Args:
        appointments: 预约快照。
        criteria: 过滤条件。也可以改用关键字参数 ``options``
            （``staff_id``、``client_id``、``date_from``、``date_to``）。

    Returns:
        新列表，不修改输入。

    Raises:
        ValidationError: 同时传入 ``criteria`` 和关键字参数，或选项未知/格式错误。
    """
    if criteria is not None and options:
        raise ValidationError("criteria", options, "pass criteria or options, not both")
    if criteria is None:
        criteria = FilterCriteria.from_mapping(options)
    if criteria.is_empty:
        return list(appointments)
    return [a for a in appointments if criteria.matches(a)]
