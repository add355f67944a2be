"""报表核心的错误类型。

- ``ValidationError``: 数值输入不合法（价格为负数或非数字）
- ``NothingToExportError``: 对空的过滤结果请求导出
- ``ExportError``: 文档/工作簿渲染失败，不返回任何字节
- ``DanglingReferenceWarning``: 预约引用的员工、服务或顾客已不存在。
  只记录并写日志，从不抛出。
"""
from typing import Any, Optional


class ReportError(Exception):
    """报表核心异常基类。"""


class ValidationError(ReportError, ValueError):
    """传给计算器或过滤引擎的输入不合法。

    Attributes:
        field: 出错的字段名。
        value: 被拒绝的值。
    """

    def __init__(self, field: str, value: Any, reason: str) -> None:
        super().__init__(f"Invalid {field} {value!r}: {reason}")
        self.field = field
        self.value = value


class NothingToExportError(ReportError):
    """对空的预约集合请求导出时抛出。"""

    def __init__(self, kind: str = "report") -> None:
        super().__init__(f"Nothing to export: the {kind} has no appointments")
        self.kind = kind


class ExportError(ReportError):
    """底层渲染器失败时抛出。"""


class DanglingReferenceWarning(UserWarning):
    """预约引用了目录中已不存在的实体。

    Attributes:
        entity: ``"staff"``、``"service"`` 或 ``"client"``。
        entity_id: 悬空的 ID。
        appointment_id: 持有该引用的预约（已知时）。
    """

    def __init__(self, entity: str, entity_id: Any,
                 appointment_id: Optional[Any] = None) -> None:
        message = f"{entity} {entity_id!r} no longer exists"
        if appointment_id is not None:
            message += f" (referenced by appointment {appointment_id!r})"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id
        self.appointment_id = appointment_id
