"""预约引用的显示名称解析。

员工、服务和顾客可以被删除，而引用它们的预约会保留。这类悬空引用以及
为空的员工/服务引用都解析为 ``removed`` 占位名称，使所有已删除实体归入
同一分组。顾客为空表示散客。
"""
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from loguru import logger

from config.settings import settings

from .errors import DanglingReferenceWarning
from .models import Appointment, Client, EntityId, Service, StaffMember


class NameResolver:
    """把预约引用解析为显示名称。

    每个悬空引用只在 ``warnings`` 中记录一次并写日志，从不抛出。

    Attributes:
        staff: 按 ID 索引的员工。
        services: 按 ID 索引的服务。
        clients: 按 ID 索引的顾客。
        removed_label: 员工/服务/顾客缺失时的占位名称。
        walk_in_label: 无顾客预约的显示名称。
        warnings: 已记录的 ``DanglingReferenceWarning``。
    """

    def __init__(self, staff_members: Iterable[StaffMember] = (),
                 services: Iterable[Service] = (),
                 clients: Iterable[Client] = (),
                 removed_label: Optional[str] = None,
                 walk_in_label: Optional[str] = None) -> None:
        self.staff: Dict[EntityId, StaffMember] = {s.id: s for s in staff_members}
        self.services: Dict[EntityId, Service] = {s.id: s for s in services}
        self.clients: Dict[EntityId, Client] = {c.id: c for c in clients}
        self.removed_label = removed_label or settings.removed_label
        self.walk_in_label = walk_in_label or settings.walk_in_label
        self.warnings: List[DanglingReferenceWarning] = []
        self._seen: Set[Tuple[str, Any]] = set()

    def _dangling(self, entity: str, entity_id: Any,
                  appointment: Optional[Appointment]) -> None:
        key = (entity, entity_id)
        if key in self._seen:
            return
        self._seen.add(key)
        warning = DanglingReferenceWarning(
            entity, entity_id,
            appointment.id if appointment is not None else None,
        )
        self.warnings.append(warning)
        logger.warning(f"Dangling reference: {warning}")

    def staff_member(self, appointment: Appointment) -> Optional[StaffMember]:
        """预约对应的员工，引用为空或悬空时返回 ``None``。"""
        if appointment.staff_id is None:
            return None
        member = self.staff.get(appointment.staff_id)
        if member is None:
            self._dangling("staff", appointment.staff_id, appointment)
        return member

    def staff_name(self, appointment: Appointment) -> str:
        member = self.staff_member(appointment)
        return member.name if member is not None else self.removed_label

    def service_name(self, appointment: Appointment) -> str:
        if appointment.service_id is None:
            return self.removed_label
        service = self.services.get(appointment.service_id)
        if service is None:
            self._dangling("service", appointment.service_id, appointment)
            return self.removed_label
        return service.name

    def client_name(self, appointment: Appointment) -> str:
        if appointment.client_id is None:
            return self.walk_in_label
        client = self.clients.get(appointment.client_id)
        if client is None:
            self._dangling("client", appointment.client_id, appointment)
            return self.removed_label
        return client.name
