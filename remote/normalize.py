"""把 API 原始记录标准化为记录模型。

API 使用西班牙语字段（``precio``、``fecha``、``barbero_id``、``comision``、
``nombre`` 等），部分接口或旧版本返回英文字段。所有别名都在这里统一解析，
报表核心只接触 ``reports.models`` 中的严格 dataclass。
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional, Sequence

from reports.commission import to_decimal
from reports.errors import ValidationError
from reports.models import Appointment, Client, EntityId, Service, StaffMember, quantize

from .errors import NormalizationError

APPOINTMENT_FIELDS = {
    "client_id": ("cliente_id", "client_id", "clientId"),
    "staff_id": ("barbero_id", "staff_id", "staffId"),
    "service_id": ("servicio_id", "service_id", "serviceId"),
    "price": ("precio", "price"),
    "occurred_at": ("fecha", "occurred_at", "occurredAt", "date"),
    "notes": ("notas", "notes"),
}
STAFF_FIELDS = {
    "name": ("nombre", "name"),
    "commission_rate": ("comision", "commission_rate", "commissionRate"),
    "is_active": ("activo", "is_active", "isActive", "estado"),
}
SERVICE_FIELDS = {
    "name": ("nombre", "name"),
    "price": ("precio", "price"),
    "description": ("descripcion", "description"),
}
CLIENT_FIELDS = {
    "name": ("nombre", "name"),
    "email": ("email", "correo"),
    "phone": ("telefono", "phone"),
    "registered_at": ("fecha_registro", "registered_at", "registeredAt", "created_at"),
}

_ACTIVE_STRINGS = {"activo": True, "active": True, "inactivo": False, "inactive": False,
                   "true": True, "false": False, "1": True, "0": False}


def _pick(raw: Mapping[str, Any], aliases: Sequence[str]) -> Any:
    for key in aliases:
        if key in raw and raw[key] not in (None, ""):
            return raw[key]
    return None


def _entity_id(value: Any) -> Optional[EntityId]:
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"invalid id {value!r}")
    if isinstance(value, int):
        return value
    text = str(value).strip()
    return int(text) if text.isdigit() else text


def _parse_datetime(value: Any) -> datetime:
    """ISO 日期或日期时间，末尾的 ``Z`` 表示 UTC。"""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        if len(text) == 10:
            return datetime.combine(date.fromisoformat(text), datetime.min.time())
        return datetime.fromisoformat(text)
    raise ValueError(f"unsupported timestamp {value!r}")


def _money(value: Any, field: str) -> Decimal:
    return quantize(to_decimal(value, field))


def _record_id(kind: str, raw: Mapping[str, Any]) -> EntityId:
    if not isinstance(raw, Mapping):
        raise NormalizationError(kind, None, "record is not an object")
    try:
        record_id = _entity_id(raw.get("id"))
    except ValueError as e:
        raise NormalizationError(kind, raw.get("id"), str(e)) from e
    if record_id is None:
        raise NormalizationError(kind, None, "missing id")
    return record_id


def normalize_appointment(raw: Mapping[str, Any]) -> Appointment:
    """把原始预约（``cita``）映射为 ``Appointment``。

    Raises:
        NormalizationError: 缺少 ID、时间缺失或无效，或价格缺失、
            非数字、不大于零。
    """
    record_id = _record_id("appointment", raw)
    values: Dict[str, Any] = {k: _pick(raw, v) for k, v in APPOINTMENT_FIELDS.items()}
    try:
        if values["price"] is None:
            raise ValueError("missing price")
        price = _money(values["price"], "price")
        if price <= 0:
            raise ValueError("price must be greater than zero")
        if values["occurred_at"] is None:
            raise ValueError("missing date")
        return Appointment(
            id=record_id,
            price=price,
            occurred_at=_parse_datetime(values["occurred_at"]),
            client_id=_entity_id(values["client_id"]),
            staff_id=_entity_id(values["staff_id"]),
            service_id=_entity_id(values["service_id"]),
            notes=str(values["notes"]) if values["notes"] is not None else None,
        )
    except (ValueError, ValidationError) as e:
        raise NormalizationError("appointment", record_id, str(e)) from e


def _is_active(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    key = str(value).strip().lower()
    if key not in _ACTIVE_STRINGS:
        raise ValueError(f"unknown status {value!r}")
    return _ACTIVE_STRINGS[key]


def normalize_staff_member(raw: Mapping[str, Any]) -> StaffMember:
    """把原始员工记录（``barbero``）映射为 ``StaffMember``。

    提成比例原样保留，即使超出 0-100。
    """
    record_id = _record_id("staff", raw)
    values = {k: _pick(raw, v) for k, v in STAFF_FIELDS.items()}
    try:
        if values["name"] is None:
            raise ValueError("missing name")
        rate = values["commission_rate"]
        return StaffMember(
            id=record_id,
            name=str(values["name"]),
            commission_rate=to_decimal(rate, "commission_rate") if rate is not None else Decimal("0"),
            is_active=_is_active(values["is_active"]),
        )
    except (ValueError, ValidationError) as e:
        raise NormalizationError("staff", record_id, str(e)) from e


def normalize_service(raw: Mapping[str, Any]) -> Service:
    """把原始服务记录（``servicio``）映射为 ``Service``。"""
    record_id = _record_id("service", raw)
    values = {k: _pick(raw, v) for k, v in SERVICE_FIELDS.items()}
    try:
        if values["name"] is None:
            raise ValueError("missing name")
        price = values["price"]
        return Service(
            id=record_id,
            name=str(values["name"]),
            price=_money(price, "price") if price is not None else Decimal("0.00"),
            description=values["description"],
        )
    except (ValueError, ValidationError) as e:
        raise NormalizationError("service", record_id, str(e)) from e


def normalize_client(raw: Mapping[str, Any]) -> Client:
    """把原始顾客记录（``cliente``）映射为 ``Client``。"""
    record_id = _record_id("client", raw)
    values = {k: _pick(raw, v) for k, v in CLIENT_FIELDS.items()}
    try:
        if values["name"] is None:
            raise ValueError("missing name")
        registered = values["registered_at"]
        return Client(
            id=record_id,
            name=str(values["name"]),
            email=values["email"],
            phone=str(values["phone"]) if values["phone"] is not None else None,
            registered_at=_parse_datetime(registered).date() if registered is not None else None,
        )
    except ValueError as e:
        raise NormalizationError("client", record_id, str(e)) from e
