"""业务记录仓库 - 预约记录的数据访问层。

预约是报表的核心事实记录。新建预约时如果没有给出价格，则从服务项目
复制当前模板价格作为快照；之后服务改价不会影响这条预约。
"""
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union

from loguru import logger
from sqlalchemy import func
from sqlalchemy.orm import Session

from reports.commission import validate_price
from reports.errors import ValidationError
from reports.models import quantize

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .entity_repos import ServiceTypeRepository
from .models import Appointment, ServiceType


class AppointmentRepository(BaseCRUD):
    """预约记录 仓库。"""

    def __init__(self, conn: DatabaseConnection,
                 service_type_repo: ServiceTypeRepository) -> None:
        super().__init__(conn)
        self._service_types = service_type_repo

    def save(self, appointment_data: Dict[str, Any],
             session: Optional[Session] = None) -> Appointment:
        """保存预约记录。

        Args:
            appointment_data: 预约数据字典，支持以下键：
                - occurred_at: 预约时间，datetime 或 ISO 字符串（必填）
                - service_id: 服务项目ID（可选）
                - price: 价格（可选，缺省时复制服务模板价格）
                - staff_id: 员工ID（可选）
                - client_id: 顾客ID（可选，散客为空）
                - notes: 备注（可选）
            session: 外部会话（可选）。

        Returns:
            新创建的 Appointment 对象。

        Raises:
            ValidationError: 时间缺失/无效，或无法得到大于 0 的价格。
        """
        occurred_at = self._parse_datetime(appointment_data.get("occurred_at"))
        service_id = appointment_data.get("service_id")

        def _do(sess):
            price = appointment_data.get("price")
            if price is None:
                service = (self._service_types.get_by_id(ServiceType, service_id, session=sess)
                           if service_id else None)
                if service is None:
                    raise ValidationError(
                        "price", None, "no price given and no service to copy it from"
                    )
                price = service.price
            price = quantize(validate_price(price))
            if price <= 0:
                raise ValidationError("price", price, "must be greater than zero")

            appointment = Appointment(
                client_id=appointment_data.get("client_id"),
                staff_id=appointment_data.get("staff_id"),
                service_id=service_id,
                price=price,
                occurred_at=occurred_at,
                notes=appointment_data.get("notes"),
            )
            sess.add(appointment)
            sess.flush()
            sess.refresh(appointment)
            return appointment

        appointment = self._run(_do, session, commit=True)
        logger.debug(f"Saved appointment {appointment.id} ({appointment.price})")
        return appointment

    def list_all(self, session: Optional[Session] = None) -> List[Appointment]:
        return self.get_all(Appointment, session=session)

    def get_by_date_range(self, date_from: date, date_to: date,
                          session: Optional[Session] = None) -> List[Appointment]:
        """按日期区间查询（两端包含）。"""
        start = datetime.combine(date_from, datetime.min.time())
        end = datetime.combine(date_to, datetime.max.time())

        def _query(sess):
            return sess.query(Appointment).filter(
                Appointment.occurred_at >= start,
                Appointment.occurred_at <= end,
            ).order_by(Appointment.id).all()

        return self._run(_query, session)

    def count_by_service(self, service_id: Optional[int] = None,
                         session: Optional[Session] = None
                         ) -> Union[int, Dict[int, int]]:
        """统计预约数量。

        Args:
            service_id: 指定时返回该服务的预约数（删除服务前的提示用），
                否则返回 {service_id: 数量}。
        """
        if service_id is not None:
            return self.count(
                Appointment, filters={"service_id": service_id}, session=session
            )

        def _query(sess):
            rows = sess.query(
                Appointment.service_id, func.count(Appointment.id)
            ).filter(
                Appointment.service_id.isnot(None)
            ).group_by(Appointment.service_id).all()
            return {sid: n for sid, n in rows}

        return self._run(_query, session)

    @staticmethod
    def _parse_datetime(value: Any) -> datetime:
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, datetime.min.time())
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value.strip())
            except ValueError as e:
                raise ValidationError("occurred_at", value, "invalid ISO timestamp") from e
        raise ValidationError("occurred_at", value, "expected a datetime")
