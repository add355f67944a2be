"""数据库管理器 - 统一门面（Facade）。

DatabaseManager 是 database 模块的统一入口，组合了所有子仓库，
提供两套 API：

1. **子仓库访问**（细粒度）：
   通过 ``db.staff``、``db.services`` 等属性直接访问子仓库，
   返回 ORM 对象。

2. **快照方法**（粗粒度）：
   ``load_snapshot()`` 把整个库读成一个不可变的 ``Snapshot`` 交给报表核心；
   ``replace_snapshot()`` 在一个事务内用远程快照整体替换本地数据。
"""
from datetime import datetime
from typing import Any, Dict, Optional

from loguru import logger
from sqlalchemy.orm import Session

from reports.errors import ValidationError
from reports.models import Snapshot

from .business_repos import AppointmentRepository
from .connection import DatabaseConnection
from .entity_repos import CustomerRepository, ServiceTypeRepository, StaffRepository
from .models import Appointment, Customer, Employee, ServiceType


def _int_id(value: Any, field: str = "id") -> Optional[int]:
    """本地库只保存整数主键/引用。"""
    if value is None:
        return None
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    raise ValidationError(field, value, "local store requires integer ids")


class DatabaseManager:
    """数据库管理器 - 统一门面。

    Attributes:
        conn: 数据库连接管理器。
        staff: 员工仓库。
        services: 服务项目仓库。
        clients: 顾客仓库。
        appointments: 预约记录仓库。

    Example::

        db = DatabaseManager("sqlite:///data/snapshot.db")
        db.create_tables()

        barber = db.staff.add_staff("Carlos", commission_rate=30)
        snapshot = db.load_snapshot()
    """

    def __init__(self, database_url: Optional[str] = None) -> None:
        """初始化数据库管理器。

        Args:
            database_url: 数据库连接URL。如果为None则使用settings配置。
        """
        # 基础设施层
        self.conn = DatabaseConnection(database_url)

        # 实体仓库
        self.staff = StaffRepository(self.conn)
        self.services = ServiceTypeRepository(self.conn)
        self.clients = CustomerRepository(self.conn)

        # 业务记录仓库
        self.appointments = AppointmentRepository(self.conn, self.services)

    # ================================================================
    # 基础设施方法
    # ================================================================

    def create_tables(self) -> None:
        """创建所有数据库表（幂等操作）。"""
        self.conn.create_tables()

    def get_session(self) -> Session:
        """获取数据库会话。"""
        return self.conn.get_session()

    @property
    def database_url(self) -> str:
        """数据库连接URL。"""
        return self.conn.database_url

    @property
    def engine(self):
        """SQLAlchemy 引擎对象。"""
        return self.conn.engine

    def close(self) -> None:
        """关闭数据库连接，释放所有资源。"""
        self.conn.close()

    # ================================================================
    # 快照方法
    # ================================================================

    def load_snapshot(self) -> Snapshot:
        """把本地库读成一个 Snapshot。

        四个集合在同一个会话中读取，按主键排序。
        """
        with self.get_session() as session:
            snapshot = Snapshot(
                appointments=tuple(
                    a.to_record() for a in self.appointments.list_all(session=session)
                ),
                staff_members=tuple(
                    e.to_record() for e in self.staff.list_all(session=session)
                ),
                services=tuple(
                    s.to_record() for s in self.services.list_all(session=session)
                ),
                clients=tuple(
                    c.to_record() for c in self.clients.list_all(session=session)
                ),
                loaded_at=datetime.now(),
            )
        logger.info(f"Loaded local snapshot: {snapshot.counts()}")
        return snapshot

    def replace_snapshot(self, snapshot: Snapshot) -> Dict[str, int]:
        """用快照整体替换本地数据（单事务，失败时全部回滚）。

        Args:
            snapshot: 通常来自远程 API 的快照，记录保留原 ID。

        Returns:
            各集合写入的记录数。

        Raises:
            ValidationError: 快照中存在非整数 ID。
        """
        with self.get_session() as session:
            try:
                for model in (Appointment, ServiceType, Customer, Employee):
                    session.query(model).delete()

                for staff_member in snapshot.staff_members:
                    row = Employee.from_record(staff_member)
                    row.id = _int_id(staff_member.id)
                    session.add(row)
                for service in snapshot.services:
                    row = ServiceType.from_record(service)
                    row.id = _int_id(service.id)
                    session.add(row)
                for client in snapshot.clients:
                    row = Customer.from_record(client)
                    row.id = _int_id(client.id)
                    session.add(row)
                for appointment in snapshot.appointments:
                    row = Appointment.from_record(appointment)
                    row.id = _int_id(appointment.id)
                    row.client_id = _int_id(appointment.client_id, "client_id")
                    row.staff_id = _int_id(appointment.staff_id, "staff_id")
                    row.service_id = _int_id(appointment.service_id, "service_id")
                    session.add(row)
                session.commit()
            except Exception:
                session.rollback()
                raise

        counts = snapshot.counts()
        counts.pop("rejected", None)
        logger.info(f"Replaced local snapshot in {self.database_url}: {counts}")
        return counts
