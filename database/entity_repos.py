"""实体仓库 - 目录类实体的数据访问层。

管理员工、服务项目、顾客三类目录数据。删除目录实体时不会级联处理
历史预约：预约保留原引用，报表层把悬空引用显示为占位名称。

每个仓库继承 BaseCRUD 获得通用能力，并添加领域特定的方法。
"""
from decimal import Decimal
from typing import List, Optional, Union

from sqlalchemy.orm import Session

from reports.commission import to_decimal, validate_price
from reports.errors import ValidationError
from reports.models import quantize

from .base_crud import BaseCRUD
from .connection import DatabaseConnection
from .models import Customer, Employee, ServiceType

Number = Union[int, float, str, Decimal]


def _require_name(name: str) -> str:
    if not name or not str(name).strip():
        raise ValidationError("name", name, "must not be empty")
    return str(name).strip()


class StaffRepository(BaseCRUD):
    """员工/Staff 仓库。

    管理理发师等员工信息及各自的提成比例（百分比）。
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def add_staff(self, name: str, commission_rate: Number = 0,
               is_active: bool = True,
               session: Optional[Session] = None) -> Employee:
        """新建员工。

        Args:
            name: 员工姓名。
            commission_rate: 提成比例（百分比），不做 0-100 截断。
            is_active: 是否在职。
            session: 外部会话（可选）。

        Returns:
            Employee 对象。

        Raises:
            ValidationError: 姓名为空或比例不是数字。
        """
        return self.create(
            Employee, session=session,
            name=_require_name(name),
            commission_rate=to_decimal(commission_rate, "commission_rate"),
            is_active=is_active,
        )

    def list_all(self, session: Optional[Session] = None) -> List[Employee]:
        return self.get_all(Employee, session=session)

    def get_active_staff(self,
                         session: Optional[Session] = None) -> List[Employee]:
        """获取所有在职员工。"""
        return self.get_all(
            Employee, filters={"is_active": True}, session=session
        )

    def deactivate(self, staff_id: int,
                   session: Optional[Session] = None) -> Optional[Employee]:
        """停用员工。

        Returns:
            更新后的 Employee 对象，不存在返回 None。
        """
        return self.update_by_id(
            Employee, staff_id, session=session, is_active=False
        )

    def delete(self, staff_id: int,
               session: Optional[Session] = None) -> bool:
        """删除员工，其历史预约保留悬空的 staff_id。"""
        return self.delete_by_id(Employee, staff_id, session=session)


class ServiceTypeRepository(BaseCRUD):
    """服务项目 仓库。

    服务价格只是新建预约时的模板价格，修改价格不影响已有预约。
    """

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def add_service(self, name: str, price: Number,
               description: Optional[str] = None,
               session: Optional[Session] = None) -> ServiceType:
        """新建服务项目。

        Raises:
            ValidationError: 姓名为空，或价格为负数/非数字。
        """
        return self.create(
            ServiceType, session=session,
            name=_require_name(name),
            price=quantize(validate_price(price)),
            description=description,
        )

    def list_all(self, session: Optional[Session] = None) -> List[ServiceType]:
        return self.get_all(ServiceType, session=session)

    def update_price(self, service_id: int, price: Number,
                     session: Optional[Session] = None) -> Optional[ServiceType]:
        """修改模板价格。已有预约的价格快照不变。"""
        return self.update_by_id(
            ServiceType, service_id, session=session,
            price=quantize(validate_price(price)),
        )

    def delete(self, service_id: int,
               session: Optional[Session] = None) -> bool:
        return self.delete_by_id(ServiceType, service_id, session=session)


class CustomerRepository(BaseCRUD):
    """顾客 仓库。"""

    def __init__(self, conn: DatabaseConnection) -> None:
        super().__init__(conn)

    def add_client(self, name: str, email: Optional[str] = None,
               phone: Optional[str] = None, registered_at=None,
               session: Optional[Session] = None) -> Customer:
        return self.create(
            Customer, session=session,
            name=_require_name(name), email=email,
            phone=phone, registered_at=registered_at,
        )

    def list_all(self, session: Optional[Session] = None) -> List[Customer]:
        return self.get_all(Customer, session=session)

    def delete(self, customer_id: int,
               session: Optional[Session] = None) -> bool:
        return self.delete_by_id(Customer, customer_id, session=session)
