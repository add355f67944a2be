"""ORM 模型 - 本地快照库的表结构。

四张表与远程 API 的四个集合一一对应：
- employees: 员工（理发师）及提成比例
- customers: 顾客
- service_types: 服务项目及模板价格
- appointments: 预约记录

预约表中的 client_id / staff_id / service_id 是普通整数列，不加外键：
删除员工或服务后，历史预约仍然保留原引用，由报表层解析为占位名称。
"""
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, Column, Date, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import declarative_base

from reports.models import Appointment as AppointmentRecord
from reports.models import Client, Service, StaffMember

Base = declarative_base()


class Employee(Base):
    """员工表。"""
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    commission_rate = Column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.now)

    def to_record(self) -> StaffMember:
        return StaffMember(
            id=self.id,
            name=self.name,
            commission_rate=Decimal(self.commission_rate or 0),
            is_active=bool(self.is_active),
        )

    @classmethod
    def from_record(cls, record: StaffMember) -> "Employee":
        return cls(
            id=record.id, name=record.name,
            commission_rate=record.commission_rate, is_active=record.is_active,
        )


class Customer(Base):
    """顾客表。"""
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    email = Column(String(200))
    phone = Column(String(50))
    registered_at = Column(Date)

    def to_record(self) -> Client:
        return Client(
            id=self.id, name=self.name, email=self.email,
            phone=self.phone, registered_at=self.registered_at,
        )

    @classmethod
    def from_record(cls, record: Client) -> "Customer":
        return cls(
            id=record.id, name=record.name, email=record.email,
            phone=record.phone, registered_at=record.registered_at,
        )


class ServiceType(Base):
    """服务项目表。price 仅作为新建预约时的模板价格。"""
    __tablename__ = "service_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    description = Column(Text)

    def to_record(self) -> Service:
        return Service(
            id=self.id, name=self.name,
            price=Decimal(self.price or 0), description=self.description,
        )

    @classmethod
    def from_record(cls, record: Service) -> "ServiceType":
        return cls(
            id=record.id, name=record.name,
            price=record.price, description=record.description,
        )


class Appointment(Base):
    """预约记录表。price 是预约时的价格快照，之后不随服务价格变化。"""
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, nullable=True)
    staff_id = Column(Integer, nullable=True)
    service_id = Column(Integer, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    occurred_at = Column(DateTime, nullable=False, index=True)
    notes = Column(Text)

    def to_record(self) -> AppointmentRecord:
        return AppointmentRecord(
            id=self.id,
            price=Decimal(self.price),
            occurred_at=self.occurred_at,
            client_id=self.client_id,
            staff_id=self.staff_id,
            service_id=self.service_id,
            notes=self.notes,
        )

    @classmethod
    def from_record(cls, record: AppointmentRecord) -> "Appointment":
        return cls(
            id=record.id, client_id=record.client_id,
            staff_id=record.staff_id, service_id=record.service_id,
            price=record.price, occurred_at=record.occurred_at,
            notes=record.notes,
        )
