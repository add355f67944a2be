"""Shared fixtures: a small barbershop snapshot with known totals.

Appointments (house rate 45%):

    id  price  date        staff          service        client   split
    1   100    2024-03-04  Carlos (30%)   Haircut        Ana      30 / 45 / 25
    2   50     2023-03-15  Miguel (60%)   Shave          Ben      30 / 22.50 / -2.50
    3   20     2024-05-10  99 (removed)   7 (removed)    walk-in  0 / 9 / 11
    4   15     2024-05-11  Carlos (30%)   Haircut        Ana      4.50 / 6.75 / 3.75
"""
from datetime import date, datetime
from decimal import Decimal

import pytest

from reports.models import Appointment, Client, Service, Snapshot, StaffMember


@pytest.fixture
def staff_members():
    return (
        StaffMember(id=1, name="Carlos", commission_rate=Decimal("30")),
        StaffMember(id=2, name="Miguel", commission_rate=Decimal("60")),
        StaffMember(id=3, name="Lucas", commission_rate=Decimal("25"), is_active=False),
    )


@pytest.fixture
def services():
    return (
        Service(id=1, name="Haircut", price=Decimal("15.00")),
        Service(id=2, name="Shave", price=Decimal("10.00")),
    )


@pytest.fixture
def clients():
    return (
        Client(id=1, name="Ana", email="ana@example.com", registered_at=date(2023, 1, 5)),
        Client(id=2, name="Ben", phone="555-0102"),
    )


@pytest.fixture
def appointments():
    return (
        Appointment(id=1, price=Decimal("100"), occurred_at=datetime(2024, 3, 4, 10, 0),
                    client_id=1, staff_id=1, service_id=1),
        Appointment(id=2, price=Decimal("50"), occurred_at=datetime(2023, 3, 15, 16, 30),
                    client_id=2, staff_id=2, service_id=2),
        Appointment(id=3, price=Decimal("20"), occurred_at=datetime(2024, 5, 10, 9, 0),
                    client_id=None, staff_id=99, service_id=7),
        Appointment(id=4, price=Decimal("15"), occurred_at=datetime(2024, 5, 11, 23, 59),
                    client_id=1, staff_id=1, service_id=1, notes="Regular"),
    )


@pytest.fixture
def snapshot(appointments, staff_members, services, clients):
    return Snapshot(
        appointments=appointments,
        staff_members=staff_members,
        services=services,
        clients=clients,
        loaded_at=datetime(2024, 6, 1, 12, 0),
    )


@pytest.fixture
def generated_at():
    """Stable generation timestamp for deterministic exports."""
    return datetime(2024, 6, 1, 12, 0, 0)
