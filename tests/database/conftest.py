"""Fixtures for isolated database module tests.

Provides a fresh temp-file SQLite DatabaseManager for each test.
"""
import os
import shutil
import tempfile
from datetime import datetime

import pytest

from database import DatabaseManager


@pytest.fixture
def temp_db():
    """Yield a fresh DatabaseManager bound to a temp SQLite database."""
    temp_dir = tempfile.mkdtemp(prefix="db-tests-")
    db_path = os.path.join(temp_dir, "test.db")
    manager = DatabaseManager(database_url=f"sqlite:///{db_path}")
    manager.create_tables()

    try:
        yield manager
    finally:
        manager.close()
        shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def db_conn(temp_db):
    """Yield a DatabaseConnection from the temp_db manager."""
    return temp_db.conn


@pytest.fixture
def sample_datetime():
    """Stable datetime value for deterministic tests."""
    return datetime(2024, 1, 28, 10, 0, 0)


@pytest.fixture
def seeded_db(temp_db, sample_datetime):
    """temp_db with two staff members, two services, one client and three appointments."""
    carlos = temp_db.staff.add_staff("Carlos", commission_rate=30)
    miguel = temp_db.staff.add_staff("Miguel", commission_rate="60")
    haircut = temp_db.services.add_service("Haircut", price="15.00")
    shave = temp_db.services.add_service("Shave", price=10)
    ana = temp_db.clients.add_client("Ana", email="ana@example.com")

    temp_db.appointments.save({"occurred_at": sample_datetime, "service_id": haircut.id,
                               "staff_id": carlos.id, "client_id": ana.id})
    temp_db.appointments.save({"occurred_at": "2024-01-29T11:30:00", "service_id": shave.id,
                               "staff_id": miguel.id, "price": 100})
    temp_db.appointments.save({"occurred_at": "2024-02-01T09:00:00", "service_id": haircut.id,
                               "staff_id": carlos.id, "client_id": ana.id, "notes": "Regular"})
    return temp_db
