"""DatabaseManager facade tests.

- Property accessors and sub-repository access
- load_snapshot: ORM rows to immutable records
- replace_snapshot: full replace in one transaction, ids preserved
"""
from datetime import datetime
from decimal import Decimal

import pytest

from reports.aggregator import aggregate
from reports.errors import ValidationError
from reports.models import Appointment, Snapshot, StaffMember


class TestManagerProperties:
    """Test DatabaseManager property accessors."""

    def test_database_url_property(self, temp_db):
        assert temp_db.database_url.startswith("sqlite:///")

    def test_engine_property(self, temp_db):
        assert temp_db.engine is not None

    def test_sub_repositories_accessible(self, temp_db):
        assert temp_db.staff is not None
        assert temp_db.services is not None
        assert temp_db.clients is not None
        assert temp_db.appointments is not None

    def test_create_tables_idempotent(self, temp_db):
        temp_db.create_tables()
        assert temp_db.staff.list_all() == []


class TestLoadSnapshot:

    def test_empty_store(self, temp_db):
        snapshot = temp_db.load_snapshot()
        assert snapshot.appointments == ()
        assert snapshot.counts()["staff_members"] == 0

    def test_records(self, seeded_db):
        snapshot = seeded_db.load_snapshot()
        assert isinstance(snapshot, Snapshot)
        assert [s.name for s in snapshot.staff_members] == ["Carlos", "Miguel"]
        assert snapshot.staff_members[1].commission_rate == Decimal("60")
        assert [s.price for s in snapshot.services] == [Decimal("15.00"), Decimal("10.00")]
        assert snapshot.clients[0].email == "ana@example.com"
        first = snapshot.appointments[0]
        assert isinstance(first, Appointment)
        assert first.price == Decimal("15.00")
        assert first.occurred_at == datetime(2024, 1, 28, 10, 0)
        assert snapshot.appointments[1].client_id is None
        assert snapshot.appointments[2].notes == "Regular"

    def test_aggregates_with_dangling_staff(self, seeded_db):
        miguel = seeded_db.staff.list_all()[1]
        seeded_db.staff.delete(miguel.id)
        snapshot = seeded_db.load_snapshot()
        result = aggregate(snapshot.appointments, snapshot.staff_members,
                           snapshot.services, house_rate=45)
        assert result.totals.gross_revenue == Decimal("130.00")
        assert result.by_staff["(removed)"].staff_share == Decimal("0.00")
        assert result.by_staff["Carlos"].staff_share == Decimal("9.00")


class TestReplaceSnapshot:

    def make_snapshot(self):
        return Snapshot(
            appointments=(
                Appointment(id=10, price=Decimal("20.00"), occurred_at=datetime(2024, 3, 1, 9),
                            client_id="4", staff_id=7, service_id=3),
                Appointment(id=11, price=Decimal("12.50"), occurred_at=datetime(2024, 3, 2, 9),
                            staff_id=99),
            ),
            staff_members=(StaffMember(id=7, name="Lucas", commission_rate=Decimal("25")),),
        )

    def test_replaces_everything(self, seeded_db):
        counts = seeded_db.replace_snapshot(self.make_snapshot())
        assert counts == {"appointments": 2, "staff_members": 1, "services": 0, "clients": 0}

        snapshot = seeded_db.load_snapshot()
        assert [a.id for a in snapshot.appointments] == [10, 11]
        assert snapshot.appointments[0].client_id == 4
        assert snapshot.appointments[1].staff_id == 99
        assert [s.id for s in snapshot.staff_members] == [7]
        assert snapshot.services == ()

    def test_round_trip_preserves_aggregates(self, seeded_db):
        source = self.make_snapshot()
        seeded_db.replace_snapshot(source)
        loaded = seeded_db.load_snapshot()
        before = aggregate(source.appointments, source.staff_members, house_rate=45)
        after = aggregate(loaded.appointments, loaded.staff_members, house_rate=45)
        assert after.totals == before.totals

    def test_non_integer_ids_roll_back(self, seeded_db):
        bad = Snapshot(
            appointments=(Appointment(id="abc", price=Decimal("5"),
                                      occurred_at=datetime(2024, 1, 1)),),
        )
        with pytest.raises(ValidationError):
            seeded_db.replace_snapshot(bad)
        # The previous content is untouched
        assert len(seeded_db.appointments.list_all()) == 3
        assert len(seeded_db.staff.list_all()) == 2
