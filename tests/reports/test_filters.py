"""Filter engine tests."""
from datetime import date, datetime

import pytest

from reports.errors import ValidationError
from reports.filters import FilterCriteria, filter_appointments


def ids(appointments):
    return [a.id for a in appointments]


class TestFilterAppointments:
    """Tests for filter_appointments."""

    def test_no_criteria_returns_everything_in_order(self, appointments):
        result = filter_appointments(appointments)
        assert ids(result) == [1, 2, 3, 4]
        assert isinstance(result, list)

    def test_by_staff(self, appointments):
        assert ids(filter_appointments(appointments, staff_id=1)) == [1, 4]

    def test_by_client(self, appointments):
        assert ids(filter_appointments(appointments, client_id=2)) == [2]

    def test_staff_id_as_string(self, appointments):
        assert ids(filter_appointments(appointments, staff_id="1")) == [1, 4]

    def test_string_id_same_for_criteria_and_options(self, appointments):
        by_options = filter_appointments(appointments, staff_id="1")
        by_criteria = filter_appointments(appointments, FilterCriteria(staff_id="1"))
        assert by_criteria == by_options
        assert ids(by_criteria) == [1, 4]

    def test_date_bounds_are_inclusive(self, appointments):
        result = filter_appointments(appointments, date_from="2024-05-10", date_to="2024-05-11")
        assert ids(result) == [3, 4]

    def test_upper_bound_includes_late_evening(self, appointments):
        # appointment 4 is at 23:59 on the upper bound day
        result = filter_appointments(appointments, date_to=date(2024, 5, 11))
        assert 4 in ids(result)

    def test_datetime_bound_is_truncated_to_date(self, appointments):
        result = filter_appointments(appointments, date_to=datetime(2024, 5, 11, 0, 0))
        assert 4 in ids(result)

    def test_inverted_range_is_empty(self, appointments):
        result = filter_appointments(appointments, date_from="2024-06-01", date_to="2024-01-01")
        assert result == []

    def test_combined_criteria(self, appointments):
        criteria = FilterCriteria(staff_id=1, date_from=date(2024, 5, 1))
        assert ids(filter_appointments(appointments, criteria)) == [4]

    def test_no_match_is_empty_list(self, appointments):
        assert filter_appointments(appointments, staff_id=42) == []

    def test_idempotent(self, appointments):
        criteria = FilterCriteria(staff_id=1)
        once = filter_appointments(appointments, criteria)
        assert filter_appointments(once, criteria) == once

    def test_input_not_modified(self, appointments):
        source = list(appointments)
        filter_appointments(source, staff_id=1)
        assert ids(source) == [1, 2, 3, 4]

    def test_criteria_and_options_rejected(self, appointments):
        with pytest.raises(ValidationError):
            filter_appointments(appointments, FilterCriteria(), staff_id=1)

    def test_unknown_option_rejected(self, appointments):
        with pytest.raises(ValidationError):
            filter_appointments(appointments, barber=1)


class TestFilterCriteria:
    """Tests for FilterCriteria parsing and description."""

    def test_from_mapping_form_input(self):
        criteria = FilterCriteria.from_mapping({
            "staff_id": "3", "client_id": "", "date_from": "2024-01-01", "date_to": None,
        })
        assert criteria.staff_id == 3
        assert criteria.client_id is None
        assert criteria.date_from == date(2024, 1, 1)
        assert criteria.date_to is None

    def test_from_mapping_keeps_non_numeric_ids(self):
        assert FilterCriteria.from_mapping({"staff_id": "abc-1"}).staff_id == "abc-1"

    def test_constructor_normalizes_ids(self):
        criteria = FilterCriteria(staff_id=" 2 ", client_id="")
        assert criteria.staff_id == 2
        assert criteria.client_id is None

    def test_iso_datetime_string_bound(self):
        assert FilterCriteria(date_from="2024-03-01T08:00:00").date_from == date(2024, 3, 1)

    def test_malformed_date(self):
        with pytest.raises(ValidationError) as exc:
            FilterCriteria(date_from="01/03/2024")
        assert exc.value.field == "date_from"

    def test_is_empty(self):
        assert FilterCriteria().is_empty
        assert not FilterCriteria(client_id=1).is_empty

    def test_describe_empty(self):
        assert FilterCriteria().describe() == "All appointments"

    def test_describe_uses_names(self):
        criteria = FilterCriteria(staff_id=1, client_id=9, date_from=date(2024, 1, 1))
        text = criteria.describe({1: "Carlos"}, {})
        assert text == "Staff: Carlos, Client: 9, From: 2024-01-01"
