"""
Tests for the timesheet entry form (tslib.forms).
"""
import pytest

from tslib.forms import (
    FormError, TimesheetForm, completion_status_options, hour_options,
    minute_options, task_station_options, task_type_options,
)


def _form(**overrides):
    data = {
        'staff_id': '1',
        'department_id': '2',
        'task_date': '15/03/2024',
        'start_hour': '08',
        'start_minute': '00',
        'end_hour': '12',
        'end_minute': '30',
        'task_description': 'Drafted survey tool',
        'task_type': 'Report review',
        'task_station': 'Field',
    }
    data.update(overrides)
    return TimesheetForm(**data)


class TestOptions:
    def test_hours(self):
        hours = hour_options()
        assert len(hours) == 24
        assert hours[0] == '00'
        assert hours[-1] == '23'

    def test_minutes(self):
        minutes = minute_options()
        assert len(minutes) == 60
        assert minutes[5] == '05'

    def test_select_lists(self):
        assert task_station_options() == ['Office', 'Field', 'Remote']
        assert 'Presentation development' in task_type_options()
        assert completion_status_options() == ['Complete', 'In Progress', 'Pending']


class TestValidation:
    def test_valid(self):
        form = _form()
        assert form.errors() == {}
        assert form.is_valid()

    def test_end_not_after_start(self):
        errors = _form(end_hour='08', end_minute='00').errors()
        assert errors == {'end_time': "End time must be after start time"}

    def test_missing_start(self):
        assert 'start_time' in _form(start_hour='').errors()

    def test_bad_date(self):
        assert _form(task_date='31/02/2024').errors()['task_date'] == "Task date must be dd/mm/yyyy"

    def test_short_description(self):
        assert 'task_description' in _form(task_description='abc').errors()

    def test_missing_staff(self):
        assert 'staff_id' in _form(staff_id='').errors()

    def test_unknown_task_type(self):
        assert 'task_type' in _form(task_type='Gardening').errors()

    def test_invalid_completion_status(self):
        assert 'completion_status' in _form(completion_status='Done').errors()

    def test_valid_completion_status(self):
        assert _form(completion_status='In Progress').is_valid()


class TestPayload:
    def test_payload(self):
        payload = _form(client_id='3', project_id='').to_payload()
        assert payload == {
            'staff_id': 1,
            'department_id': 2,
            'date': '2024-03-15',
            'check_in_time': '08:00:00',
            'check_out_time': '12:30:00',
            'task_description': 'Drafted survey tool',
            'task_type': 'Report Review',
            'task_station': 'Field',
            'client_id': 3,
        }

    def test_iso_date_accepted(self):
        assert _form(task_date='2024-03-15').to_payload()['date'] == '2024-03-15'

    def test_invalid_raises(self):
        with pytest.raises(FormError) as exc:
            _form(task_description='').to_payload()
        assert 'task_description' in exc.value.errors

    def test_from_dict_ignores_unknown(self):
        form = TimesheetForm.from_dict({'staff_id': 4, 'individualKPI': 'x'})
        assert form.staff_id == 4
