"""Timesheet entry form: option lists, field validation and payload assembly.

Values arrive as the raw strings a form submits (select values, a typed
``dd/mm/yyyy`` date); :meth:`TimesheetForm.to_payload` turns a valid form
into the body ``POST /api/timesheets`` expects.
"""
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

from .enums import CompletionStatus, TaskStation, TaskType, match_value, values
from .timeutils import format_date, parse_date

MIN_DESCRIPTION_LENGTH = 5


class FormError(ValueError):
    """Raised by ``to_payload`` when the form does not validate."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


def _two_digit_options(count: int) -> List[str]:
    return [str(i).zfill(2) for i in range(count)]


def hour_options() -> List[str]:
    return _two_digit_options(24)


def minute_options() -> List[str]:
    return _two_digit_options(60)


def task_type_options() -> List[str]:
    return values(TaskType)


def task_station_options() -> List[str]:
    return values(TaskStation)


def completion_status_options() -> List[str]:
    return values(CompletionStatus)


def _as_id(value) -> Optional[int]:
    if value in (None, ''):
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


@dataclass
class TimesheetForm:
    staff_id: Any = None
    department_id: Any = None
    task_date: str = ''
    start_hour: str = ''
    start_minute: str = ''
    end_hour: str = ''
    end_minute: str = ''
    task_description: str = ''
    task_type: str = ''
    task_station: str = TaskStation.OFFICE.value
    client_id: Any = None
    project_id: Any = None
    completion_status: str = ''
    key_results: str = ''

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TimesheetForm":
        """Build a form from submitted data, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def _time(self, hour: str, minute: str) -> Optional[str]:
        if hour not in hour_options() or minute not in minute_options():
            return None
        return f"{hour}:{minute}:00"

    @property
    def check_in_time(self) -> Optional[str]:
        return self._time(self.start_hour, self.start_minute)

    @property
    def check_out_time(self) -> Optional[str]:
        return self._time(self.end_hour, self.end_minute)

    def errors(self) -> Dict[str, str]:
        """Field name -> message for every invalid field; empty when valid."""
        errors: Dict[str, str] = {}
        if _as_id(self.staff_id) is None:
            errors['staff_id'] = "Staff member is required"
        if _as_id(self.department_id) is None:
            errors['department_id'] = "Department is required"
        if not (self.task_date or '').strip():
            errors['task_date'] = "Task date is required"
        else:
            try:
                parse_date(self.task_date)
            except ValueError:
                errors['task_date'] = "Task date must be dd/mm/yyyy"
        start, end = self.check_in_time, self.check_out_time
        if start is None:
            errors['start_time'] = "Start time is required"
        if end is None:
            errors['end_time'] = "End time is required"
        if start and end and end <= start:
            errors['end_time'] = "End time must be after start time"
        if len((self.task_description or '').strip()) < MIN_DESCRIPTION_LENGTH:
            errors['task_description'] = f"Task description must be at least {MIN_DESCRIPTION_LENGTH} characters"
        if match_value(TaskType, self.task_type, ignore_case=True) is None:
            errors['task_type'] = "Select a task type"
        if match_value(TaskStation, self.task_station) is None:
            errors['task_station'] = "Select a task station"
        if self.client_id not in (None, '') and _as_id(self.client_id) is None:
            errors['client_id'] = "Invalid client"
        if self.project_id not in (None, '') and _as_id(self.project_id) is None:
            errors['project_id'] = "Invalid project"
        if self.completion_status and match_value(CompletionStatus, self.completion_status) is None:
            errors['completion_status'] = "Select a completion status"
        return errors

    def is_valid(self) -> bool:
        return not self.errors()

    def to_payload(self) -> Dict[str, Any]:
        """The create-timesheet request body; raises FormError if invalid.

        Completion status and key results stay on the form; the timesheet
        record has no columns for them.
        """
        errors = self.errors()
        if errors:
            raise FormError(errors)
        payload: Dict[str, Any] = {
            'staff_id': _as_id(self.staff_id),
            'department_id': _as_id(self.department_id),
            'date': format_date(parse_date(self.task_date)),
            'check_in_time': self.check_in_time,
            'check_out_time': self.check_out_time,
            'task_description': self.task_description.strip(),
            'task_type': match_value(TaskType, self.task_type, ignore_case=True),
            'task_station': self.task_station,
        }
        client_id, project_id = _as_id(self.client_id), _as_id(self.project_id)
        if client_id is not None:
            payload['client_id'] = client_id
        if project_id is not None:
            payload['project_id'] = project_id
        return payload
