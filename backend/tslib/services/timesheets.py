"""Timesheet service: entries, dynamic filtered listing and hours summaries.

``hours_spent`` is derived from the check-in/check-out pair whenever an
entry is written; callers never set it directly.
"""
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import distinct, func, select

from ..enums import TaskStation, TaskType
from ..errors import bad_request
from ..schema import clients, departments, projects, staff, timesheets
from ..timeutils import calculate_hours, parse_time
from .common import (
    check_date_window, optional_date, paginate, require_choice, require_date,
    require_existing, update_fields,
)

TimesheetRecord = Dict[str, Any]

_READ_ONLY = ('timesheet_id', 'hours_spent')


def _timesheet_query():
    return (
        select(
            timesheets,
            staff.c.staff_name,
            departments.c.department_name,
            clients.c.client_name,
            projects.c.project_name,
        )
        .select_from(
            timesheets
            .join(staff, timesheets.c.staff_id == staff.c.staff_id)
            .join(departments, timesheets.c.department_id == departments.c.department_id)
            .outerjoin(clients, timesheets.c.client_id == clients.c.client_id)
            .outerjoin(projects, timesheets.c.project_id == projects.c.project_id)
        )
    )


def _window(stmt, start_date, end_date):
    start = optional_date(start_date, "Start date")
    end = optional_date(end_date, "End date")
    check_date_window(start, end)
    if start:
        stmt = stmt.where(timesheets.c.date >= start)
    if end:
        stmt = stmt.where(timesheets.c.date <= end)
    return stmt


def get_timesheets(
    db,
    start_date=None,
    end_date=None,
    staff_id: Optional[int] = None,
    department_id: Optional[int] = None,
    client_id: Optional[int] = None,
    project_id: Optional[int] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[TimesheetRecord]:
    """List entries matching every supplied filter, newest first."""
    stmt = _window(_timesheet_query(), start_date, end_date)
    for column, value in (
        (timesheets.c.staff_id, staff_id),
        (timesheets.c.department_id, department_id),
        (timesheets.c.client_id, client_id),
        (timesheets.c.project_id, project_id),
    ):
        if value:
            stmt = stmt.where(column == value)
    stmt = stmt.order_by(
        timesheets.c.date.desc(),
        timesheets.c.check_in_time.desc(),
        timesheets.c.timesheet_id.desc(),
    )
    return db.fetchall(paginate(stmt, page, limit))


def get_timesheet_by_id(db, timesheet_id: int) -> Optional[TimesheetRecord]:
    return db.fetchone(_timesheet_query().where(timesheets.c.timesheet_id == timesheet_id))


def _times(check_in, check_out):
    try:
        start = parse_time(check_in)
    except ValueError:
        raise bad_request("Check-in time must be in HH:MM:SS format") from None
    try:
        end = parse_time(check_out)
    except ValueError:
        raise bad_request("Check-out time must be in HH:MM:SS format") from None
    if end <= start:
        raise bad_request("Check-out time must be after check-in time")
    return start, end


def _description(value) -> str:
    text = (value or '').strip()
    if len(text) < 5:
        raise bad_request("Task description must be at least 5 characters")
    return text


def _link_client_project(db, client_id, project_id):
    """Validate the optional client/project pair; fill the client from the project."""
    if client_id:
        require_existing(db, clients, client_id, "Client ID does not exist")
    if not project_id:
        return client_id or None, None
    project = db.get_record(projects, project_id)
    if project is None:
        raise bad_request("Project ID does not exist")
    if client_id and project['client_id'] != client_id:
        raise bad_request("Project does not belong to the selected client")
    return project['client_id'], project_id


def create_timesheet(db, data: dict) -> TimesheetRecord:
    start, end = _times(data.get('check_in_time'), data.get('check_out_time'))
    staff_id = data.get('staff_id')
    department_id = data.get('department_id')
    require_existing(db, staff, staff_id, "Staff ID does not exist")
    require_existing(db, departments, department_id, "Department ID does not exist")
    client_id, project_id = _link_client_project(db, data.get('client_id'), data.get('project_id'))
    values = {
        'staff_id': staff_id,
        'department_id': department_id,
        'task_description': _description(data.get('task_description')),
        'task_type': require_choice(TaskType, data.get('task_type'), "task type", ignore_case=True),
        'task_station': require_choice(TaskStation, data.get('task_station'), "task station"),
        'date': require_date(data.get('date'), "Date"),
        'check_in_time': start,
        'check_out_time': end,
        'hours_spent': calculate_hours(start, end),
        'client_id': client_id,
        'project_id': project_id,
    }
    entry = db.insert(timesheets, values)
    return get_timesheet_by_id(db, entry['timesheet_id'])


def update_timesheet(db, timesheet_id: int, data: dict) -> Optional[TimesheetRecord]:
    existing = db.get_record(timesheets, timesheet_id)
    if existing is None:
        return None
    fields = update_fields(data, immutable=_READ_ONLY)
    if 'task_description' in fields:
        fields['task_description'] = _description(fields['task_description'])
    if 'task_station' in fields:
        fields['task_station'] = require_choice(TaskStation, fields['task_station'], "task station")
    if 'task_type' in fields:
        fields['task_type'] = require_choice(TaskType, fields['task_type'], "task type", ignore_case=True)
    if 'date' in fields:
        fields['date'] = require_date(fields['date'], "Date")
    if 'staff_id' in fields:
        require_existing(db, staff, fields['staff_id'], "Staff ID does not exist")
    if 'department_id' in fields:
        require_existing(db, departments, fields['department_id'], "Department ID does not exist")
    if 'check_in_time' in fields or 'check_out_time' in fields:
        start, end = _times(
            fields.get('check_in_time', existing['check_in_time']),
            fields.get('check_out_time', existing['check_out_time']),
        )
        fields.update(check_in_time=start, check_out_time=end, hours_spent=calculate_hours(start, end))
    if 'client_id' in fields or 'project_id' in fields:
        client_id, project_id = _link_client_project(
            db,
            fields.get('client_id', existing['client_id']),
            fields.get('project_id', existing['project_id']),
        )
        fields.update(client_id=client_id, project_id=project_id)
    db.update(timesheets, timesheet_id, fields)
    return get_timesheet_by_id(db, timesheet_id)


def delete_timesheet(db, timesheet_id: int) -> bool:
    return db.delete(timesheets, timesheet_id) > 0


# ── Hours summaries ────────────────────────────────────────────

def _summary(db, where, start_date=None, end_date=None, with_staff_count: bool = False) -> Dict[str, Any]:
    columns = [
        func.coalesce(func.sum(timesheets.c.hours_spent), 0.0).label('total_hours'),
        func.count(timesheets.c.timesheet_id).label('number_of_entries'),
        func.min(timesheets.c.date).label('first_entry_date'),
        func.max(timesheets.c.date).label('last_entry_date'),
    ]
    if with_staff_count:
        columns.append(func.count(distinct(timesheets.c.staff_id)).label('staff_count'))
    stmt = _window(select(*columns).where(where), start_date, end_date)
    row = db.fetchone(stmt)
    row['total_hours'] = round(float(row['total_hours'] or 0), 2)
    row['first_entry_date'] = _as_date(row['first_entry_date'])
    row['last_entry_date'] = _as_date(row['last_entry_date'])
    return row


def _as_date(value) -> Optional[date]:
    # MIN()/MAX() over a Date column lose their type on SQLite
    if value is None or isinstance(value, date):
        return value
    return require_date(value, "Date")


def get_staff_hours_summary(db, staff_id: int, start_date=None, end_date=None) -> Optional[Dict[str, Any]]:
    member = db.get_record(staff, staff_id)
    if member is None:
        return None
    summary = _summary(db, timesheets.c.staff_id == staff_id, start_date, end_date)
    return {'staff_id': staff_id, 'staff_name': member['staff_name'], **summary}


def get_department_hours_summary(db, department_id: int, start_date=None, end_date=None) -> Optional[Dict[str, Any]]:
    department = db.get_record(departments, department_id)
    if department is None:
        return None
    summary = _summary(
        db, timesheets.c.department_id == department_id, start_date, end_date, with_staff_count=True,
    )
    return {'department_id': department_id, 'department_name': department['department_name'], **summary}


def get_project_hours_summary(db, project_id: int, start_date=None, end_date=None) -> Optional[Dict[str, Any]]:
    project = db.get_record(projects, project_id)
    if project is None:
        return None
    client = db.get_record(clients, project['client_id'])
    summary = _summary(
        db, timesheets.c.project_id == project_id, start_date, end_date, with_staff_count=True,
    )
    return {
        'project_id': project_id,
        'project_name': project['project_name'],
        'client_name': client['client_name'] if client else None,
        **summary,
    }


def get_client_hours_summary(db, client_id: int, start_date=None, end_date=None) -> Optional[Dict[str, Any]]:
    client = db.get_record(clients, client_id)
    if client is None:
        return None
    summary = _summary(
        db, timesheets.c.client_id == client_id, start_date, end_date, with_staff_count=True,
    )
    return {'client_id': client_id, 'client_name': client['client_name'], **summary}
