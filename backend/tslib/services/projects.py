"""Project service.

A project is *active* while it has no end date or its end date has not
passed yet.
"""
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import case, distinct, func, or_, select

from ..enums import ProjectCluster
from ..errors import bad_request
from ..schema import clients, departments, projects, staff, timesheets
from ..timeutils import sanitize_string
from .common import (
    check_date_window, optional_date, require_choice, require_date,
    require_existing, update_fields,
)

ProjectRecord = Dict[str, Any]


def _active_clause(today: date):
    return or_(projects.c.end_date.is_(None), projects.c.end_date >= today)


def _project_query(today: date):
    manager = staff.alias('manager')
    totals = (
        select(
            timesheets.c.project_id,
            func.sum(timesheets.c.hours_spent).label('total_hours'),
            func.count(distinct(timesheets.c.staff_id)).label('staff_count'),
            func.count(timesheets.c.timesheet_id).label('timesheet_count'),
        )
        .where(timesheets.c.project_id.is_not(None))
        .group_by(timesheets.c.project_id)
        .subquery('totals')
    )
    return (
        select(
            projects,
            clients.c.client_name,
            clients.c.sector.label('client_sector'),
            manager.c.staff_name.label('account_manager_name'),
            func.coalesce(manager.c.work_email, manager.c.personal_email).label('account_manager_email'),
            func.coalesce(totals.c.total_hours, 0.0).label('total_hours'),
            func.coalesce(totals.c.staff_count, 0).label('staff_count'),
            func.coalesce(totals.c.timesheet_count, 0).label('timesheet_count'),
            case((_active_clause(today), True), else_=False).label('is_active'),
        )
        .select_from(
            projects
            .join(clients, projects.c.client_id == clients.c.client_id)
            .outerjoin(manager, projects.c.account_manager == manager.c.staff_id)
            .outerjoin(totals, totals.c.project_id == projects.c.project_id)
        )
    )


def _with_flags(rows: List[ProjectRecord]) -> List[ProjectRecord]:
    # SQLite reports the CASE result as 0/1
    for row in rows:
        row['is_active'] = bool(row['is_active'])
    return rows


def get_all_projects(
    db,
    cluster: Optional[str] = None,
    account_manager: Optional[int] = None,
    active_only: bool = False,
) -> List[ProjectRecord]:
    today = date.today()
    stmt = _project_query(today)
    if cluster:
        stmt = stmt.where(projects.c.cluster == require_choice(ProjectCluster, cluster, "cluster"))
    if account_manager is not None:
        stmt = stmt.where(projects.c.account_manager == account_manager)
    if active_only:
        stmt = stmt.where(_active_clause(today))
    stmt = stmt.order_by(projects.c.start_date.desc(), projects.c.project_id.desc())
    return _with_flags(db.fetchall(stmt))


def get_project_by_id(db, project_id: int) -> Optional[ProjectRecord]:
    row = db.fetchone(_project_query(date.today()).where(projects.c.project_id == project_id))
    return _with_flags([row])[0] if row else None


def get_projects_by_cluster(db, cluster: str) -> List[ProjectRecord]:
    return get_all_projects(db, cluster=cluster)


def get_active_projects(db) -> List[ProjectRecord]:
    return get_all_projects(db, active_only=True)


def get_projects_by_account_manager(db, account_manager_id: int) -> List[ProjectRecord]:
    return get_all_projects(db, account_manager=account_manager_id)


def create_project(db, data: dict) -> ProjectRecord:
    name = sanitize_string(data.get('project_name') or '')
    if not name:
        raise bad_request("Project name is required")
    values = {
        'project_name': name,
        'cluster': require_choice(ProjectCluster, data.get('cluster'), "cluster"),
        'client_id': data.get('client_id'),
        'start_date': require_date(data.get('start_date'), "Start date"),
        'end_date': optional_date(data.get('end_date'), "End date"),
        'account_manager': data.get('account_manager') or None,
    }
    require_existing(db, clients, values['client_id'], "Client ID does not exist")
    if values['account_manager'] is not None:
        require_existing(db, staff, values['account_manager'], "Account manager ID does not exist")
    check_date_window(values['start_date'], values['end_date'])
    return db.insert(projects, values)


def update_project(db, project_id: int, data: dict) -> Optional[ProjectRecord]:
    existing = db.get_record(projects, project_id)
    if existing is None:
        return None
    fields = update_fields(data, immutable=('project_id',))
    if 'project_name' in fields:
        fields['project_name'] = sanitize_string(fields['project_name'] or '')
        if not fields['project_name']:
            raise bad_request("Project name is required")
    if 'cluster' in fields:
        fields['cluster'] = require_choice(ProjectCluster, fields['cluster'], "cluster")
    follow_up = []
    if 'client_id' in fields:
        require_existing(db, clients, fields['client_id'], "Client ID does not exist")
        if fields['client_id'] != existing['client_id']:
            # entries logged against the project move with it
            follow_up.append(
                timesheets.update()
                .where(timesheets.c.project_id == project_id)
                .values(client_id=fields['client_id'], updated_at=func.now())
            )
    if fields.get('account_manager') is not None:
        require_existing(db, staff, fields['account_manager'], "Account manager ID does not exist")
    if 'start_date' in fields:
        fields['start_date'] = require_date(fields['start_date'], "Start date")
    if 'end_date' in fields:
        fields['end_date'] = optional_date(fields['end_date'], "End date")
    check_date_window(
        fields.get('start_date', existing['start_date']),
        fields.get('end_date', existing['end_date']),
    )
    db.update(projects, project_id, fields, also=follow_up)
    return get_project_by_id(db, project_id)


def delete_project(db, project_id: int) -> bool:
    if not db.exists(projects, project_id):
        return False
    if db.count(timesheets, timesheets.c.project_id, project_id):
        raise bad_request("Cannot delete project with existing timesheet entries.")
    return db.delete(projects, project_id) > 0


def get_project_timesheets(db, project_id: int) -> List[Dict[str, Any]]:
    stmt = (
        select(
            timesheets.c.timesheet_id,
            timesheets.c.staff_id,
            staff.c.staff_name,
            timesheets.c.task_description,
            timesheets.c.task_type,
            timesheets.c.date,
            timesheets.c.hours_spent,
            departments.c.department_name,
        )
        .select_from(
            timesheets
            .join(staff, timesheets.c.staff_id == staff.c.staff_id)
            .join(departments, timesheets.c.department_id == departments.c.department_id)
        )
        .where(timesheets.c.project_id == project_id)
        .order_by(timesheets.c.date.desc(), timesheets.c.timesheet_id.desc())
    )
    return db.fetchall(stmt)


def get_project_staff_breakdown(db, project_id: int) -> List[Dict[str, Any]]:
    """Hours per staff member on a project, largest contributor first."""
    total_hours = func.sum(timesheets.c.hours_spent).label('total_hours')
    stmt = (
        select(
            staff.c.staff_id,
            staff.c.staff_name,
            staff.c.staff_role,
            departments.c.department_name,
            total_hours,
            func.count(timesheets.c.timesheet_id).label('entry_count'),
        )
        .select_from(
            timesheets
            .join(staff, timesheets.c.staff_id == staff.c.staff_id)
            .join(departments, timesheets.c.department_id == departments.c.department_id)
        )
        .where(timesheets.c.project_id == project_id)
        .group_by(
            staff.c.staff_id,
            staff.c.staff_name,
            staff.c.staff_role,
            departments.c.department_name,
        )
        .order_by(total_hours.desc())
    )
    return db.fetchall(stmt)
