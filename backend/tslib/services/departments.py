"""Department service."""
from typing import Any, Dict, List, Optional

from sqlalchemy import distinct, func, select

from ..errors import bad_request
from ..schema import departments, staff, timesheets
from ..timeutils import sanitize_string
from .common import require_existing, update_fields

DepartmentRecord = Dict[str, Any]


def _department_query():
    head = staff.alias('head')
    members = staff.alias('members')
    return (
        select(
            departments.c.department_id,
            departments.c.department_name,
            departments.c.department_head_id,
            departments.c.created_at,
            departments.c.updated_at,
            head.c.staff_name.label('department_head_name'),
            func.coalesce(head.c.work_email, head.c.personal_email).label('department_head_email'),
            func.count(distinct(members.c.staff_id)).label('staff_count'),
        )
        .select_from(
            departments
            .join(head, departments.c.department_head_id == head.c.staff_id)
            .outerjoin(members, members.c.department_id == departments.c.department_id)
        )
        .group_by(
            departments.c.department_id,
            departments.c.department_name,
            departments.c.department_head_id,
            departments.c.created_at,
            departments.c.updated_at,
            head.c.staff_name,
            head.c.work_email,
            head.c.personal_email,
        )
    )


def get_all_departments(db) -> List[DepartmentRecord]:
    return db.fetchall(_department_query().order_by(departments.c.department_name))


def get_department_by_id(db, department_id: int) -> Optional[DepartmentRecord]:
    return db.fetchone(_department_query().where(departments.c.department_id == department_id))


def _check_name(db, name: str, exclude_id: Optional[int] = None) -> str:
    name = sanitize_string(name or '')
    if not name:
        raise bad_request("Department name is required")
    stmt = select(departments.c.department_id).where(departments.c.department_name == name)
    if exclude_id is not None:
        stmt = stmt.where(departments.c.department_id != exclude_id)
    if db.scalar(stmt) is not None:
        raise bad_request("Department name already exists")
    return name


def create_department(db, data: dict) -> DepartmentRecord:
    name = _check_name(db, data.get('department_name'))
    head_id = data.get('department_head_id')
    require_existing(db, staff, head_id, "Department head ID does not exist")
    return db.insert(departments, {'department_name': name, 'department_head_id': head_id})


def update_department(db, department_id: int, data: dict) -> Optional[DepartmentRecord]:
    if not db.exists(departments, department_id):
        return None
    fields = update_fields(data, immutable=('department_id',))
    if 'department_name' in fields:
        fields['department_name'] = _check_name(db, fields['department_name'], exclude_id=department_id)
    if 'department_head_id' in fields:
        require_existing(db, staff, fields['department_head_id'], "Department head ID does not exist")
    db.update(departments, department_id, fields)
    return get_department_by_id(db, department_id)


def delete_department(db, department_id: int) -> bool:
    if not db.exists(departments, department_id):
        return False
    if db.count(staff, staff.c.department_id, department_id):
        raise bad_request("Cannot delete department with assigned staff members. Reassign staff first.")
    if db.count(timesheets, timesheets.c.department_id, department_id):
        raise bad_request("Cannot delete department with existing timesheet entries.")
    return db.delete(departments, department_id) > 0


def get_department_staff(db, department_id: int) -> List[Dict[str, Any]]:
    stmt = (
        select(
            staff.c.staff_id,
            staff.c.staff_name,
            staff.c.staff_role,
            staff.c.work_type,
            staff.c.username,
            staff.c.work_email,
            staff.c.status,
        )
        .where(staff.c.department_id == department_id)
        .order_by(staff.c.staff_name)
    )
    return db.fetchall(stmt)
