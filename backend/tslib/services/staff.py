"""Staff service: staff members, their account fields and department membership."""
from typing import Any, Dict, List, Optional

from sqlalchemy import select

from ..enums import AccountStatus, Gender, WorkType
from ..errors import bad_request
from ..schema import clients, departments, projects, staff, timesheets
from ..timeutils import generate_username, is_valid_email, sanitize_string
from .common import (
    paginate, require_choice, require_date, require_existing, update_fields,
)

StaffRecord = Dict[str, Any]


def _staff_query():
    return (
        select(staff, departments.c.department_name)
        .select_from(staff.outerjoin(
            departments, staff.c.department_id == departments.c.department_id
        ))
    )


def get_all_staff(
    db,
    work_type: Optional[str] = None,
    department_id: Optional[int] = None,
    status: Optional[str] = None,
    page: Optional[int] = None,
    limit: Optional[int] = None,
) -> List[StaffRecord]:
    stmt = _staff_query()
    if work_type:
        stmt = stmt.where(staff.c.work_type == require_choice(WorkType, work_type, "work type"))
    if department_id:
        stmt = stmt.where(staff.c.department_id == department_id)
    if status:
        stmt = stmt.where(staff.c.status == require_choice(AccountStatus, status, "status"))
    stmt = stmt.order_by(staff.c.staff_id.desc())
    return db.fetchall(paginate(stmt, page, limit))


def get_staff_by_id(db, staff_id: int) -> Optional[StaffRecord]:
    return db.fetchone(_staff_query().where(staff.c.staff_id == staff_id))


def get_staff_by_work_type(db, work_type: str) -> List[StaffRecord]:
    return get_all_staff(db, work_type=work_type)


def _role(value) -> str:
    role = sanitize_string(value or '')
    if not role:
        raise bad_request("Staff role is required")
    return role


def _check_email(db, email: str, exclude_id: Optional[int] = None) -> str:
    email = (email or '').strip().lower()
    if not is_valid_email(email):
        raise bad_request("Must be a valid email address")
    stmt = select(staff.c.staff_id).where(staff.c.personal_email == email)
    if exclude_id is not None:
        stmt = stmt.where(staff.c.staff_id != exclude_id)
    if db.scalar(stmt) is not None:
        raise bad_request("Email already exists")
    return email


def _unique_username(db, name: str) -> str:
    base = generate_username(name)
    candidate, n = base, 1
    while db.scalar(select(staff.c.staff_id).where(staff.c.username == candidate)) is not None:
        n += 1
        candidate = f"{base}{n}"
    return candidate


def _check_username(db, username: str, exclude_id: Optional[int] = None) -> str:
    username = username.strip().lower()
    stmt = select(staff.c.staff_id).where(staff.c.username == username)
    if exclude_id is not None:
        stmt = stmt.where(staff.c.staff_id != exclude_id)
    if db.scalar(stmt) is not None:
        raise bad_request("Username already exists")
    return username


def create_staff(db, data: dict) -> StaffRecord:
    name = sanitize_string(data.get('staff_name') or '')
    if not name:
        raise bad_request("Staff name is required")
    values = {
        'staff_name': name,
        'work_type': require_choice(WorkType, data.get('work_type'), "work type"),
        'staff_role': _role(data.get('staff_role')),
        'gender': None,
        'personal_email': _check_email(db, data.get('personal_email')),
        'phone_number': data.get('phone_number') or None,
        'date_joined': require_date(data.get('date_joined'), "Date joined"),
        'work_email': data.get('work_email') or None,
        'status': AccountStatus.ACTIVE.value,
        'department_id': data.get('department_id') or None,
    }
    if data.get('gender'):
        values['gender'] = require_choice(Gender, data['gender'], "gender")
    if data.get('status'):
        values['status'] = require_choice(AccountStatus, data['status'], "status")
    if values['department_id'] is not None:
        require_existing(db, departments, values['department_id'], "Department ID does not exist")
    if data.get('username'):
        values['username'] = _check_username(db, data['username'])
    else:
        values['username'] = _unique_username(db, name)
    return db.insert(staff, values)


def update_staff(db, staff_id: int, data: dict) -> Optional[StaffRecord]:
    if not db.exists(staff, staff_id):
        return None
    fields = update_fields(data, immutable=('staff_id',))
    if 'staff_name' in fields:
        fields['staff_name'] = sanitize_string(fields['staff_name'] or '')
        if not fields['staff_name']:
            raise bad_request("Staff name is required")
    if 'staff_role' in fields:
        fields['staff_role'] = _role(fields['staff_role'])
    if 'work_type' in fields:
        fields['work_type'] = require_choice(WorkType, fields['work_type'], "work type")
    if fields.get('gender') is not None:
        fields['gender'] = require_choice(Gender, fields['gender'], "gender")
    if 'status' in fields:
        fields['status'] = require_choice(AccountStatus, fields['status'], "status")
    if 'personal_email' in fields:
        fields['personal_email'] = _check_email(db, fields['personal_email'], exclude_id=staff_id)
    if 'username' in fields and fields['username']:
        fields['username'] = _check_username(db, fields['username'], exclude_id=staff_id)
    if 'date_joined' in fields:
        fields['date_joined'] = require_date(fields['date_joined'], "Date joined")
    if fields.get('department_id') is not None:
        require_existing(db, departments, fields['department_id'], "Department ID does not exist")
    db.update(staff, staff_id, fields)
    return get_staff_by_id(db, staff_id)


def delete_staff(db, staff_id: int) -> bool:
    """Delete a staff member unless other records still point at them."""
    if not db.exists(staff, staff_id):
        return False
    if db.count(departments, departments.c.department_head_id, staff_id):
        raise bad_request("Cannot delete staff member who heads a department. Assign a new head first.")
    if db.count(clients, clients.c.account_manager_id, staff_id):
        raise bad_request("Cannot delete staff member who manages clients. Reassign the clients first.")
    if db.count(projects, projects.c.account_manager, staff_id):
        raise bad_request("Cannot delete staff member who manages projects. Reassign the projects first.")
    if db.count(timesheets, timesheets.c.staff_id, staff_id):
        raise bad_request("Cannot delete staff member with existing timesheet entries.")
    return db.delete(staff, staff_id) > 0
