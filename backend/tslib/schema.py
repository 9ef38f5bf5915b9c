"""Relational schema for staff, departments, clients, projects and timesheets.

Tables are SQLAlchemy Core objects so the same definitions drive PostgreSQL
in production and SQLite in the test-suite.
"""
from sqlalchemy import (
    CheckConstraint, Column, Date, DateTime, Float, ForeignKey, Integer,
    MetaData, String, Table, Text, Time, func,
)

from .enums import (
    AccountStatus, ClientCategory, ClientSector, Gender, ProjectCluster,
    TaskStation, WorkType, values,
)

metadata = MetaData()


def _in(column: str, enum_cls) -> CheckConstraint:
    allowed = ", ".join(f"'{v}'" for v in values(enum_cls))
    return CheckConstraint(f"{column} IN ({allowed})", name=f"ck_{column}_values")


def _timestamps() -> list:
    return [
        Column('created_at', DateTime, nullable=False, server_default=func.now()),
        Column('updated_at', DateTime, nullable=False, server_default=func.now()),
    ]


staff = Table(
    'staff', metadata,
    Column('staff_id', Integer, primary_key=True),
    Column('staff_name', String(100), nullable=False),
    Column('work_type', String(20), nullable=False),
    Column('staff_role', String(100), nullable=False),
    Column('gender', String(10)),
    Column('personal_email', String(255), nullable=False, unique=True),
    Column('phone_number', String(20)),
    Column('date_joined', Date, nullable=False),
    Column('username', String(100), unique=True),
    Column('work_email', String(255)),
    Column('status', String(20), nullable=False, server_default=AccountStatus.ACTIVE.value),
    # departments.department_head_id points back here, hence use_alter
    Column('department_id', Integer,
           ForeignKey('departments.department_id', use_alter=True, name='fk_staff_department')),
    *_timestamps(),
    _in('work_type', WorkType),
    _in('gender', Gender),
    _in('status', AccountStatus),
)

departments = Table(
    'departments', metadata,
    Column('department_id', Integer, primary_key=True),
    Column('department_name', String(100), nullable=False, unique=True),
    Column('department_head_id', Integer, ForeignKey('staff.staff_id'), nullable=False),
    *_timestamps(),
)

clients = Table(
    'clients', metadata,
    Column('client_id', Integer, primary_key=True),
    Column('client_name', String(150), nullable=False),
    Column('sector', String(20), nullable=False),
    Column('category', String(20), nullable=False),
    Column('account_manager_id', Integer, ForeignKey('staff.staff_id'), nullable=False),
    Column('entry_date', Date, nullable=False),
    *_timestamps(),
    _in('sector', ClientSector),
    _in('category', ClientCategory),
)

projects = Table(
    'projects', metadata,
    Column('project_id', Integer, primary_key=True),
    Column('project_name', String(150), nullable=False),
    Column('client_id', Integer, ForeignKey('clients.client_id'), nullable=False),
    Column('start_date', Date, nullable=False),
    Column('end_date', Date),
    Column('cluster', String(10), nullable=False),
    Column('account_manager', Integer, ForeignKey('staff.staff_id')),
    *_timestamps(),
    _in('cluster', ProjectCluster),
    CheckConstraint('end_date IS NULL OR end_date >= start_date', name='ck_project_dates'),
)

timesheets = Table(
    'timesheets', metadata,
    Column('timesheet_id', Integer, primary_key=True),
    Column('staff_id', Integer, ForeignKey('staff.staff_id'), nullable=False, index=True),
    Column('department_id', Integer, ForeignKey('departments.department_id'), nullable=False),
    Column('task_description', Text, nullable=False),
    Column('task_type', String(50), nullable=False),
    Column('task_station', String(10), nullable=False),
    Column('date', Date, nullable=False, index=True),
    Column('check_in_time', Time, nullable=False),
    Column('check_out_time', Time, nullable=False),
    Column('hours_spent', Float, nullable=False),
    Column('client_id', Integer, ForeignKey('clients.client_id')),
    Column('project_id', Integer, ForeignKey('projects.project_id')),
    *_timestamps(),
    _in('task_station', TaskStation),
    CheckConstraint('check_out_time > check_in_time', name='ck_timesheet_times'),
)

# Primary-key column per table, used by the generic fetch/update helpers
PRIMARY_KEYS = {
    staff: staff.c.staff_id,
    departments: departments.c.department_id,
    clients: clients.c.client_id,
    projects: projects.c.project_id,
    timesheets: timesheets.c.timesheet_id,
}


def create_schema(engine) -> None:
    metadata.create_all(engine)
