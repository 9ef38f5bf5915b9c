"""Client service."""
from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy import distinct, func, select

from ..enums import ClientCategory, ClientSector
from ..errors import bad_request
from ..schema import clients, projects, staff, timesheets
from ..timeutils import sanitize_string
from .common import optional_date, require_choice, require_existing, update_fields

ClientRecord = Dict[str, Any]


def _client_query():
    manager = staff.alias('manager')
    # Correlated subqueries keep project rows from multiplying timesheet hours
    project_count = (
        select(func.count(projects.c.project_id))
        .where(projects.c.client_id == clients.c.client_id)
        .correlate(clients)
        .scalar_subquery()
    )
    total_hours = (
        select(func.coalesce(func.sum(timesheets.c.hours_spent), 0.0))
        .where(timesheets.c.client_id == clients.c.client_id)
        .correlate(clients)
        .scalar_subquery()
    )
    return (
        select(
            clients,
            manager.c.staff_name.label('account_manager_name'),
            func.coalesce(manager.c.work_email, manager.c.personal_email).label('account_manager_email'),
            project_count.label('project_count'),
            total_hours.label('total_hours'),
        )
        .select_from(clients.join(manager, clients.c.account_manager_id == manager.c.staff_id))
    )


def get_all_clients(db, sector: Optional[str] = None, category: Optional[str] = None) -> List[ClientRecord]:
    stmt = _client_query()
    if sector:
        stmt = stmt.where(clients.c.sector == require_choice(ClientSector, sector, "sector"))
    if category:
        stmt = stmt.where(clients.c.category == require_choice(ClientCategory, category, "category"))
    return db.fetchall(stmt.order_by(clients.c.client_name))


def get_client_by_id(db, client_id: int) -> Optional[ClientRecord]:
    return db.fetchone(_client_query().where(clients.c.client_id == client_id))


def get_clients_by_sector(db, sector: str) -> List[ClientRecord]:
    return get_all_clients(db, sector=sector)


def get_clients_by_category(db, category: str) -> List[ClientRecord]:
    return get_all_clients(db, category=category)


def create_client(db, data: dict) -> ClientRecord:
    name = sanitize_string(data.get('client_name') or '')
    if not name:
        raise bad_request("Client name is required")
    values = {
        'client_name': name,
        'sector': require_choice(ClientSector, data.get('sector'), "sector"),
        'category': require_choice(ClientCategory, data.get('category'), "category"),
        'account_manager_id': data.get('account_manager_id'),
        'entry_date': optional_date(data.get('entry_date'), "Entry date") or date.today(),
    }
    require_existing(db, staff, values['account_manager_id'], "Account manager ID does not exist")
    return db.insert(clients, values)


def update_client(db, client_id: int, data: dict) -> Optional[ClientRecord]:
    if not db.exists(clients, client_id):
        return None
    fields = update_fields(data, immutable=('client_id',))
    if 'client_name' in fields:
        fields['client_name'] = sanitize_string(fields['client_name'] or '')
        if not fields['client_name']:
            raise bad_request("Client name is required")
    if 'sector' in fields:
        fields['sector'] = require_choice(ClientSector, fields['sector'], "sector")
    if 'category' in fields:
        fields['category'] = require_choice(ClientCategory, fields['category'], "category")
    if 'account_manager_id' in fields:
        require_existing(db, staff, fields['account_manager_id'], "Account manager ID does not exist")
    if 'entry_date' in fields:
        fields['entry_date'] = optional_date(fields['entry_date'], "Entry date") or date.today()
    db.update(clients, client_id, fields)
    return get_client_by_id(db, client_id)


def delete_client(db, client_id: int) -> bool:
    """Delete a client that has neither projects nor timesheet entries."""
    if not db.exists(clients, client_id):
        return False
    if db.count(projects, projects.c.client_id, client_id):
        raise bad_request("Cannot delete client with existing projects. Delete projects first.")
    if db.count(timesheets, timesheets.c.client_id, client_id):
        raise bad_request("Cannot delete client with existing timesheet entries.")
    return db.delete(clients, client_id) > 0


def get_client_projects(db, client_id: int) -> List[Dict[str, Any]]:
    stmt = (
        select(
            projects.c.project_id,
            projects.c.project_name,
            projects.c.client_id,
            projects.c.start_date,
            projects.c.end_date,
            projects.c.cluster,
            func.coalesce(func.sum(timesheets.c.hours_spent), 0.0).label('total_hours'),
            func.count(distinct(timesheets.c.staff_id)).label('staff_count'),
        )
        .select_from(projects.outerjoin(timesheets, timesheets.c.project_id == projects.c.project_id))
        .where(projects.c.client_id == client_id)
        .group_by(
            projects.c.project_id,
            projects.c.project_name,
            projects.c.client_id,
            projects.c.start_date,
            projects.c.end_date,
            projects.c.cluster,
        )
        .order_by(projects.c.start_date.desc(), projects.c.project_id.desc())
    )
    return db.fetchall(stmt)
