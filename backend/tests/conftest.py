"""
Shared test fixtures for the Timesheet backend tests.
"""
import os
import sys
import pytest

# ── Python path setup ──────────────────────────────────────────────────────────
_BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)

# Must be set before api.main is imported
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("TIMESHEET_ENV", "test")
os.environ.setdefault("TIMESHEET_LOG_LEVEL", "WARNING")


@pytest.fixture
def db_url(tmp_path):
    """Function-scoped: fresh SQLite database with the schema, wired into api.main."""
    from tslib.database import dispose_engines, get_engine
    from tslib.schema import create_schema
    import api.main as main_module

    url = f"sqlite:///{tmp_path / 'timesheet.db'}"
    create_schema(get_engine(url))
    original = main_module.DATABASE_URL
    main_module.DATABASE_URL = url
    yield url
    main_module.DATABASE_URL = original
    dispose_engines()


@pytest.fixture
def db(db_url):
    from tslib.database import TimesheetDatabase, get_engine
    return TimesheetDatabase(get_engine(db_url))


@pytest.fixture
def seed(db):
    """Reference data: two staff, one department, two clients, two projects.

    Returns a dict of the created IDs.
    """
    from tslib.services import clients, departments, projects, staff

    jane = staff.create_staff(db, {
        'staff_name': 'Jane Wanjiru', 'work_type': 'Employment', 'staff_role': 'Project Officer',
        'gender': 'Female', 'personal_email': 'jane@example.com', 'date_joined': '2023-01-15',
        'work_email': 'jane@work.example.com',
    })
    peter = staff.create_staff(db, {
        'staff_name': 'Peter Otieno', 'work_type': 'Consultancy', 'staff_role': 'Data Analyst',
        'personal_email': 'peter@example.com', 'date_joined': '2023-06-01',
    })
    research = departments.create_department(db, {
        'department_name': 'Research', 'department_head_id': jane['staff_id'],
    })
    for member in (jane, peter):
        staff.update_staff(db, member['staff_id'], {'department_id': research['department_id']})
    acme = clients.create_client(db, {
        'client_name': 'Acme Foundation', 'sector': 'Non-profit', 'category': 'Converted',
        'account_manager_id': jane['staff_id'], 'entry_date': '2023-02-01',
    })
    council = clients.create_client(db, {
        'client_name': 'City Council', 'sector': 'Government', 'category': 'Prospect',
        'account_manager_id': peter['staff_id'],
    })
    water = projects.create_project(db, {
        'project_name': 'Water Access Study', 'client_id': acme['client_id'],
        'start_date': '2024-01-01', 'cluster': 'Water', 'account_manager': jane['staff_id'],
    })
    quarry = projects.create_project(db, {
        'project_name': 'Quarry Survey', 'client_id': acme['client_id'],
        'start_date': '2023-01-01', 'end_date': '2023-12-31', 'cluster': 'Stone',
    })
    return {
        'jane': jane['staff_id'],
        'peter': peter['staff_id'],
        'department': research['department_id'],
        'acme': acme['client_id'],
        'council': council['client_id'],
        'water': water['project_id'],
        'quarry': quarry['project_id'],
    }


@pytest.fixture
def entries(db, seed):
    """Three timesheet entries on top of ``seed``: 4.5h, 8h and 0.75h."""
    from tslib.services import timesheets

    base = {'department_id': seed['department'], 'task_station': 'Office'}
    first = timesheets.create_timesheet(db, {
        **base, 'staff_id': seed['jane'], 'date': '2024-03-01',
        'check_in_time': '08:00', 'check_out_time': '12:30',
        'task_description': 'Drafted survey tool', 'task_type': 'Report writing',
        'client_id': seed['acme'], 'project_id': seed['water'],
    })
    second = timesheets.create_timesheet(db, {
        **base, 'staff_id': seed['peter'], 'date': '2024-03-02',
        'check_in_time': '09:00:00', 'check_out_time': '17:00:00',
        'task_description': 'Cleaned household data', 'task_type': 'Creative',
        'project_id': seed['water'], 'task_station': 'Field',
    })
    third = timesheets.create_timesheet(db, {
        **base, 'staff_id': seed['jane'], 'date': '2024-03-05',
        'check_in_time': '13:15', 'check_out_time': '14:00',
        'task_description': 'Weekly team meeting', 'task_type': 'Admin meeting',
    })
    return [first['timesheet_id'], second['timesheet_id'], third['timesheet_id']]


@pytest.fixture
def app(db_url):
    """Return the FastAPI app pointed at the test database."""
    from api.main import app as _app
    return _app


@pytest.fixture
def client(app):
    """Function-scoped sync TestClient against a fresh database."""
    from starlette.testclient import TestClient
    with TestClient(app, raise_server_exceptions=True) as c:
        yield c
