"""
API-level tests: health endpoints, response envelope, error handling,
middleware headers and configuration.
"""
import pytest
from sqlalchemy.exc import IntegrityError
from starlette.testclient import TestClient


class TestHealth:
    def test_root_banner(self, client):
        res = client.get('/')
        assert res.status_code == 200
        body = res.json()
        assert body['status'] == 'success'
        assert body['data']['service'] == 'Staff Timesheet API'
        assert body['data']['endpoints']['timesheets'] == '/api/timesheets'

    def test_health(self, client):
        data = client.get('/health').json()['data']
        assert data['status'] == 'healthy'
        assert 'timestamp' in data

    def test_health_detailed(self, client, seed):
        data = client.get('/health/detailed').json()['data']
        assert data['database']['status'] == 'connected'
        assert data['database']['records']['staff'] == 2
        assert data['database']['records']['timesheets'] == 0
        assert data['uptime_seconds'] >= 0

    def test_health_detailed_without_database(self, client, monkeypatch):
        import api.main as main_module
        monkeypatch.setattr(main_module, 'DATABASE_URL', None)
        data = client.get('/health/detailed').json()['data']
        assert data['status'] == 'degraded'
        assert data['database']['status'] == 'disconnected'


class TestErrorHandling:
    def test_unknown_route(self, client):
        res = client.get('/api/nope')
        assert res.status_code == 404
        assert res.json() == {
            'status': 'error',
            'statusCode': 404,
            'message': 'Route not found: GET /api/nope',
        }

    def test_method_not_allowed(self, client):
        res = client.delete('/api/staff')
        assert res.status_code == 405
        assert res.json()['status'] == 'error'

    def test_invalid_json(self, client, seed):
        res = client.post('/api/staff', content=b'{"staff_name": ', headers={'Content-Type': 'application/json'})
        assert res.status_code == 400
        assert res.json()['message'] == 'Validation failed'

    def test_integrity_error_is_conflict(self, client, seed, monkeypatch):
        from tslib.services import staff as staff_service

        def _raise(db, data):
            raise IntegrityError("INSERT INTO staff", {}, Exception("UNIQUE constraint failed"))

        monkeypatch.setattr(staff_service, 'create_staff', _raise)
        res = client.post('/api/staff', json={
            'staff_name': 'Mary Kamau', 'work_type': 'Employment', 'staff_role': 'Accountant',
            'personal_email': 'mary@example.com', 'date_joined': '2024-02-01',
        })
        assert res.status_code == 409
        assert res.json()['statusCode'] == 409

    def test_unhandled_error_is_500(self, app, monkeypatch):
        from tslib.services import departments as department_service

        def _boom(db):
            raise RuntimeError("boom")

        monkeypatch.setattr(department_service, 'get_all_departments', _boom)
        with TestClient(app, raise_server_exceptions=False) as c:
            res = c.get('/api/departments')
        assert res.status_code == 500
        body = res.json()
        assert body['message'] == 'Internal Server Error'
        assert 'stack' not in body

    def test_get_db_requires_configuration(self, db_url, monkeypatch):
        import api.main as main_module
        from api.dependencies import get_db
        monkeypatch.setattr(main_module, 'DATABASE_URL', None)
        with pytest.raises(RuntimeError):
            get_db()


class TestMiddleware:
    def test_security_headers(self, client):
        res = client.get('/health')
        assert res.headers['X-Content-Type-Options'] == 'nosniff'
        assert res.headers['X-Frame-Options'] == 'DENY'

    def test_request_id(self, client):
        res = client.get('/health')
        assert len(res.headers['X-Request-ID']) == 8

    def test_cors(self, client):
        res = client.get('/health', headers={'Origin': 'http://localhost:5173'})
        assert res.headers['access-control-allow-origin'] == '*'


class TestEnvelope:
    def test_list_has_count(self):
        from api.dependencies import envelope
        assert envelope([1, 2]) == {'status': 'success', 'count': 2, 'data': [1, 2]}

    def test_message_only(self):
        from api.dependencies import envelope
        assert envelope(message='Deleted') == {'status': 'success', 'message': 'Deleted'}

    def test_object(self):
        from api.dependencies import envelope
        assert envelope({'a': 1}, message='ok') == {'status': 'success', 'message': 'ok', 'data': {'a': 1}}


class TestConfig:
    _VARS = ('DATABASE_URL', 'DB_HOST', 'DB_PORT', 'DB_NAME', 'DB_USER', 'DB_PASSWORD')

    def _clear(self, monkeypatch):
        for name in self._VARS:
            monkeypatch.delenv(name, raising=False)

    def test_database_url_wins(self, monkeypatch):
        from api import config
        self._clear(monkeypatch)
        monkeypatch.setenv('DATABASE_URL', 'sqlite:///x.db')
        monkeypatch.setenv('DB_HOST', 'db')
        assert config.database_url() == 'sqlite:///x.db'

    def test_assembled_from_parts(self, monkeypatch):
        from api import config
        self._clear(monkeypatch)
        for name, value in (('DB_HOST', 'db'), ('DB_PORT', '5432'), ('DB_NAME', 'timesheets'),
                            ('DB_USER', 'app'), ('DB_PASSWORD', 'p@ss')):
            monkeypatch.setenv(name, value)
        assert config.database_url().startswith('postgresql://app:p%40ss@db:5432/timesheets')

    def test_missing_parts(self, monkeypatch):
        from api import config
        self._clear(monkeypatch)
        monkeypatch.setenv('DB_HOST', 'db')
        with pytest.raises(RuntimeError, match='DB_PASSWORD'):
            config.database_url()

    def test_unconfigured(self, monkeypatch):
        from api import config
        self._clear(monkeypatch)
        assert config.database_url() is None

    def test_pool_options(self):
        from api import config
        options = config.pool_options()
        assert options['pool_size'] == config.DB_MAX_CONNECTIONS
        assert options['max_overflow'] == 0
