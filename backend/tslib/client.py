"""HTTP client for the Timesheet API.

Covers what the timesheet entry screen needs: reference data for the select
fields (clients, departments, projects, a client's projects), submitting an
entry, and reading entries and hours back.
"""
import logging
import os
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger('timesheet.client')

DEFAULT_BASE_URL = "http://localhost:3000/api"


class TimesheetClientError(Exception):
    """Raised for non-2xx responses; carries the server's message."""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class TimesheetClient:
    """Thin synchronous wrapper over ``httpx.Client``.

    ``http`` may be any ``httpx.Client`` (a Starlette ``TestClient`` works);
    a client created here is closed by :meth:`close`.
    """

    def __init__(self, base_url: Optional[str] = None, http: Optional[httpx.Client] = None,
                 timeout: float = 10.0):
        self.base_url = (base_url or os.environ.get('TIMESHEET_API_BASE_URL') or DEFAULT_BASE_URL).rstrip('/')
        self._owns_http = http is None
        self.http = http if http is not None else httpx.Client(
            timeout=timeout, headers={"Content-Type": "application/json"},
        )

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "TimesheetClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, path: str, *, params: Optional[dict] = None,
                 json: Optional[dict] = None) -> Any:
        url = f"{self.base_url}{path}"
        if params:
            params = {k: v for k, v in params.items() if v is not None}
        try:
            response = self.http.request(method, url, params=params, json=json)
        except httpx.HTTPError as exc:
            logger.error("Request failed: %s %s | %s", method, url, exc)
            raise TimesheetClientError(0, f"Could not reach the timesheet API: {exc}") from exc
        try:
            body = response.json()
        except ValueError:
            body = {}
        if response.is_error:
            message = body.get('message') if isinstance(body, dict) else None
            message = message or f"Request failed: {response.reason_phrase or response.status_code}"
            logger.warning("API error: %s %s -> %d %s", method, url, response.status_code, message)
            raise TimesheetClientError(response.status_code, message)
        return body.get('data') if isinstance(body, dict) else body

    # ── Reference data ─────────────────────────────────────────
    def get_clients(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/clients')

    def get_departments(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/departments')

    def get_projects(self, active_only: bool = False) -> List[Dict[str, Any]]:
        return self._request('GET', '/projects/active' if active_only else '/projects')

    def get_client_projects(self, client_id: int) -> List[Dict[str, Any]]:
        return self._request('GET', f'/clients/{client_id}/projects')

    # ── Timesheets ─────────────────────────────────────────────
    def create_timesheet(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._request('POST', '/timesheets', json=payload)

    def get_timesheets(self, start_date: Optional[str] = None, end_date: Optional[str] = None,
                       staff_id: Optional[int] = None, department_id: Optional[int] = None,
                       client_id: Optional[int] = None, project_id: Optional[int] = None,
                       page: Optional[int] = None, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        params = {
            'startDate': start_date, 'endDate': end_date,
            'staffId': staff_id, 'departmentId': department_id,
            'clientId': client_id, 'projectId': project_id,
            'page': page, 'limit': limit,
        }
        return self._request('GET', '/timesheets', params=params)

    def get_staff_hours(self, staff_id: int, start_date: Optional[str] = None,
                        end_date: Optional[str] = None) -> Dict[str, Any]:
        return self._request(
            'GET', f'/timesheets/staff/{staff_id}/hours',
            params={'startDate': start_date, 'endDate': end_date},
        )
