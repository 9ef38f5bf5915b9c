"""Timesheets router: entries, hours summaries and export."""
import io
import csv
from datetime import date
from typing import Optional

from fastapi import APIRouter, Path, Query, Request
from fastapi.responses import Response as _Response
from pydantic import BaseModel, Field

from tslib.database import jsonable
from tslib.errors import bad_request, not_found
from tslib.services import timesheets as timesheet_service

from ..dependencies import envelope, get_db, limiter, _logger
from ..types import HoursSummary, TimesheetList

router = APIRouter()

_EXPORT_COLUMNS = [
    ('timesheet_id', 'ID'),
    ('date', 'Date'),
    ('staff_name', 'Staff'),
    ('department_name', 'Department'),
    ('client_name', 'Client'),
    ('project_name', 'Project'),
    ('task_type', 'Task type'),
    ('task_station', 'Task station'),
    ('task_description', 'Task description'),
    ('check_in_time', 'Check-in'),
    ('check_out_time', 'Check-out'),
    ('hours_spent', 'Hours'),
]


class TimesheetCreate(BaseModel):
    staff_id: int = Field(..., gt=0)
    department_id: int = Field(..., gt=0)
    task_description: str = Field(..., min_length=5, max_length=2000)
    task_type: str
    task_station: str
    date: str
    check_in_time: str
    check_out_time: str
    client_id: Optional[int] = Field(None, gt=0)
    project_id: Optional[int] = Field(None, gt=0)


class TimesheetUpdate(BaseModel):
    staff_id: Optional[int] = Field(None, gt=0)
    department_id: Optional[int] = Field(None, gt=0)
    task_description: Optional[str] = Field(None, min_length=5, max_length=2000)
    task_type: Optional[str] = None
    task_station: Optional[str] = None
    date: Optional[str] = None
    check_in_time: Optional[str] = None
    check_out_time: Optional[str] = None
    client_id: Optional[int] = Field(None, gt=0)
    project_id: Optional[int] = Field(None, gt=0)


def _missing(timesheet_id: int):
    return not_found(f"Timesheet with ID {timesheet_id} not found")


def _xlsx_response(content: bytes, filename: str) -> _Response:
    return _Response(
        content=content,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ── Listing ──────────────────────────────────────────────────

@router.get(
    "/api/timesheets",
    tags=["Timesheets"],
    summary="List timesheet entries",
    description=(
        "Entries joined with staff, department, client and project names, newest first. "
        "Every filter is optional; `startDate`/`endDate` bound the entry date inclusively."
    ),
)
def list_timesheets(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    staff_id: Optional[int] = Query(None, alias="staffId", ge=1),
    department_id: Optional[int] = Query(None, alias="departmentId", ge=1),
    client_id: Optional[int] = Query(None, alias="clientId", ge=1),
    project_id: Optional[int] = Query(None, alias="projectId", ge=1),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
):
    rows: TimesheetList = timesheet_service.get_timesheets(
        get_db(),
        start_date=start_date, end_date=end_date,
        staff_id=staff_id, department_id=department_id,
        client_id=client_id, project_id=project_id,
        page=page, limit=limit,
    )
    return envelope(rows)


@router.get(
    "/api/timesheets/export",
    tags=["Timesheets"],
    summary="Export timesheet entries",
    description="The filtered listing as a CSV or XLSX download.",
)
@limiter.limit("10/minute")
def export_timesheets(
    request: Request,
    format: str = Query("csv", description="csv or xlsx"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    staff_id: Optional[int] = Query(None, alias="staffId", ge=1),
    department_id: Optional[int] = Query(None, alias="departmentId", ge=1),
    client_id: Optional[int] = Query(None, alias="clientId", ge=1),
    project_id: Optional[int] = Query(None, alias="projectId", ge=1),
):
    fmt = format.lower()
    if fmt not in ('csv', 'xlsx'):
        raise bad_request("Invalid format. Must be one of: csv, xlsx")
    rows = timesheet_service.get_timesheets(
        get_db(),
        start_date=start_date, end_date=end_date,
        staff_id=staff_id, department_id=department_id,
        client_id=client_id, project_id=project_id,
    )
    filename = f"timesheets_{date.today().isoformat()}.{fmt}"
    _logger.info("Timesheet export: format=%s rows=%d", fmt, len(rows))

    if fmt == 'csv':
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator='\r\n')
        writer.writerow([label for _, label in _EXPORT_COLUMNS])
        for row in rows:
            writer.writerow([jsonable(row.get(key)) for key, _ in _EXPORT_COLUMNS])
        # BOM so spreadsheet apps pick UTF-8
        content = '\ufeff' + buf.getvalue()
        return _Response(
            content=content.encode('utf-8'),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    import openpyxl
    from openpyxl.styles import Font, PatternFill, Alignment
    from openpyxl.utils import get_column_letter

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Timesheets"
    for c, (_, label) in enumerate(_EXPORT_COLUMNS, start=1):
        cell = ws.cell(1, c, label)
        cell.font = Font(bold=True, color="FFFFFF", size=9)
        cell.fill = PatternFill(fill_type="solid", fgColor="1E293B")
        cell.alignment = Alignment(horizontal="left")
        ws.column_dimensions[get_column_letter(c)].width = 40 if label == 'Task description' else 16
    for r, row in enumerate(rows, start=2):
        for c, (key, _) in enumerate(_EXPORT_COLUMNS, start=1):
            ws.cell(r, c, jsonable(row.get(key)))
    ws.freeze_panes = "A2"
    buf = io.BytesIO()
    wb.save(buf)
    return _xlsx_response(buf.getvalue(), filename)


# ── Hours summaries ──────────────────────────────────────────

@router.get("/api/timesheets/staff/{staff_id}/hours", tags=["Timesheets"], summary="Hours logged by a staff member")
def staff_hours(
    staff_id: int = Path(..., ge=1),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
):
    summary: Optional[HoursSummary] = timesheet_service.get_staff_hours_summary(
        get_db(), staff_id, start_date, end_date
    )
    if summary is None:
        raise not_found(f"Staff member with ID {staff_id} not found")
    return envelope(summary)


@router.get("/api/timesheets/departments/{department_id}/hours", tags=["Timesheets"], summary="Hours logged in a department")
def department_hours(
    department_id: int = Path(..., ge=1),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
):
    summary = timesheet_service.get_department_hours_summary(get_db(), department_id, start_date, end_date)
    if summary is None:
        raise not_found(f"Department with ID {department_id} not found")
    return envelope(summary)


@router.get("/api/timesheets/projects/{project_id}/hours", tags=["Timesheets"], summary="Hours logged on a project")
def project_hours(
    project_id: int = Path(..., ge=1),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
):
    summary = timesheet_service.get_project_hours_summary(get_db(), project_id, start_date, end_date)
    if summary is None:
        raise not_found(f"Project with ID {project_id} not found")
    return envelope(summary)


@router.get("/api/timesheets/clients/{client_id}/hours", tags=["Timesheets"], summary="Hours logged for a client")
def client_hours(
    client_id: int = Path(..., ge=1),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
):
    summary = timesheet_service.get_client_hours_summary(get_db(), client_id, start_date, end_date)
    if summary is None:
        raise not_found(f"Client with ID {client_id} not found")
    return envelope(summary)


# ── Single entries ───────────────────────────────────────────

@router.get("/api/timesheets/{timesheet_id}", tags=["Timesheets"], summary="Get timesheet entry by ID")
def get_timesheet(timesheet_id: int = Path(..., ge=1)):
    entry = timesheet_service.get_timesheet_by_id(get_db(), timesheet_id)
    if entry is None:
        raise _missing(timesheet_id)
    return envelope(entry)


@router.post(
    "/api/timesheets",
    tags=["Timesheets"],
    summary="Create timesheet entry",
    description="`hours_spent` is derived from the check-in and check-out times.",
    status_code=201,
)
def create_timesheet(body: TimesheetCreate):
    entry = timesheet_service.create_timesheet(get_db(), body.model_dump())
    return envelope(entry, message="Timesheet created successfully")


@router.put("/api/timesheets/{timesheet_id}", tags=["Timesheets"], summary="Update timesheet entry")
@router.patch("/api/timesheets/{timesheet_id}", tags=["Timesheets"], summary="Partially update timesheet entry")
def update_timesheet(body: TimesheetUpdate, timesheet_id: int = Path(..., ge=1)):
    entry = timesheet_service.update_timesheet(get_db(), timesheet_id, body.model_dump(exclude_unset=True))
    if entry is None:
        raise _missing(timesheet_id)
    return envelope(entry, message="Timesheet updated successfully")


@router.delete("/api/timesheets/{timesheet_id}", tags=["Timesheets"], summary="Delete timesheet entry")
def delete_timesheet(timesheet_id: int = Path(..., ge=1)):
    if not timesheet_service.delete_timesheet(get_db(), timesheet_id):
        raise _missing(timesheet_id)
    return envelope(message="Timesheet deleted successfully")
