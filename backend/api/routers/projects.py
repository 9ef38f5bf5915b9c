"""Projects router."""
from typing import Optional

from fastapi import APIRouter, Path, Query
from pydantic import BaseModel, Field

from tslib.errors import not_found
from tslib.services import projects as project_service

from ..dependencies import envelope, get_db
from ..types import ProjectRecord

router = APIRouter()


class ProjectCreate(BaseModel):
    project_name: str = Field(..., min_length=2, max_length=150)
    client_id: int = Field(..., gt=0)
    start_date: str
    end_date: Optional[str] = None
    cluster: str
    account_manager: Optional[int] = Field(None, gt=0)


class ProjectUpdate(BaseModel):
    project_name: Optional[str] = Field(None, min_length=2, max_length=150)
    client_id: Optional[int] = Field(None, gt=0)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    cluster: Optional[str] = None
    account_manager: Optional[int] = Field(None, gt=0)


def _missing(project_id: int):
    return not_found(f"Project with ID {project_id} not found")


@router.get(
    "/api/projects",
    tags=["Projects"],
    summary="List projects",
    description=(
        "Projects with client, account manager, total hours, staff count and an "
        "`is_active` flag (no end date, or end date not yet passed)."
    ),
)
def list_projects(
    cluster: Optional[str] = Query(None),
    account_manager: Optional[int] = Query(None, alias="accountManager", ge=1),
    active: bool = Query(False, description="Only projects that are still active"),
):
    rows = project_service.get_all_projects(
        get_db(), cluster=cluster, account_manager=account_manager, active_only=active,
    )
    return envelope(rows)


@router.get("/api/projects/active", tags=["Projects"], summary="List active projects")
def list_active_projects():
    return envelope(project_service.get_active_projects(get_db()))


@router.get("/api/projects/cluster/{cluster}", tags=["Projects"], summary="List projects by cluster")
def list_projects_by_cluster(cluster: str):
    return envelope(project_service.get_projects_by_cluster(get_db(), cluster))


@router.get(
    "/api/projects/account-manager/{manager_id}",
    tags=["Projects"],
    summary="List projects by account manager",
)
def list_projects_by_account_manager(manager_id: int = Path(..., ge=1)):
    return envelope(project_service.get_projects_by_account_manager(get_db(), manager_id))


@router.get("/api/projects/{project_id}", tags=["Projects"], summary="Get project by ID")
def get_project(project_id: int = Path(..., ge=1)):
    project: Optional[ProjectRecord] = project_service.get_project_by_id(get_db(), project_id)
    if project is None:
        raise _missing(project_id)
    return envelope(project)


@router.get("/api/projects/{project_id}/timesheets", tags=["Projects"], summary="List a project's timesheet entries")
def get_project_timesheets(project_id: int = Path(..., ge=1)):
    db = get_db()
    if project_service.get_project_by_id(db, project_id) is None:
        raise _missing(project_id)
    return envelope(project_service.get_project_timesheets(db, project_id))


@router.get(
    "/api/projects/{project_id}/staff",
    tags=["Projects"],
    summary="Hours per staff member",
    description="Per-staff hours breakdown for a project, largest contributor first.",
)
def get_project_staff(project_id: int = Path(..., ge=1)):
    db = get_db()
    if project_service.get_project_by_id(db, project_id) is None:
        raise _missing(project_id)
    return envelope(project_service.get_project_staff_breakdown(db, project_id))


@router.post("/api/projects", tags=["Projects"], summary="Create project", status_code=201)
def create_project(body: ProjectCreate):
    project = project_service.create_project(get_db(), body.model_dump())
    return envelope(project, message="Project created successfully")


@router.put("/api/projects/{project_id}", tags=["Projects"], summary="Update project")
@router.patch("/api/projects/{project_id}", tags=["Projects"], summary="Partially update project")
def update_project(body: ProjectUpdate, project_id: int = Path(..., ge=1)):
    project = project_service.update_project(get_db(), project_id, body.model_dump(exclude_unset=True))
    if project is None:
        raise _missing(project_id)
    return envelope(project, message="Project updated successfully")


@router.delete("/api/projects/{project_id}", tags=["Projects"], summary="Delete project")
def delete_project(project_id: int = Path(..., ge=1)):
    if not project_service.delete_project(get_db(), project_id):
        raise _missing(project_id)
    return envelope(message="Project deleted successfully")
