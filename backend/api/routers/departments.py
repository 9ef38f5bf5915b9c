"""Departments router."""
from typing import Optional

from fastapi import APIRouter, Path
from pydantic import BaseModel, Field

from tslib.errors import not_found
from tslib.services import departments as department_service

from ..dependencies import envelope, get_db
from ..types import DepartmentRecord

router = APIRouter()


class DepartmentCreate(BaseModel):
    department_name: str = Field(..., min_length=2, max_length=100)
    department_head_id: int = Field(..., gt=0)


class DepartmentUpdate(BaseModel):
    department_name: Optional[str] = Field(None, min_length=2, max_length=100)
    department_head_id: Optional[int] = Field(None, gt=0)


def _missing(department_id: int):
    return not_found(f"Department with ID {department_id} not found")


@router.get("/api/departments", tags=["Departments"], summary="List departments", description="Departments with head name/email and staff count.")
def list_departments():
    return envelope(department_service.get_all_departments(get_db()))


@router.get("/api/departments/{department_id}", tags=["Departments"], summary="Get department by ID")
def get_department(department_id: int = Path(..., ge=1)):
    department: Optional[DepartmentRecord] = department_service.get_department_by_id(get_db(), department_id)
    if department is None:
        raise _missing(department_id)
    return envelope(department)


@router.get("/api/departments/{department_id}/staff", tags=["Departments"], summary="List department members")
def get_department_staff(department_id: int = Path(..., ge=1)):
    db = get_db()
    if department_service.get_department_by_id(db, department_id) is None:
        raise _missing(department_id)
    return envelope(department_service.get_department_staff(db, department_id))


@router.post("/api/departments", tags=["Departments"], summary="Create department", status_code=201)
def create_department(body: DepartmentCreate):
    department = department_service.create_department(get_db(), body.model_dump())
    return envelope(department, message="Department created successfully")


@router.put("/api/departments/{department_id}", tags=["Departments"], summary="Update department")
@router.patch("/api/departments/{department_id}", tags=["Departments"], summary="Partially update department")
def update_department(body: DepartmentUpdate, department_id: int = Path(..., ge=1)):
    department = department_service.update_department(
        get_db(), department_id, body.model_dump(exclude_unset=True)
    )
    if department is None:
        raise _missing(department_id)
    return envelope(department, message="Department updated successfully")


@router.delete("/api/departments/{department_id}", tags=["Departments"], summary="Delete department")
def delete_department(department_id: int = Path(..., ge=1)):
    if not department_service.delete_department(get_db(), department_id):
        raise _missing(department_id)
    return envelope(message="Department deleted successfully")
