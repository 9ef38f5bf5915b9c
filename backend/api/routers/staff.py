"""Staff router."""
from typing import Optional

from fastapi import APIRouter, Path, Query
from pydantic import BaseModel, Field

from tslib.errors import not_found
from tslib.services import staff as staff_service

from ..dependencies import envelope, get_db
from ..types import StaffList, StaffRecord

router = APIRouter()


class StaffCreate(BaseModel):
    staff_name: str = Field(..., min_length=2, max_length=100)
    work_type: str
    staff_role: str = Field(..., min_length=1, max_length=100)
    gender: Optional[str] = None
    personal_email: str = Field(..., max_length=255)
    phone_number: Optional[str] = Field(None, max_length=20)
    date_joined: str
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    work_email: Optional[str] = Field(None, max_length=255)
    status: Optional[str] = None
    department_id: Optional[int] = Field(None, gt=0)


class StaffUpdate(BaseModel):
    staff_name: Optional[str] = Field(None, min_length=2, max_length=100)
    work_type: Optional[str] = None
    staff_role: Optional[str] = Field(None, min_length=1, max_length=100)
    gender: Optional[str] = None
    personal_email: Optional[str] = Field(None, max_length=255)
    phone_number: Optional[str] = Field(None, max_length=20)
    date_joined: Optional[str] = None
    username: Optional[str] = Field(None, min_length=3, max_length=100)
    work_email: Optional[str] = Field(None, max_length=255)
    status: Optional[str] = None
    department_id: Optional[int] = Field(None, gt=0)


@router.get(
    "/api/staff",
    tags=["Staff"],
    summary="List staff",
    description="Staff members joined with their department name, newest first. Optional filters and pagination.",
)
def list_staff(
    work_type: Optional[str] = Query(None, alias="workType"),
    department_id: Optional[int] = Query(None, alias="departmentId", ge=1),
    status: Optional[str] = Query(None),
    page: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
):
    rows: StaffList = staff_service.get_all_staff(
        get_db(), work_type=work_type, department_id=department_id,
        status=status, page=page, limit=limit,
    )
    return envelope(rows)


@router.get("/api/staff/work-type/{work_type}", tags=["Staff"], summary="List staff by work type")
def list_staff_by_work_type(work_type: str):
    return envelope(staff_service.get_staff_by_work_type(get_db(), work_type))


@router.get("/api/staff/{staff_id}", tags=["Staff"], summary="Get staff member by ID")
def get_staff(staff_id: int = Path(..., ge=1)):
    member: Optional[StaffRecord] = staff_service.get_staff_by_id(get_db(), staff_id)
    if member is None:
        raise not_found(f"Staff member with ID {staff_id} not found")
    return envelope(member)


@router.post("/api/staff", tags=["Staff"], summary="Create staff member", status_code=201)
def create_staff(body: StaffCreate):
    member = staff_service.create_staff(get_db(), body.model_dump())
    return envelope(member, message="Staff member created successfully")


@router.put("/api/staff/{staff_id}", tags=["Staff"], summary="Update staff member")
@router.patch("/api/staff/{staff_id}", tags=["Staff"], summary="Partially update staff member")
def update_staff(body: StaffUpdate, staff_id: int = Path(..., ge=1)):
    member = staff_service.update_staff(get_db(), staff_id, body.model_dump(exclude_unset=True))
    if member is None:
        raise not_found(f"Staff member with ID {staff_id} not found")
    return envelope(member, message="Staff member updated successfully")


@router.delete("/api/staff/{staff_id}", tags=["Staff"], summary="Delete staff member")
def delete_staff(staff_id: int = Path(..., ge=1)):
    if not staff_service.delete_staff(get_db(), staff_id):
        raise not_found(f"Staff member with ID {staff_id} not found")
    return envelope(message="Staff member deleted successfully")
