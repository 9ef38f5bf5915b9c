"""Clients router."""
from typing import Optional

from fastapi import APIRouter, Path, Query
from pydantic import BaseModel, Field

from tslib.errors import not_found
from tslib.services import clients as client_service

from ..dependencies import envelope, get_db
from ..types import ClientRecord

router = APIRouter()


class ClientCreate(BaseModel):
    client_name: str = Field(..., min_length=2, max_length=150)
    sector: str
    category: str
    account_manager_id: int = Field(..., gt=0)
    entry_date: Optional[str] = None


class ClientUpdate(BaseModel):
    client_name: Optional[str] = Field(None, min_length=2, max_length=150)
    sector: Optional[str] = None
    category: Optional[str] = None
    account_manager_id: Optional[int] = Field(None, gt=0)
    entry_date: Optional[str] = None


def _missing(client_id: int):
    return not_found(f"Client with ID {client_id} not found")


@router.get(
    "/api/clients",
    tags=["Clients"],
    summary="List clients",
    description="Clients with account manager, project count and total logged hours.",
)
def list_clients(
    sector: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
):
    return envelope(client_service.get_all_clients(get_db(), sector=sector, category=category))


@router.get("/api/clients/sector/{sector}", tags=["Clients"], summary="List clients by sector")
def list_clients_by_sector(sector: str):
    return envelope(client_service.get_clients_by_sector(get_db(), sector))


@router.get("/api/clients/category/{category}", tags=["Clients"], summary="List clients by category")
def list_clients_by_category(category: str):
    return envelope(client_service.get_clients_by_category(get_db(), category))


@router.get("/api/clients/{client_id}", tags=["Clients"], summary="Get client by ID")
def get_client(client_id: int = Path(..., ge=1)):
    client: Optional[ClientRecord] = client_service.get_client_by_id(get_db(), client_id)
    if client is None:
        raise _missing(client_id)
    return envelope(client)


@router.get("/api/clients/{client_id}/projects", tags=["Clients"], summary="List a client's projects")
def get_client_projects(client_id: int = Path(..., ge=1)):
    db = get_db()
    if client_service.get_client_by_id(db, client_id) is None:
        raise _missing(client_id)
    return envelope(client_service.get_client_projects(db, client_id))


@router.post("/api/clients", tags=["Clients"], summary="Create client", status_code=201)
def create_client(body: ClientCreate):
    client = client_service.create_client(get_db(), body.model_dump())
    return envelope(client, message="Client created successfully")


@router.put("/api/clients/{client_id}", tags=["Clients"], summary="Update client")
@router.patch("/api/clients/{client_id}", tags=["Clients"], summary="Partially update client")
def update_client(body: ClientUpdate, client_id: int = Path(..., ge=1)):
    client = client_service.update_client(get_db(), client_id, body.model_dump(exclude_unset=True))
    if client is None:
        raise _missing(client_id)
    return envelope(client, message="Client updated successfully")


@router.delete("/api/clients/{client_id}", tags=["Clients"], summary="Delete client")
def delete_client(client_id: int = Path(..., ge=1)):
    if not client_service.delete_client(get_db(), client_id):
        raise _missing(client_id)
    return envelope(message="Client deleted successfully")
