from __future__ import annotations

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status

from evofinz.core.config import Settings, get_settings
from evofinz.db.dal import Database
from evofinz.models.client import ClientCreate, ClientOut, ClientUpdate

router = APIRouter(prefix="/clients", tags=["clients"])


def get_db(settings: Settings = Depends(get_settings)) -> Database:
    return Database(settings.db_path)


def _row_to_client(row: dict) -> ClientOut:
    return ClientOut(
        id=int(row["id"]),
        name=row["name"],
        email=row.get("email"),
        country=row.get("country"),
        notes=row.get("notes"),
        created_at=datetime.fromisoformat(row["created_at"].replace("Z", "")),
        updated_at=datetime.fromisoformat(row["updated_at"].replace("Z", "")),
    )


@router.get("/", response_model=List[ClientOut], summary="List clients")
async def list_clients(db: Database = Depends(get_db)):
    return [_row_to_client(r) for r in db.list_clients()]


@router.post(
    "/",
    response_model=ClientOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a client",
)
async def create_client(payload: ClientCreate, db: Database = Depends(get_db)):
    client_id = db.create_client(payload)
    row = db.get_client(client_id)
    if not row:
        raise HTTPException(status_code=500, detail="client not found after insert")
    return _row_to_client(row)


@router.get("/{client_id}", response_model=ClientOut, summary="Get a client")
async def get_client(client_id: int, db: Database = Depends(get_db)):
    row = db.get_client(client_id)
    if not row:
        raise HTTPException(status_code=404, detail="client not found")
    return _row_to_client(row)


@router.patch("/{client_id}", response_model=ClientOut, summary="Edit a client")
async def patch_client(
    client_id: int, payload: ClientUpdate, db: Database = Depends(get_db)
):
    try:
        db.update_client(client_id, payload.model_dump(exclude_unset=True))
    except ValueError:
        raise HTTPException(status_code=404, detail="client not found")
    row = db.get_client(client_id)
    if not row:
        raise HTTPException(status_code=404, detail="client not found")
    return _row_to_client(row)


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a client (its expenses are kept without a client)",
)
async def delete_client(client_id: int, db: Database = Depends(get_db)):
    try:
        db.delete_client(client_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="client not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
