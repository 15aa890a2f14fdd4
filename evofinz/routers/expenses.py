from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from datetime import datetime, date
from typing import List, Optional

from evofinz.core.config import Settings, get_settings
from evofinz.db.dal import Database
from evofinz.models.constants import STATUSES
from evofinz.models.expense import ExpenseIn, ExpenseOut, ExpenseUpdateIn
from evofinz.services.expense_validation import (
    ExpenseValidationError,
    validate_expense_domain,
)

router = APIRouter(prefix="/expenses", tags=["expenses"])

# Columns that cannot be cleared by an explicit null in a PATCH body
_NON_NULLABLE = {"date", "amount", "currency", "category", "status", "tags"}

# Dependencies -----------------------------------------------------


def get_db(settings: Settings = Depends(get_settings)) -> Database:
    return Database(settings.db_path)


# Helpers ----------------------------------------------------------


def row_to_expense_out(row: dict) -> ExpenseOut:
    return ExpenseOut(
        id=row["id"],
        date=date.fromisoformat(row["date"]),
        amount=float(row["amount"]),
        vendor=row.get("vendor"),
        description=row.get("description"),
        category=row.get("category") or "other",
        currency=row["currency"],
        status=row["status"],
        client_id=row.get("client_id"),
        client_name=row.get("client_name"),
        tags=row.get("tags") or [],
        notes=row.get("notes"),
        reimbursement_type=row.get("reimbursement_type"),
        created_at=datetime.fromisoformat(row["created_at"].replace("Z", "")),
        updated_at=datetime.fromisoformat(row["updated_at"].replace("Z", "")),
    )


def load_expenses(db: Database, **filters) -> List[ExpenseOut]:
    """Fetch a snapshot of expense rows as models (newest first)."""
    return [row_to_expense_out(r) for r in db.list_expenses(**filters)]


# Routes -----------------------------------------------------------
@router.post(
    "/", response_model=ExpenseOut, status_code=201, summary="Create an expense"
)
async def create_expense(
    payload: ExpenseIn,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if "currency" not in payload.model_fields_set:
        payload = payload.model_copy(update={"currency": settings.default_currency})

    # 1. Domain validation hook (client must exist)
    try:
        validate_expense_domain(payload, db)
    except ExpenseValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # 2. Persist
    expense_id = db.insert_expense(payload)

    # 3. Fetch row to build response (joined client name, tags)
    row = db.get_expense(expense_id)
    if not row:
        raise HTTPException(status_code=500, detail="expense not found after insert")
    return row_to_expense_out(row)


@router.get(
    "/", response_model=List[ExpenseOut], summary="List expenses with optional filters"
)
async def list_expenses_endpoint(
    start_date: Optional[date] = Query(
        None, description="Filter: start date inclusive"
    ),
    end_date: Optional[date] = Query(None, description="Filter: end date inclusive"),
    year: Optional[int] = Query(None, ge=1900, le=9999, description="Filter by year"),
    status_filter: Optional[str] = Query(
        None, alias="status", description="Filter by tax status"
    ),
    category: Optional[str] = Query(None, description="Filter by category"),
    client_id: Optional[int] = Query(None, description="Filter by client"),
    db: Database = Depends(get_db),
):
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=400, detail="start_date cannot be after end_date"
        )
    if status_filter:
        status_filter = status_filter.lower()
        if status_filter not in STATUSES:
            raise HTTPException(status_code=400, detail="unsupported status")
    return load_expenses(
        db,
        start_date=start_date,
        end_date=end_date,
        year=year,
        status=status_filter,
        category=category.strip().lower() if category else None,
        client_id=client_id,
    )


@router.get("/{expense_id}", response_model=ExpenseOut, summary="Get an expense")
async def get_expense(expense_id: int, db: Database = Depends(get_db)):
    row = db.get_expense(expense_id)
    if not row:
        raise HTTPException(status_code=404, detail="expense not found")
    return row_to_expense_out(row)


@router.patch(
    "/{expense_id}", response_model=ExpenseOut, summary="Edit an expense (partial)"
)
async def patch_expense(
    expense_id: int,
    payload: ExpenseUpdateIn,
    db: Database = Depends(get_db),
):
    # 1. Fetch existing expense
    row = db.get_expense(expense_id)
    if not row:
        raise HTTPException(status_code=404, detail="expense not found")

    # 2. Build merged object for validation using ExpenseIn semantics
    changes = payload.model_dump(exclude_unset=True)
    merged_data = row_to_expense_out(row).model_dump(include=set(ExpenseIn.model_fields))
    for key, value in changes.items():
        if value is None and key in _NON_NULLABLE:
            continue
        merged_data[key] = value
    merged = ExpenseIn(**merged_data)
    try:
        validate_expense_domain(merged, db)
    except ExpenseValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # 3. Persist only the fields the caller sent
    try:
        db.update_expense(expense_id, {key: getattr(merged, key) for key in changes})
    except ValueError:
        raise HTTPException(status_code=404, detail="expense not found")

    # 4. Return updated record
    updated = db.get_expense(expense_id)
    if not updated:
        raise HTTPException(status_code=500, detail="expense disappeared after update")
    return row_to_expense_out(updated)


@router.delete("/{expense_id}", status_code=204, summary="Delete an expense")
async def delete_expense(expense_id: int, db: Database = Depends(get_db)):
    try:
        db.delete_expense(expense_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="expense not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
