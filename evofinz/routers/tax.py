from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from evofinz.core.config import Settings, get_settings
from evofinz.db.dal import Database
from evofinz.models.constants import STATUSES
from evofinz.routers.expenses import load_expenses
from evofinz.services.deductions import calculate_deduction
from evofinz.services.money import round2
from evofinz.services.reimbursements import group_reimbursements
from evofinz.services.tax_rules import (
    T2125_LINES,
    TAX_DEDUCTION_RULES,
    category_label,
)
from evofinz.services.tax_summary import (
    available_years,
    build_t2125_report,
    calculate_summary,
)

router = APIRouter(prefix="/tax", tags=["tax"])


def get_db(settings: Settings = Depends(get_settings)) -> Database:
    return Database(settings.db_path)


class TaxRuleOut(BaseModel):
    category: str
    deduction_rate: float
    description: str
    source: str
    source_url: str


class T2125LineOut(BaseModel):
    line: str
    name: str
    name_es: str
    categories: List[str]
    deduction_rate: float
    note: Optional[str] = None
    note_es: Optional[str] = None


class DeductionRequest(BaseModel):
    amount: float = Field(..., ge=0)
    category: str = "other"
    status: str = "deductible"


class DeductionOut(BaseModel):
    deductible: float
    non_deductible: float
    rate: float


class CategoryBreakdownItem(BaseModel):
    category: str
    label: str
    total: float
    deductible: float
    count: int


class TaxSummaryOut(BaseModel):
    year: Optional[int]
    total_expenses: float
    total_deductible: float
    total_reimbursable: float
    total_non_deductible: float
    record_count: int
    by_category: List[CategoryBreakdownItem]
    available_years: List[int]


class T2125LineTotalOut(BaseModel):
    line: str
    name: str
    name_es: str
    deduction_rate: float
    gross_amount: float
    net_deductible: float
    expense_count: int
    note: Optional[str] = None


class T2125ReportOut(BaseModel):
    year: Optional[int]
    lines: List[T2125LineTotalOut]
    total_gross: float
    total_deductible: float
    deductible_count: int
    hst_rate: float
    hst_gst_paid: float
    itc_claimable: float


class ClientReimbursementOut(BaseModel):
    client_id: Optional[int]
    client_name: str
    count: int
    total: float


class ReimbursementsOut(BaseModel):
    start_date: Optional[date]
    end_date: Optional[date]
    total_reimbursable: float
    expense_count: int
    average_per_expense: float
    clients: List[ClientReimbursementOut]
    category_totals: dict


@router.get("/rules", response_model=List[TaxRuleOut], summary="CRA deduction rules")
async def list_rules():
    return [TaxRuleOut(**vars(rule)) for rule in TAX_DEDUCTION_RULES]


@router.get(
    "/t2125-lines", response_model=List[T2125LineOut], summary="T2125 Part 5 lines"
)
async def list_t2125_lines():
    return [
        T2125LineOut(
            line=ln.line,
            name=ln.name,
            name_es=ln.name_es,
            categories=list(ln.categories),
            deduction_rate=ln.deduction_rate,
            note=ln.note,
            note_es=ln.note_es,
        )
        for ln in sorted(T2125_LINES.values(), key=lambda ln: int(ln.line))
    ]


@router.post(
    "/deduction",
    response_model=DeductionOut,
    summary="Preview the deductible / non-deductible split of an amount",
)
async def preview_deduction(payload: DeductionRequest):
    status = payload.status.strip().lower()
    if status not in STATUSES:
        raise HTTPException(status_code=400, detail="unsupported status")
    split = calculate_deduction(
        payload.amount, payload.category.strip().lower() or "other", status
    )
    return DeductionOut(
        deductible=round2(split.deductible),
        non_deductible=round2(split.non_deductible),
        rate=split.rate,
    )


@router.get(
    "/summary", response_model=TaxSummaryOut, summary="Tax totals for a year (or all)"
)
async def tax_summary(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    language: Optional[str] = Query(None, pattern="^(es|en)$"),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    expenses = load_expenses(db)
    summary = calculate_summary(expenses, year=year)
    lang = language or settings.default_language
    return TaxSummaryOut(
        year=year,
        total_expenses=round2(summary.total_expenses),
        total_deductible=round2(summary.total_deductible),
        total_reimbursable=round2(summary.total_reimbursable),
        total_non_deductible=round2(summary.total_non_deductible),
        record_count=summary.record_count,
        by_category=[
            CategoryBreakdownItem(
                category=category,
                label=category_label(category, lang),
                total=round2(data.total),
                deductible=round2(data.deductible),
                count=data.count,
            )
            for category, data in summary.by_category.items()
        ],
        available_years=available_years(expenses),
    )


@router.get("/t2125", response_model=T2125ReportOut, summary="T2125 line totals")
async def t2125_report(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    report = build_t2125_report(load_expenses(db), year=year, hst_rate=settings.hst_rate)
    return T2125ReportOut(
        year=year,
        lines=[
            T2125LineTotalOut(
                line=ln.line,
                name=ln.name,
                name_es=ln.name_es,
                deduction_rate=ln.deduction_rate,
                gross_amount=round2(ln.gross_amount),
                net_deductible=round2(ln.net_deductible),
                expense_count=ln.expense_count,
                note=ln.note,
            )
            for ln in report.lines
        ],
        total_gross=round2(report.total_gross),
        total_deductible=round2(report.total_deductible),
        deductible_count=report.deductible_count,
        hst_rate=settings.hst_rate,
        hst_gst_paid=round2(report.hst_gst_paid),
        itc_claimable=round2(report.itc_claimable),
    )


@router.get(
    "/reimbursements",
    response_model=ReimbursementsOut,
    summary="Reimbursable expenses grouped by client",
)
async def reimbursements(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    language: Optional[str] = Query(None, pattern="^(es|en)$"),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=400, detail="start_date cannot be after end_date"
        )
    report = group_reimbursements(
        load_expenses(db, status="reimbursable"),
        start_date,
        end_date,
        language or settings.default_language,
    )
    return ReimbursementsOut(
        start_date=start_date,
        end_date=end_date,
        total_reimbursable=round2(report.total_reimbursable),
        expense_count=report.expense_count,
        average_per_expense=round2(report.average_per_expense),
        clients=[
            ClientReimbursementOut(
                client_id=group.client_id,
                client_name=group.client_name,
                count=group.count,
                total=round2(group.total),
            )
            for group in report.groups
        ],
        category_totals={k: round2(v) for k, v in report.category_totals.items()},
    )
