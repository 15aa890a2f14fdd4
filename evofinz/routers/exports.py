from __future__ import annotations

from datetime import date
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from evofinz.core.config import Settings, get_settings
from evofinz.db.dal import Database
from evofinz.routers.expenses import load_expenses
from evofinz.services.exports import (
    ExportArtifact,
    ExportOptions,
    export_expenses,
    export_reimbursements,
    export_t2125,
)

router = APIRouter(prefix="/exports", tags=["exports"])
logger = logging.getLogger("evofinz.exports")

_LANGUAGE_PATTERN = "^(es|en)$"


def get_db(settings: Settings = Depends(get_settings)) -> Database:
    return Database(settings.db_path)


def _options(settings: Settings, **overrides) -> ExportOptions:
    language = overrides.pop("language", None) or settings.default_language
    draft = overrides.pop("is_draft", None)
    return ExportOptions(
        language=language,
        is_draft=settings.export_draft if draft is None else draft,
        user_name=settings.user_name,
        business_name=settings.business_name,
        country=settings.country,
        hst_rate=settings.hst_rate,
        **overrides,
    )


def _attachment(artifact: ExportArtifact) -> Response:
    logger.info(
        "export served",
        extra={"export_file": artifact.filename, "bytes": len(artifact.content)},
    )
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@router.get("/years", summary="Years that have at least one expense")
async def export_years(db: Database = Depends(get_db)):
    return {"years": db.expense_years()}


@router.get("/expenses", summary="Download expenses as CSV, JSON, XLSX or PDF")
async def download_expenses(
    fmt: str = Query("xlsx", alias="format", description="csv | json | xlsx | pdf"),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    language: Optional[str] = Query(None, pattern=_LANGUAGE_PATTERN),
    draft: Optional[bool] = Query(None, description="Watermark PDF pages as draft"),
    group_by: str = Query(
        "none",
        pattern="^(none|month)$",
        description="PDF only: month forces the monthly table even for a single month",
    ),
    title: Optional[str] = Query(None, max_length=80),
    subtitle: Optional[str] = Query(None, max_length=120),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    options = _options(
        settings,
        format=fmt.lower(),
        year=year,
        language=language,
        is_draft=draft,
        group_by=group_by,
        title=title,
        subtitle=subtitle,
    )
    # Year filtering happens inside the dispatcher so the empty check sees it
    return _attachment(export_expenses(load_expenses(db), options))


@router.get("/t2125", summary="Download the T2125 business expense report")
async def download_t2125(
    fmt: str = Query("xlsx", alias="format", description="xlsx | pdf"),
    year: Optional[int] = Query(None, ge=1900, le=9999),
    language: Optional[str] = Query(None, pattern=_LANGUAGE_PATTERN),
    draft: Optional[bool] = Query(None),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    options = _options(
        settings, format=fmt.lower(), year=year, language=language, is_draft=draft
    )
    return _attachment(export_t2125(load_expenses(db), options))


@router.get("/reimbursements", summary="Download the client reimbursement report")
async def download_reimbursements(
    fmt: str = Query("pdf", alias="format", description="xlsx | pdf"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    language: Optional[str] = Query(None, pattern=_LANGUAGE_PATTERN),
    draft: Optional[bool] = Query(None),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=400, detail="start_date cannot be after end_date"
        )
    options = _options(
        settings,
        format=fmt.lower(),
        language=language,
        is_draft=draft,
        start_date=start_date,
        end_date=end_date,
    )
    expenses = load_expenses(db, status="reimbursable")
    return _attachment(export_reimbursements(expenses, options))
