from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from starlette import status
import logging

logger = logging.getLogger("evofinz.errors")

NO_EXPENSES_MESSAGES = {
    "es": "No hay gastos para exportar",
    "en": "No expenses to export",
}


class ExportError(Exception):
    """Base class for user-facing export failures."""

    error_code = "export_error"


class NoExpensesError(ExportError):
    """Raised by every exporter when there is nothing to write."""

    error_code = "no_expenses"

    def __init__(self, language: str = "en"):
        self.language = language
        super().__init__(NO_EXPENSES_MESSAGES.get(language, NO_EXPENSES_MESSAGES["en"]))


class UnsupportedExportFormat(ExportError):
    error_code = "unsupported_format"

    def __init__(self, fmt: str, allowed: tuple[str, ...]):
        self.format = fmt
        self.allowed = allowed
        super().__init__(
            f"Unsupported export format '{fmt}'. Allowed: {', '.join(allowed)}"
        )


def not_found_handler(request: Request, exc):  # type: ignore
    # Starlette routes raise HTTPException for both unknown paths and
    # explicit 404/400s from handlers; keep explicit details intact.
    status_code = getattr(exc, "status_code", status.HTTP_404_NOT_FOUND)
    if status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return JSONResponse(
            status_code=status_code,
            content={
                "error": "not_found",
                "detail": f"No route for {request.method} {request.url.path}",
            },
        )
    return JSONResponse(
        status_code=status_code,
        content={"error": "http_error", "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def validation_error_handler(request: Request, exc: RequestValidationError):  # type: ignore
    return JSONResponse(
        status_code=422,
        content={
            "error": "validation_error",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


def export_error_handler(request: Request, exc: ExportError):  # type: ignore
    logger.info("export rejected", extra={"reason": exc.error_code})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": exc.error_code,
            "detail": str(exc),
        },
    )


def server_error_handler(request: Request, exc: Exception):  # type: ignore
    logger.error("unhandled exception", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": "internal_error",
            "detail": "An unexpected error occurred.",
        },
    )
