# Last reviewed: 2026-10-18 09:31:52 UTC (User: Teeksss)
from typing import Any, Dict, Optional
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError, IntegrityError, OperationalError
import logging
import traceback
from datetime import datetime, timezone
import uuid

from .exceptions import (
    BaseAppException,
    DuplicateVersionError,
    ErrorCode,
    ErrorType,
    VersionAddRetryExhaustedError,
)
from ..models.page_version import PageFieldVersion, PageVersion

logger = logging.getLogger(__name__)

# Numara ayırma yarışında kaybeden istemci aynı isteği tekrar deneyebilir
RETRY_AFTER_SECONDS = "1"

def _error_response(
    request: Request,
    status_code: int,
    message: str,
    error_code: str,
    error_type: str,
    detail: Any = None,
    trace_id: Optional[str] = None,
    timestamp: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "status_code": status_code,
            "message": message,
            "error_code": error_code,
            "error_type": error_type,
            "detail": detail,
            "timestamp": timestamp or datetime.now(timezone.utc).isoformat(),
            "path": request.url.path,
            "trace_id": trace_id or str(uuid.uuid4())
        },
        headers=headers or {}
    )

def _version_table(exc: IntegrityError) -> Optional[str]:
    """Kısıt ihlalinin geldiği versiyon tablosu (sqlite/mysql "tablo.sütun", postgres "tablo_pkey")"""
    text = str(exc.orig if exc.orig is not None else exc).lower()
    for table in (PageFieldVersion.__tablename__, PageVersion.__tablename__):
        if f"{table}." in text or f"{table}_" in text or f'"{table}"' in text:
            return table
    return None

async def app_exception_handler(request: Request, exc: BaseAppException):
    """
    Özel uygulama istisnalarını işler

    Versiyon numarası çakışmalarında Retry-After başlığı eklenir.
    """
    # İş kuralı hataları uyarı, diğerleri hata seviyesinde loglanır
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"Application Error [{exc.error_code}]: {exc.message}\n"
        f"Request path: {request.url.path}\n"
        f"Trace ID: {exc.trace_id}\n"
        f"Details: {exc.detail}"
    )

    headers = dict(exc.headers or {})
    if isinstance(exc, (DuplicateVersionError, VersionAddRetryExhaustedError)):
        headers.setdefault("Retry-After", RETRY_AFTER_SECONDS)

    return _error_response(
        request,
        exc.status_code,
        exc.message,
        exc.error_code,
        exc.error_type,
        detail=exc.detail,
        trace_id=exc.trace_id,
        timestamp=exc.timestamp,
        headers=headers
    )

async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Pydantic doğrulama hatalarını işler
    """
    error_details = [
        {
            "loc": [str(loc) for loc in error.get("loc", [])],
            "msg": error.get("msg", ""),
            "type": error.get("type", "")
        }
        for error in exc.errors()
    ]

    logger.warning(f"Validation Error on {request.url.path}: {error_details}")

    return _error_response(
        request,
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        ErrorCode.INVALID_INPUT,
        ErrorType.VALIDATION_ERROR,
        detail=error_details
    )

async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """
    SQLAlchemy veritabanı hatalarını işler

    versions tablosundaki benzersizlik ihlali, motorun yakalamadığı bir
    numara çakışmasıdır ve DUPLICATE_VERSION olarak döner.
    """
    headers = None
    error_type = ErrorType.DATABASE_ERROR
    if isinstance(exc, IntegrityError):
        table = _version_table(exc)
        status_code = status.HTTP_409_CONFLICT
        if table == PageVersion.__tablename__:
            error_code = ErrorCode.DUPLICATE_VERSION
            error_type = ErrorType.CONFLICT_ERROR
            message = "Version number already taken, retry the request"
            headers = {"Retry-After": RETRY_AFTER_SECONDS}
        elif table == PageFieldVersion.__tablename__:
            error_code = ErrorCode.INTEGRITY_ERROR
            message = "Conflicting field value for the same version"
        else:
            error_code = ErrorCode.INTEGRITY_ERROR
            message = "Database integrity constraint violation"
    elif isinstance(exc, OperationalError):
        # sqlite "database is locked" gibi geçici durumlar
        error_code = ErrorCode.DATABASE_CONNECTION_ERROR
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        message = "Database unavailable"
        headers = {"Retry-After": RETRY_AFTER_SECONDS}
    else:
        error_code = ErrorCode.QUERY_ERROR
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        message = "Database error occurred"

    trace_id = str(uuid.uuid4())
    logger.error(
        f"Database Error [{error_code}]: {message} on {request.url.path} "
        f"(trace {trace_id}): {str(exc)}\n{traceback.format_exc()}"
    )

    return _error_response(
        request, status_code, message, error_code, error_type,
        trace_id=trace_id, headers=headers
    )

def register_exception_handlers(app):
    """
    Tüm istisna işleyicilerini kaydeder
    """
    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)
