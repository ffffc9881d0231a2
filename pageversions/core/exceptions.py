# Last reviewed: 2026-10-18 09:20:05 UTC (User: Teeksss)
from typing import Any, Dict, Optional, List, Union
from fastapi import HTTPException, status
import logging
import uuid
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

# Uygulama hata türleri
class ErrorType:
    """Uygulama hata türleri"""
    VALIDATION_ERROR = "validation_error"
    DATABASE_ERROR = "database_error"
    PERMISSION_ERROR = "permission_error"
    NOT_FOUND_ERROR = "not_found_error"
    CONFLICT_ERROR = "conflict_error"
    INTERNAL_ERROR = "internal_error"
    BUSINESS_LOGIC_ERROR = "business_logic_error"

# Uygulama hata kodları
class ErrorCode:
    """Uygulama hata kodları"""
    # Doğrulama hataları (1000-1999)
    INVALID_INPUT = "ERR_1000"

    # Veritabanı hataları (3000-3999)
    DATABASE_CONNECTION_ERROR = "ERR_3000"
    QUERY_ERROR = "ERR_3001"
    INTEGRITY_ERROR = "ERR_3002"

    # Kaynak hataları (4000-4999)
    RESOURCE_NOT_FOUND = "ERR_4000"
    RESOURCE_ALREADY_EXISTS = "ERR_4001"

    # İş mantığı hataları (7000-7999)
    BUSINESS_RULE_VIOLATION = "ERR_7000"
    OPERATION_NOT_ALLOWED = "ERR_7003"

    # Versiyonlama hataları (8000-8999)
    DUPLICATE_VERSION = "ERR_8000"
    VERSION_NOT_FOUND = "ERR_8001"
    UNSUPPORTED_FIELD = "ERR_8002"
    PAYLOAD_TOO_LARGE = "ERR_8003"
    PARTIAL_RESTORE_UNSUPPORTED = "ERR_8004"
    VERSIONING_DISALLOWED = "ERR_8005"
    VERSION_WRITE_DENIED = "ERR_8006"
    VERSION_RETRY_EXHAUSTED = "ERR_8007"

    # Sistem hataları (9000-9999)
    INTERNAL_SERVER_ERROR = "ERR_9000"

class BaseAppException(Exception):
    """
    Uygulama için temel özel istisna

    Bu sınıf, projedeki tüm özel istisnaların temelini oluşturur.
    Uygulama genelinde tutarlı hata işleme sağlar.
    """
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_code: Optional[str] = None,
        error_type: Optional[str] = None,
        detail: Optional[Union[str, List[Dict[str, Any]], Dict[str, Any]]] = None,
        headers: Optional[Dict[str, str]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code or ErrorCode.INTERNAL_SERVER_ERROR
        self.error_type = error_type or ErrorType.INTERNAL_ERROR
        self.detail = detail
        self.headers = headers
        self.trace_id = str(uuid.uuid4())
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """
        FastAPI HTTP istisna nesnesine dönüştür
        """
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "error_code": self.error_code,
                "error_type": self.error_type,
                "detail": self.detail,
                "trace_id": self.trace_id,
                "timestamp": self.timestamp
            },
            headers=self.headers
        )

class PermissionError(BaseAppException):
    """İzin hatası"""
    def __init__(
        self,
        message: str = "Permission denied",
        detail: Optional[Union[str, List[Dict[str, Any]]]] = None,
        error_code: str = ErrorCode.OPERATION_NOT_ALLOWED
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code=error_code,
            error_type=ErrorType.PERMISSION_ERROR,
            detail=detail
        )

class NotFoundError(BaseAppException):
    """Kaynak bulunamadı hatası"""
    def __init__(
        self,
        message: str = "Resource not found",
        detail: Optional[Union[str, List[Dict[str, Any]]]] = None,
        error_code: str = ErrorCode.RESOURCE_NOT_FOUND
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_404_NOT_FOUND,
            error_code=error_code,
            error_type=ErrorType.NOT_FOUND_ERROR,
            detail=detail
        )

class ConflictError(BaseAppException):
    """Çakışma hatası"""
    def __init__(
        self,
        message: str = "Resource conflict",
        detail: Optional[Union[str, List[Dict[str, Any]]]] = None,
        error_code: str = ErrorCode.RESOURCE_ALREADY_EXISTS
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_409_CONFLICT,
            error_code=error_code,
            error_type=ErrorType.CONFLICT_ERROR,
            detail=detail
        )

class BusinessLogicError(BaseAppException):
    """İş mantığı hatası"""
    def __init__(
        self,
        message: str = "Business rule violation",
        detail: Optional[Union[str, List[Dict[str, Any]], Dict[str, Any]]] = None,
        error_code: str = ErrorCode.BUSINESS_RULE_VIOLATION
    ):
        super().__init__(
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            error_type=ErrorType.BUSINESS_LOGIC_ERROR,
            detail=detail
        )

# --- Versiyonlama hataları ---

class DuplicateVersionError(ConflictError):
    """Aynı sayfa için aynı versiyon numarası zaten mevcut"""
    def __init__(self, page_id: int, version: int):
        self.page_id = page_id
        self.version = version
        super().__init__(
            message=f"Version {version} already exists for page {page_id}",
            detail={"page_id": page_id, "version": version},
            error_code=ErrorCode.DUPLICATE_VERSION
        )

class VersionNotFoundError(NotFoundError):
    """İstenen versiyon bulunamadı"""
    def __init__(self, page_id: int, version: int):
        self.page_id = page_id
        self.version = version
        super().__init__(
            message=f"Version {version} not found for page {page_id}",
            detail={"page_id": page_id, "version": version},
            error_code=ErrorCode.VERSION_NOT_FOUND
        )

class UnsupportedFieldError(BusinessLogicError):
    """Alan türü versiyonlamayı desteklemiyor"""
    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(
            message=f"Field '{field_name}' does not support versions",
            detail={"field": field_name},
            error_code=ErrorCode.UNSUPPORTED_FIELD
        )

class PayloadTooLargeError(BusinessLogicError):
    """Serileştirilmiş alan değeri depolama sınırını aşıyor"""
    def __init__(self, page_id: int, field_id: int, size: int, limit: int):
        self.page_id = page_id
        self.field_id = field_id
        self.size = size
        self.limit = limit
        super().__init__(
            message="Skipped because value is too large to save in a version",
            detail={"page_id": page_id, "field_id": field_id, "size": size, "limit": limit},
            error_code=ErrorCode.PAYLOAD_TOO_LARGE
        )

class PartialRestoreUnsupportedError(BusinessLogicError):
    """İstenen alanlardan biri veya birkaçı kısmi geri yüklemeyi desteklemiyor"""
    def __init__(self, page_id: int, names: List[str]):
        self.page_id = page_id
        self.names = list(names)
        super().__init__(
            message="One or more fields requested does not support partial restore",
            detail={"page_id": page_id, "names": self.names},
            error_code=ErrorCode.PARTIAL_RESTORE_UNSUPPORTED
        )

class VersioningDisallowedError(PermissionError):
    """Sayfa türü versiyonlamaya izin vermiyor"""
    def __init__(self, page_id: int):
        self.page_id = page_id
        super().__init__(
            message=f"Page {page_id} does not allow versions",
            detail={"page_id": page_id},
            error_code=ErrorCode.VERSIONING_DISALLOWED
        )

class VersionWriteDeniedError(PermissionError):
    """Versiyon kopyası canlı sayfa olarak kaydedilemez (restore dışında)"""
    def __init__(self, page_id: int, version: int):
        self.page_id = page_id
        self.version = version
        super().__init__(
            message=f"Page {page_id} is loaded as version {version} and cannot be saved as the live page",
            detail={"page_id": page_id, "version": version},
            error_code=ErrorCode.VERSION_WRITE_DENIED
        )

class VersionAddRetryExhaustedError(ConflictError):
    """Versiyon numarası ayırma denemeleri tükendi"""
    def __init__(self, page_id: int, attempts: int):
        self.page_id = page_id
        self.attempts = attempts
        super().__init__(
            message=f"Unable to allocate a version number for page {page_id} after {attempts} attempts",
            detail={"page_id": page_id, "attempts": attempts},
            error_code=ErrorCode.VERSION_RETRY_EXHAUSTED
        )
