# Last reviewed: 2026-10-18 12:15:02 UTC (User: Teeksss)
from fastapi import APIRouter, Depends, HTTPException, status, Path, Query, Body
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Dict, List, Optional
import logging

from ...core.exceptions import (
    BaseAppException,
    NotFoundError,
    UnsupportedFieldError,
    VersionNotFoundError,
    VersioningDisallowedError,
)
from ...db.database import get_db
from ...models.fields import Page, Template
from ...models.templates import default_templates
from ...repositories.page_repository import SqlPageStore
from ...schemas.page_version import (
    AddVersionRequest,
    RestoreVersionRequest,
    SaveVersionRequest,
    VersionActionResponse,
    VersionInfoResponse,
    VersionListResponse,
)
from ...services.page_versioning import PageVersioningService
from ...utils.config import FILES_ROOT, VERSION_DEFAULT_SORT

router = APIRouter(prefix="/page-versions", tags=["page-versions"])
logger = logging.getLogger(__name__)

_templates = default_templates()

def get_templates() -> Dict[str, Template]:
    return _templates

def get_files_root() -> str:
    return FILES_ROOT

def get_versioning_service(
    db: Session = Depends(get_db),
    templates: Dict[str, Template] = Depends(get_templates),
    files_root: str = Depends(get_files_root)
) -> PageVersioningService:
    """İstek başına sayfa deposu ve versiyonlama servisi"""
    store = SqlPageStore(db, templates, files_root)
    return PageVersioningService(db, store)

def _get_page(service: PageVersioningService, page_id: int) -> Page:
    page = service.page_store.get(page_id)
    if page is None:
        raise NotFoundError(message=f"Page {page_id} not found", detail={"page_id": page_id})
    if not service.allow_page_versions(page):
        raise VersioningDisallowedError(page_id)
    return page

def _check_names(service: PageVersioningService, page: Page, names: Optional[List[str]]) -> None:
    """Kısmi versiyon için istenen adlar yerel özellik ya da versiyonlanabilir alan olmalı"""
    unsupported = service.snapshots.unsupported_names(page, names or [])
    if unsupported:
        raise UnsupportedFieldError(unsupported[0])

def _internal_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error {action}: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Error {action}: {str(e)}"
    )

@router.get("/{page_id}", response_model=VersionListResponse)
def get_page_versions(
    page_id: int = Path(..., description="Sayfa ID'si"),
    sort: str = Query(VERSION_DEFAULT_SORT, description="created, -created, modified, -modified, version, -version"),
    service: PageVersioningService = Depends(get_versioning_service)
):
    """
    Sayfaya ait tüm versiyonları getirir

    - **page_id**: Sayfa ID'si
    - **sort**: Sıralama
    """
    try:
        page = _get_page(service, page_id)
        infos = service.get_version_infos(page, sort)
        return {
            "page_id": page_id,
            "versions": [VersionInfoResponse.model_validate(info.model_dump()) for info in infos],
            "total": len(infos)
        }
    except (BaseAppException, HTTPException, SQLAlchemyError):
        raise
    except Exception as e:
        raise _internal_error("getting page versions", e)

@router.get("/{page_id}/{version}", response_model=VersionInfoResponse)
def get_page_version(
    page_id: int = Path(..., description="Sayfa ID'si"),
    version: int = Path(..., ge=1, description="Versiyon numarası"),
    service: PageVersioningService = Depends(get_versioning_service)
):
    """Belirli bir versiyonun bilgisini getirir"""
    page = _get_page(service, page_id)
    info = service.get_version_info(page, version)
    if info is None:
        raise VersionNotFoundError(page_id, version)
    return VersionInfoResponse.model_validate(info.model_dump())

@router.post("/{page_id}", response_model=VersionActionResponse, status_code=status.HTTP_201_CREATED)
def add_page_version(
    page_id: int = Path(..., description="Sayfa ID'si"),
    request: Optional[AddVersionRequest] = Body(None),
    service: PageVersioningService = Depends(get_versioning_service)
):
    """
    Sayfanın mevcut halinden yeni bir versiyon oluşturur

    - **description**: Versiyon açıklaması
    - **names**: Kısmi versiyon için alan adları
    """
    try:
        page = _get_page(service, page_id)
        request = request or AddVersionRequest()
        _check_names(service, page, request.names)
        version = service.add_version(page, request.description, request.names or None)
        return VersionActionResponse(
            page_id=page_id,
            version=version,
            success=version > 0,
            notices=service.pop_notices()
        )
    except (BaseAppException, HTTPException, SQLAlchemyError):
        raise
    except Exception as e:
        raise _internal_error("adding page version", e)

@router.put("/{page_id}/{version}", response_model=VersionActionResponse)
def save_page_version(
    page_id: int = Path(..., description="Sayfa ID'si"),
    version: int = Path(..., ge=2, description="Versiyon numarası"),
    request: Optional[SaveVersionRequest] = Body(None),
    service: PageVersioningService = Depends(get_versioning_service)
):
    """Sayfanın mevcut halini belirtilen versiyon slotuna kaydeder"""
    try:
        page = _get_page(service, page_id)
        request = request or SaveVersionRequest()
        _check_names(service, page, request.names)
        saved = service.save_version(page, version, request.description, request.names or None)
        return VersionActionResponse(
            page_id=page_id,
            version=saved,
            success=saved > 0,
            notices=service.pop_notices()
        )
    except (BaseAppException, HTTPException, SQLAlchemyError):
        raise
    except Exception as e:
        raise _internal_error("saving page version", e)

@router.post("/{page_id}/{version}/restore", response_model=VersionActionResponse)
def restore_page_version(
    page_id: int = Path(..., description="Sayfa ID'si"),
    version: int = Path(..., ge=1, description="Versiyon numarası"),
    request: Optional[RestoreVersionRequest] = Body(None),
    service: PageVersioningService = Depends(get_versioning_service)
):
    """
    Versiyonu canlı sayfaya geri yükler

    - **names**: Kısmi geri yükleme için alan adları
    - **use_temp_version**: Boşsa alan türlerine göre belirlenir
    """
    page = _get_page(service, page_id)
    request = request or RestoreVersionRequest()
    if not service.has_version(page, version):
        raise VersionNotFoundError(page_id, version)
    restored = service.restore_version(page, version, request.names or None, request.use_temp_version)
    return VersionActionResponse(
        page_id=page_id,
        version=version,
        success=restored is not None,
        notices=service.pop_notices()
    )

@router.delete("/{page_id}/{version}", response_model=VersionActionResponse)
def delete_page_version(
    page_id: int = Path(..., description="Sayfa ID'si"),
    version: int = Path(..., ge=1, description="Versiyon numarası"),
    service: PageVersioningService = Depends(get_versioning_service)
):
    """Versiyonu, alan değerlerini ve dosyalarını siler"""
    page = _get_page(service, page_id)
    if not service.delete_version(page, version):
        raise VersionNotFoundError(page_id, version)
    return VersionActionResponse(page_id=page_id, version=version, notices=service.pop_notices())

@router.delete("/{page_id}", response_model=Dict[str, int])
def delete_all_page_versions(
    page_id: int = Path(..., description="Sayfa ID'si"),
    service: PageVersioningService = Depends(get_versioning_service)
):
    """Sayfanın tüm versiyonlarını siler"""
    page = _get_page(service, page_id)
    qty = service.delete_all_versions(page)
    return {"page_id": page_id, "deleted": qty}
