# Last reviewed: 2026-10-18 10:24:10 UTC (User: Teeksss)
from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, Any, List, Optional
from datetime import datetime
from enum import Enum

class VersionAction(str, Enum):
    """Versiyon kopyası üzerinde yürütülen işlem"""
    NONE = ""
    RESTORE = "restore"

class VersionInfo(BaseModel):
    """
    Bir sayfa versiyonunun üst verisi

    Bir versiyon kopyasına iliştirildiğinde sayfanın hangi versiyonu
    temsil ettiğini ve üzerinde yürüyen işlemi taşır. Kendisi
    saklanmaz; versions tablosundaki satırın bir görünümüdür.
    """
    model_config = ConfigDict(from_attributes=True)

    version: int = 0
    page_id: int = 0
    description: str = ""
    created: Optional[datetime] = None
    modified: Optional[datetime] = None
    created_by: int = 0
    modified_by: int = 0
    action: VersionAction = VersionAction.NONE
    properties: Optional[Dict[str, Any]] = None

    @property
    def is_restoring(self) -> bool:
        return self.action == VersionAction.RESTORE

    @property
    def created_str(self) -> str:
        return self.created.strftime("%Y-%m-%d %H:%M:%S") if self.created else ""

    @property
    def modified_str(self) -> str:
        return self.modified.strftime("%Y-%m-%d %H:%M:%S") if self.modified else ""

    def __str__(self):
        return str(self.version)

class VersionInfoResponse(BaseModel):
    """Versiyon yanıt şeması"""
    model_config = ConfigDict(from_attributes=True)

    page_id: int
    version: int
    description: str = ""
    created: Optional[datetime] = None
    modified: Optional[datetime] = None
    created_by: int = 0
    modified_by: int = 0
    properties: Optional[Dict[str, Any]] = None

class VersionListResponse(BaseModel):
    """Versiyon listesi yanıt şeması"""
    page_id: int
    versions: List[VersionInfoResponse]
    total: int

class AddVersionRequest(BaseModel):
    """Yeni versiyon ekleme isteği"""
    description: str = Field("", max_length=65535, description="Versiyon açıklaması")
    names: List[str] = Field(default_factory=list, description="Yalnızca bu alan/özellikler (boşsa tümü)")

class SaveVersionRequest(BaseModel):
    """Mevcut versiyon slotuna kaydetme isteği"""
    description: Optional[str] = Field(None, description="Verilirse açıklama güncellenir")
    names: List[str] = Field(default_factory=list)

class RestoreVersionRequest(BaseModel):
    """Versiyonu canlı sayfaya geri yükleme isteği"""
    names: List[str] = Field(default_factory=list, description="Kısmi geri yükleme için alan adları")
    use_temp_version: Optional[bool] = Field(None, description="Boşsa otomatik belirlenir")

class VersionActionResponse(BaseModel):
    """Versiyon işlemi sonucu"""
    page_id: int
    version: int
    success: bool = True
    notices: List[str] = Field(default_factory=list)
