# Last reviewed: 2026-10-18 11:12:50 UTC (User: Teeksss)
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Tuple
import json
import logging

from sqlalchemy.orm import Session

from ..core.exceptions import PayloadTooLargeError
from ..models.fields import Field, Page, PaginatedList, Template
from ..models.fieldtypes import Fieldtype, FieldVersioning, VersionedFieldtype
from ..repositories.page_version_repository import PageVersionRepository
from .notices import VersionNotices

logger = logging.getLogger(__name__)

class FieldCapabilityRegistry:
    """
    Alan türü kimliğine göre versiyonlama kabiliyeti tablosu

    Kayıtlı bir geçersiz kılma (override) yoksa kabiliyet her çağrıda alan
    türünün kendisine yeniden sorulur; önceki bir karar önbelleğe alınmaz.
    """

    def __init__(self):
        self._overrides: Dict[str, FieldVersioning] = {}
        self._unsupported: Dict[str, List[Field]] = {}

    def register(self, type_id: str, versioning: FieldVersioning) -> None:
        """
        Bir alan türünün kabiliyetini sabitler

        Args:
            type_id: Alan türü kimliği (ör. "comments")
            versioning: Zorlanacak kabiliyet
        """
        self._overrides[type_id] = versioning
        self._unsupported.clear()

    def unregister(self, type_id: str) -> None:
        self._overrides.pop(type_id, None)
        self._unsupported.clear()

    def supports_versioning(self, field: Field) -> FieldVersioning:
        fieldtype = field.type
        override = self._overrides.get(fieldtype.type_id)
        if override is not None:
            if override == FieldVersioning.SELF_MANAGED and not isinstance(fieldtype, VersionedFieldtype):
                return FieldVersioning.NO
            return override
        return fieldtype.version_capability(field)

    def supports_file_assets(self, field: Field) -> bool:
        return bool(field.type.has_files)

    def supports_per_field_asset_versioning(self, field: Field) -> bool:
        return self.supports_file_assets(field) and bool(field.type.files_by_field)

    def file_fields(self, page: Page, names: Optional[Iterable[str]] = None) -> List[Field]:
        """Sayfanın versiyonlanabilir, dosya tutan alanları"""
        names = set(names) if names else None
        fields = []
        for field in page.fields:
            if names is not None and field.name not in names:
                continue
            if self.supports_versioning(field) == FieldVersioning.NO:
                continue
            if self.supports_file_assets(field):
                fields.append(field)
        return fields

    def use_files_by_field(self, page: Page) -> bool:
        """
        Dosyalar alan bazında mı kopyalanmalı?

        Karar sayfanın tüm dosya alanlarına göre verilir: hepsi alan bazında
        kopyalamayı destekliyorsa True, aksi halde tüm dizin birlikte kopyalanır.
        """
        fields = self.file_fields(page)
        if not fields:
            return False
        return all(self.supports_per_field_asset_versioning(f) for f in fields)

    def page_supports_partial_version(self, page: Page, names: Iterable[str]) -> bool:
        fields = self.file_fields(page, names)
        if not fields:
            return True
        return all(self.supports_per_field_asset_versioning(f) for f in fields)

    def restore_hazard(self, page: Page, names: Optional[Iterable[str]] = None) -> bool:
        """Geri yüklemede geçici versiyon gerektiren bir alan var mı?"""
        names = set(names) if names else None
        for field in page.fields:
            if names is not None and field.name not in names:
                continue
            if self.supports_versioning(field) == FieldVersioning.NO:
                continue
            if field.type.restore_hazard(page, field):
                return True
        return False

    def get_unsupported_fields(self, template: Template) -> List[Field]:
        """Şablonda versiyonlanamayan alanlar (şablon başına önbelleklenir)"""
        if template.name not in self._unsupported:
            self._unsupported[template.name] = [
                f for f in template.fields
                if self.supports_versioning(f) == FieldVersioning.NO
            ]
        return list(self._unsupported[template.name])

class FieldVersioningStrategy(ABC):
    """Bir alanın versiyon değerini saklama/okuma/silme yöntemi"""

    def __init__(self, notices: VersionNotices):
        self.notices = notices

    @abstractmethod
    def save(self, page: Page, field: Field, version: int) -> bool:
        pass

    @abstractmethod
    def read(self, page: Page, field: Field, version: int, raw: bool = False) -> Tuple[bool, Any]:
        """(bulundu_mu, değer) döndürür"""
        pass

    @abstractmethod
    def restore(self, page: Page, field: Field, version: int) -> bool:
        pass

    @abstractmethod
    def delete(self, page: Page, field: Field, version: int) -> bool:
        pass

    def load(self, page: Page, field: Field, version: int) -> bool:
        """Versiyondaki değeri sayfaya yazar; değer yoksa canlı değer korunur"""
        found, value = self.read(page, field, version)
        if found:
            page.values[field.name] = value
        return found

class GenericFieldVersioning(FieldVersioningStrategy):
    """version_values tablosu üzerinden çalışan versiyonlama"""

    def __init__(self, repository: PageVersionRepository, db: Session, notices: VersionNotices):
        super().__init__(notices)
        self.repository = repository
        self.db = db

    def save(self, page, field, version):
        value = page.values.get(field.name, field.type.blank_value(page, field))
        if isinstance(value, PaginatedList) and value.is_partial:
            return self.notices.page_field_error(page, field, "Paginated value cannot be versioned")

        sleep_value = field.type.sleep_value(page, field, value)
        if not isinstance(sleep_value, (list, dict)) or list(sleep_value) == ["data"]:
            sleep_value = {"data": sleep_value}

        try:
            payload = json.dumps(sleep_value)
        except (TypeError, ValueError):
            return self.notices.page_field_error(page, field, "Skipped because unable to encode value")

        try:
            return self.repository.set_field_value(self.db, page.id, field.id, version, payload)
        except PayloadTooLargeError as e:
            return self.notices.page_field_error(page, field, e.message)

    def read(self, page, field, version, raw=False):
        payload = self.repository.get_field_value(self.db, page.id, field.id, version)
        if payload is None:
            return False, None
        try:
            sleep_value = json.loads(payload)
        except ValueError:
            self.notices.page_field_error(page, field, f"Unable to decode value for version {version}")
            return False, None
        if isinstance(sleep_value, dict) and list(sleep_value) == ["data"]:
            sleep_value = sleep_value["data"]
        if raw:
            return True, sleep_value
        return True, field.type.wakeup_value(page, field, sleep_value)

    def restore(self, page, field, version):
        # Değer versiyon kopyasına yüklendi; kopya kaydedilince canlıya geçer
        return True

    def delete(self, page, field, version):
        return self.repository.delete_field_value(self.db, page.id, field.id, version)

class SelfManagedFieldVersioning(FieldVersioningStrategy):
    """Versiyonlarını kendisi yöneten alan türlerine devreder"""

    def _fieldtype(self, field: Field) -> Fieldtype:
        return field.type

    def save(self, page, field, version):
        return bool(self._fieldtype(field).save_field_version(page, field, version))

    def read(self, page, field, version, raw=False):
        value = self._fieldtype(field).get_field_version(page, field, version)
        if value is None:
            return False, None
        if raw:
            return True, field.type.sleep_value(page, field, value)
        return True, value

    def restore(self, page, field, version):
        return bool(self._fieldtype(field).restore_field_version(page, field, version))

    def delete(self, page, field, version):
        return bool(self._fieldtype(field).delete_field_version(page, field, version))

def build_strategies(
    repository: PageVersionRepository,
    db: Session,
    notices: VersionNotices
) -> Dict[FieldVersioning, FieldVersioningStrategy]:
    """Kabiliyet -> strateji eşlemesi; NO için strateji yoktur"""
    return {
        FieldVersioning.GENERIC: GenericFieldVersioning(repository, db, notices),
        FieldVersioning.SELF_MANAGED: SelfManagedFieldVersioning(notices),
    }
