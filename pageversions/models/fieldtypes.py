# Last reviewed: 2026-10-18 10:02:33 UTC (User: Teeksss)
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .fields import Field, Page

class FieldVersioning(str, Enum):
    """Bir alan türünün versiyonlama kabiliyeti"""
    NO = "no"                      # versiyona hiç dahil edilmez
    GENERIC = "generic"            # version_values tablosu üzerinden yönetilir
    SELF_MANAGED = "self_managed"  # alan türü kendi versiyonlarını yönetir

class Fieldtype:
    """
    Alan türleri için temel sınıf

    Versiyonlama katmanı alan değerlerinin anlamını bilmez; yalnızca
    aşağıdaki kabiliyet sorularını ve sleep/wakeup dönüşümlerini kullanır.
    """
    type_id = "base"
    stores_data = True        # fieldset gibi işaretçi alanlar veri tutmaz
    versionable = True        # ör. yorum alanları versiyonlardan hariç tutulur
    has_files = False         # alan dosya (asset) tutuyor mu?
    files_by_field = False    # yalnızca kendi dosyalarını kopyalayabiliyor mu?

    def version_capability(self, field: "Field") -> FieldVersioning:
        if not self.stores_data or not self.versionable:
            return FieldVersioning.NO
        return FieldVersioning.GENERIC

    def blank_value(self, page: "Page", field: "Field") -> Any:
        return None

    def sleep_value(self, page: "Page", field: "Field", value: Any) -> Any:
        """Canlı değeri JSON ile kodlanabilir bir değere çevirir"""
        return value

    def wakeup_value(self, page: "Page", field: "Field", value: Any) -> Any:
        """sleep_value çıktısını tekrar canlı değere çevirir"""
        return value

    def get_files(self, page: "Page", field: "Field") -> List[str]:
        """Alanın sayfa dosya dizinindeki dosya adları"""
        return []

    def restore_hazard(self, page: "Page", field: "Field") -> bool:
        """
        Yerinde geri yükleme diğer alanların ihtiyaç duyduğu veriyi
        taşıyabilir veya silebilir mi? True ise geçici versiyon kullanılır.
        """
        return False

    def __repr__(self):
        return f"<{self.__class__.__name__}({self.type_id})>"

class VersionedFieldtype(Fieldtype, ABC):
    """Versiyonlarını kendisi yöneten alan türleri için arayüz"""

    def version_capability(self, field: "Field") -> FieldVersioning:
        return FieldVersioning.SELF_MANAGED

    @abstractmethod
    def save_field_version(self, page: "Page", field: "Field", version: int) -> bool:
        pass

    @abstractmethod
    def get_field_version(self, page: "Page", field: "Field", version: int) -> Any:
        """Versiyondaki değer veya versiyonda yoksa None"""
        pass

    @abstractmethod
    def restore_field_version(self, page: "Page", field: "Field", version: int) -> bool:
        pass

    @abstractmethod
    def delete_field_version(self, page: "Page", field: "Field", version: int) -> bool:
        pass

class TextFieldtype(Fieldtype):
    type_id = "text"

    def blank_value(self, page, field):
        return ""

    def sleep_value(self, page, field, value):
        return "" if value is None else str(value)

    def wakeup_value(self, page, field, value):
        return "" if value is None else str(value)

class IntegerFieldtype(Fieldtype):
    type_id = "integer"

    def wakeup_value(self, page, field, value):
        if value in (None, ""):
            return None
        return int(value)

class FieldsetFieldtype(Fieldtype):
    """Form düzeni için işaretçi, veri tutmaz"""
    type_id = "fieldset"
    stores_data = False

class CommentsFieldtype(Fieldtype):
    """Yorum dizileri versiyonlanmaz"""
    type_id = "comments"
    versionable = False

    def blank_value(self, page, field):
        return []

class FileFieldtype(Fieldtype):
    """
    Dosya listesi tutan alan. Değer, sayfa dosya dizinindeki dosya
    adlarından oluşan bir listedir.
    """
    type_id = "file"
    has_files = True
    files_by_field = True

    def blank_value(self, page, field):
        return []

    def sleep_value(self, page, field, value):
        return [str(name) for name in (value or [])]

    def wakeup_value(self, page, field, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [value]
        return [str(name) for name in value]

    def get_files(self, page, field):
        return list(page.get(field.name) or [])

class LegacyFileFieldtype(FileFieldtype):
    """Dosyalarını alan bazında kopyalayamayan eski dosya alanı"""
    type_id = "legacy_file"
    files_by_field = False

class RepeaterFieldtype(Fieldtype):
    """
    Tekrarlanan alt alan gruplarını tutan alan. Değer, her biri
    alt alan adı -> değer eşlemesi olan öğelerin listesidir.
    """
    type_id = "repeater"

    def __init__(self, sub_fields: Optional[List["Field"]] = None):
        self.sub_fields = list(sub_fields or [])

    def blank_value(self, page, field):
        return []

    def sleep_value(self, page, field, value):
        items = []
        for item in value or []:
            row: Dict[str, Any] = {}
            for sub in self.sub_fields:
                row[sub.name] = sub.type.sleep_value(page, sub, item.get(sub.name))
            items.append(row)
        return items

    def wakeup_value(self, page, field, value):
        items = []
        for row in value or []:
            item: Dict[str, Any] = {}
            for sub in self.sub_fields:
                item[sub.name] = sub.type.wakeup_value(page, sub, row.get(sub.name))
            items.append(item)
        return items

    def has_nested_repeater_fields(self) -> bool:
        return any(isinstance(sub.type, RepeaterFieldtype) for sub in self.sub_fields)

    def restore_hazard(self, page, field):
        # İç içe repeater'lar geri yükleme sırasında taşınabilir
        return self.has_nested_repeater_fields()
