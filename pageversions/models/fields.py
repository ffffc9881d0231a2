# Last reviewed: 2026-10-18 10:02:33 UTC (User: Teeksss)
import copy
from dataclasses import dataclass, field as dataclass_field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from .fieldtypes import Fieldtype

# Sayfanın yerel (native) özellikleri, pages tablosunun sütunları
NATIVE_PROPERTIES = [
    "parent_id", "template", "name", "status", "sort",
    "created", "modified", "published", "created_by", "modified_by",
]

# Versiyonda unix zaman damgası (int) olarak saklanan özellikler
DATETIME_PROPERTIES = {"created", "modified", "published"}

def to_timestamp(value: Any) -> Any:
    """datetime değerini saniye cinsinden unix zaman damgasına çevirir"""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    return value

def from_timestamp(value: Any) -> Any:
    """Unix zaman damgasını UTC datetime değerine çevirir"""
    if value is None or isinstance(value, datetime):
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    if isinstance(value, str):
        if value.isdigit():
            value = int(value)
        else:
            return from_timestamp(datetime.fromisoformat(value))
    return datetime.fromtimestamp(int(value), tz=timezone.utc)

class PaginatedList(list):
    """Toplamın yalnızca bir kısmı yüklenmiş liste değeri"""

    def __init__(self, items=(), total: Optional[int] = None):
        super().__init__(items)
        self.total = len(self) if total is None else total

    @property
    def is_partial(self) -> bool:
        return self.total > len(self)

@dataclass(eq=False)
class Field:
    id: int
    name: str
    type: Fieldtype
    label: str = ""

    def __eq__(self, other):
        return isinstance(other, Field) and other.id == self.id

    def __hash__(self):
        return hash(self.id)

@dataclass
class Template:
    name: str
    fields: List[Field] = dataclass_field(default_factory=list)
    page_type: str = "page"

    def get_field(self, name: str) -> Optional[Field]:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

class Page:
    """
    Canlı içerik nesnesi veya onun bir versiyon kopyası

    `version_info` doluysa sayfa bir versiyonu temsil eder.
    """

    def __init__(
        self,
        id: int = 0,
        template: Optional[Template] = None,
        properties: Optional[Dict[str, Any]] = None,
        values: Optional[Dict[str, Any]] = None
    ):
        self.id = id
        self.template = template or Template(name="basic-page")
        self.properties: Dict[str, Any] = {}
        self.values: Dict[str, Any] = dict(values or {})
        self.version_info = None
        self._changes: Set[str] = set()
        for name, value in (properties or {}).items():
            self.set_property(name, value, track=False)

    @property
    def fields(self) -> List[Field]:
        return self.template.fields

    @property
    def is_version(self) -> bool:
        return bool(self.version_info and self.version_info.version)

    def get(self, name: str, default: Any = None) -> Any:
        if name in self.values:
            return self.values[name]
        if name in self.properties:
            return self.properties[name]
        if name == "id":
            return self.id
        return default

    def set(self, name: str, value: Any) -> "Page":
        if self.template.get_field(name) is not None:
            self.values[name] = value
            self._changes.add(name)
        else:
            self.set_property(name, value)
        return self

    def set_property(self, name: str, value: Any, track: bool = True) -> "Page":
        if name in DATETIME_PROPERTIES:
            value = from_timestamp(value)
        self.properties[name] = value
        if track:
            self._changes.add(name)
        return self

    def get_changes(self) -> List[str]:
        return sorted(self._changes)

    def reset_changes(self) -> None:
        self._changes.clear()

    def copy(self) -> "Page":
        """Sayfanın bağımsız (detached) bir kopyasını döndürür"""
        clone = Page(id=self.id, template=self.template)
        clone.properties = copy.deepcopy(self.properties)
        clone.values = copy.deepcopy(self.values)
        if self.version_info is not None:
            clone.version_info = self.version_info.model_copy()
        return clone

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __repr__(self):
        version = f" v{self.version_info.version}" if self.is_version else ""
        return f"<Page(id={self.id}, template={self.template.name}{version})>"
