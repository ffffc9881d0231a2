# Last reviewed: 2026-10-18 10:58:03 UTC (User: Teeksss)
import json
import logging
import os
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models.fields import NATIVE_PROPERTIES, DATETIME_PROPERTIES, Page, Template, from_timestamp
from ..models.page import PageRecord
from ..models.page_version import utcnow
from ..utils.config import FILES_ROOT

logger = logging.getLogger(__name__)

# save(page, allow_version_write) öncesi çağrılır; kaydı reddetmek için istisna fırlatır
SaveGuard = Callable[[Page, bool], None]
# Sayfa silindikten sonra çağrılır
DeleteListener = Callable[[Page], None]

class PageStore(ABC):
    """
    Canlı sayfalar için nesne deposu arayüzü

    Versiyonlama katmanı sayfaları yalnızca bu arayüz üzerinden okur ve kaydeder.
    """

    def __init__(self):
        self._save_guards: List[SaveGuard] = []
        self._delete_listeners: List[DeleteListener] = []

    def add_save_guard(self, guard: SaveGuard) -> None:
        self._save_guards.append(guard)

    def add_delete_listener(self, listener: DeleteListener) -> None:
        self._delete_listeners.append(listener)

    def run_save_guards(self, page: Page, allow_version_write: bool) -> None:
        for guard in self._save_guards:
            guard(page, allow_version_write)

    def notify_deleted(self, page: Page) -> None:
        for listener in self._delete_listeners:
            listener(page)

    @abstractmethod
    def get(self, page_id: int) -> Optional[Page]:
        """Sayfayı (varsa önbellekten) getirir"""
        pass

    @abstractmethod
    def get_fresh(self, page_id: int) -> Optional[Page]:
        """Önbelleği atlayarak sayfanın temiz bir kopyasını getirir"""
        pass

    @abstractmethod
    def save(self, page: Page, allow_version_write: bool = False) -> Page:
        """Sayfayı canlı sayfa olarak kaydeder"""
        pass

    @abstractmethod
    def delete(self, page: Page) -> bool:
        pass

    @abstractmethod
    def files_path(self, page: Page) -> str:
        """Sayfanın canlı dosya dizini (sonunda ayraç ile)"""
        pass

    def has_files_path(self, page: Page) -> bool:
        return os.path.isdir(self.files_path(page))

    def get_many(self, page_ids: Iterable[int]) -> List[Page]:
        pages = []
        for page_id in page_ids:
            page = self.get(page_id)
            if page is not None:
                pages.append(page)
        return pages

class SqlPageStore(PageStore):
    """
    pages tablosu üzerinde çalışan sayfa deposu

    Alan değerleri alan türünün sleep_value çıktısı olarak data sütununda
    JSON biçiminde saklanır.
    """

    def __init__(self, db: Session, templates: Dict[str, Template], files_root: str = FILES_ROOT):
        super().__init__()
        self.db = db
        self.templates = templates
        self.files_root = files_root
        self._cache: Dict[int, Page] = {}

    def get(self, page_id: int) -> Optional[Page]:
        if page_id in self._cache:
            return self._cache[page_id]
        page = self.get_fresh(page_id)
        if page is not None:
            self._cache[page_id] = page
        return page

    def get_fresh(self, page_id: int) -> Optional[Page]:
        record = self.db.execute(
            select(PageRecord).where(PageRecord.id == page_id)
        ).scalar_one_or_none()
        if record is None:
            return None
        # Oturumdaki eski nesne durumunu kullanma
        self.db.refresh(record)
        return self._to_domain(record)

    def create(self, template: Template, values: Optional[Dict[str, Any]] = None, user_id: int = 0, **properties) -> Page:
        """Yeni bir canlı sayfa oluşturur"""
        if template.name not in self.templates:
            self.templates[template.name] = template
        page_id = int(properties.pop("id", 0) or 0)
        page = Page(id=page_id, template=template, properties=properties, values=values)
        now = utcnow()
        page.properties.setdefault("created", now)
        page.properties.setdefault("created_by", user_id)
        page.properties["modified_by"] = user_id
        return self.save(page)

    def save(self, page: Page, allow_version_write: bool = False) -> Page:
        self.run_save_guards(page, allow_version_write)

        record = None
        if page.id:
            record = self.db.get(PageRecord, page.id)
        if record is None:
            record = PageRecord(template=page.template.name)
            if page.id:
                record.id = page.id
            self.db.add(record)

        page.properties["modified"] = utcnow()
        for name in NATIVE_PROPERTIES:
            if name == "template":
                record.template = page.template.name
                continue
            if name in page.properties:
                value = page.properties[name]
                if name in DATETIME_PROPERTIES:
                    value = from_timestamp(value)
                setattr(record, name, value)

        data = {}
        for field in page.fields:
            if not field.type.stores_data:
                continue
            value = page.values.get(field.name, field.type.blank_value(page, field))
            data[field.name] = field.type.sleep_value(page, field, value)
        record.data = json.dumps(data)

        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Error saving page {page.id}: {str(e)}")
            raise

        self.db.refresh(record)
        page.id = record.id
        page.properties.update(self._native_properties(record))
        page.reset_changes()
        self._cache[page.id] = page
        return page

    def delete(self, page: Page) -> bool:
        record = self.db.get(PageRecord, page.id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.commit()
        self._cache.pop(page.id, None)
        self.notify_deleted(page)
        return True

    def files_path(self, page: Page) -> str:
        return os.path.join(self.files_root, str(page.id)) + os.sep

    def _native_properties(self, record: PageRecord) -> Dict[str, Any]:
        properties = {}
        for name in NATIVE_PROPERTIES:
            value = getattr(record, name)
            if name in DATETIME_PROPERTIES:
                value = from_timestamp(value)
            properties[name] = value
        return properties

    def _to_domain(self, record: PageRecord) -> Page:
        """Veritabanı kaydını Page nesnesine dönüştürür"""
        template = self.templates.get(record.template) or Template(name=record.template)
        page = Page(id=record.id, template=template, properties=self._native_properties(record))
        data = json.loads(record.data or "{}")
        for field in template.fields:
            if not field.type.stores_data:
                continue
            if field.name in data:
                page.values[field.name] = field.type.wakeup_value(page, field, data[field.name])
            else:
                page.values[field.name] = field.type.blank_value(page, field)
        return page
