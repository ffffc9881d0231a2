# Last reviewed: 2026-10-18 11:55:48 UTC (User: Teeksss)
from typing import Any, List, Optional, Union
import logging

from sqlalchemy.orm import Session

from ..core.exceptions import VersionWriteDeniedError
from ..models.fields import Field, Page, Template
from ..models.fieldtypes import FieldVersioning
from ..repositories.page_repository import PageStore
from ..repositories.page_version_repository import PageVersionRepository
from ..schemas.page_version import VersionInfo
from ..utils.config import (
    VERSION_ADD_RETRY,
    VERSION_DEFAULT_SORT,
    VERSION_DENY_PAGE_TYPES,
    VERSION_FILES_DIR_PREFIX,
    VERSION_MAX_DATA_LENGTH,
)
from .asset_versioner import AssetVersioner
from .field_capabilities import FieldCapabilityRegistry
from .notices import VersionNotices
from .restore_engine import RestoreEngine
from .snapshot_engine import SnapshotEngine, VersionArg

logger = logging.getLogger(__name__)

class PageVersioningService:
    """
    Sayfa versiyonlama servisi

    Versiyon oluşturma, yükleme, listeleme, geri yükleme ve silme için
    tek giriş noktası. allow_page_versions ve allow_field_versions alt
    sınıflarda geçersiz kılınabilir.
    """

    def __init__(
        self,
        db: Session,
        page_store: PageStore,
        registry: Optional[FieldCapabilityRegistry] = None,
        repository: Optional[PageVersionRepository] = None,
        user_id: int = 0,
        files_prefix: str = VERSION_FILES_DIR_PREFIX,
        max_data_length: int = VERSION_MAX_DATA_LENGTH,
        max_attempts: int = VERSION_ADD_RETRY
    ):
        """Servis başlangıç ayarları"""
        self.db = db
        self.page_store = page_store
        self.registry = registry or FieldCapabilityRegistry()
        self.repository = repository or PageVersionRepository(max_data_length)
        self.notices = VersionNotices()
        self.assets = AssetVersioner(page_store, self.registry, self.notices, files_prefix)
        self.snapshots = SnapshotEngine(
            db,
            page_store,
            self.repository,
            self.registry,
            self.assets,
            self.notices,
            capability=self.allow_field_versions,
            allow_page=self.allow_page_versions,
            max_attempts=max_attempts,
            user_id=user_id
        )
        self.restorer = RestoreEngine(
            db, page_store, self.snapshots, self.repository, self.registry, self.assets, self.notices
        )

        page_store.add_save_guard(self.guard_version_save)
        page_store.add_delete_listener(self.page_deleted)

    # --- izin kancaları ---

    def allow_page_versions(self, page: Page) -> bool:
        """Sayfa türü versiyonlanabilir mi? (kullanıcı, rol, izin, dil sayfaları hariç)"""
        return page.template.page_type not in VERSION_DENY_PAGE_TYPES

    def allow_field_versions(self, field: Field) -> FieldVersioning:
        """Alanın versiyonlama kabiliyeti"""
        return self.registry.supports_versioning(field)

    def page_supports_partial_version(self, page: Page, names: List[str]) -> bool:
        return self.registry.page_supports_partial_version(page, names)

    # --- sayfa deposu kancaları ---

    def guard_version_save(self, page: Page, allow_version_write: bool) -> None:
        """
        Versiyon kopyasının canlı sayfa olarak kaydedilmesini engeller

        Raises:
            VersionWriteDeniedError: Geri yükleme dışındaki kayıt denemelerinde
        """
        if not page.is_version:
            return
        if allow_version_write or page.version_info.is_restoring:
            return
        raise VersionWriteDeniedError(page.id, page.version_info.version)

    def page_deleted(self, page: Page) -> None:
        qty = self.delete_all_versions(page)
        if qty:
            logger.info(f"Page {page.id} deleted, removed its versions ({qty} rows)")

    # --- versiyon işlemleri ---

    def version_number(self, page: Page, version: VersionArg = 0) -> int:
        return self.snapshots.version_number(page, version)

    def get_next_version_number(self, page: Page) -> int:
        return self.snapshots.next_version_number(page)

    def add_version(
        self,
        page: Page,
        description: str = "",
        names: Optional[List[str]] = None,
        user_id: Optional[int] = None
    ) -> int:
        return self.snapshots.add_version(page, description, names, user_id)

    def save_version(
        self,
        page: Page,
        version: VersionArg = 0,
        description: Optional[str] = None,
        names: Optional[List[str]] = None,
        user_id: Optional[int] = None
    ) -> int:
        return self.snapshots.save_version(page, version, description, names, user_id)

    def get_version(self, page: Page, version: VersionArg, names: Optional[List[str]] = None) -> Optional[Page]:
        return self.snapshots.get_version(page, version, names)

    def load_version(
        self,
        page: Page,
        version: VersionArg,
        names: Optional[List[str]] = None,
        raw: bool = False
    ) -> bool:
        return self.snapshots.load_version(page, version, names, raw)

    def get_versions(
        self,
        page: Page,
        sort: str = VERSION_DEFAULT_SORT,
        get_info: bool = False
    ) -> List[Union[Page, VersionInfo]]:
        return self.snapshots.get_versions(page, sort, get_info)

    def get_version_infos(self, page: Page, sort: str = VERSION_DEFAULT_SORT) -> List[VersionInfo]:
        return self.snapshots.get_versions(page, sort, get_info=True)

    def get_version_info(self, page: Page, version: VersionArg) -> Optional[VersionInfo]:
        if not self.allow_page_versions(page):
            return None
        return self.snapshots.get_version_info(page, version)

    def get_field_version(self, page: Page, field_name: str, version: VersionArg, raw: bool = False) -> Any:
        return self.snapshots.get_field_version(page, field_name, version, raw)

    def has_version(self, page: Page, version: VersionArg = None) -> Union[bool, int]:
        """
        Versiyon var mı?

        Args:
            page: Sayfa
            version: Verilirse o versiyonun varlığı (bool), verilmezse versiyon sayısı (int)
        """
        if version is None:
            return self.count_versions(page)
        version = self.version_number(page, version)
        if not version:
            return False
        return self.repository.get_version(self.db, page.id, version) is not None

    def count_versions(self, page: Page) -> int:
        if not self.allow_page_versions(page):
            return 0
        return self.repository.count_versions(self.db, page.id)

    def restore_version(
        self,
        page: Page,
        version: VersionArg = 0,
        names: Optional[List[str]] = None,
        use_temp_version: Optional[bool] = None
    ) -> Optional[Page]:
        return self.restorer.restore(page, version, names, use_temp_version)

    def delete_version(self, page: Page, version: VersionArg) -> bool:
        return self.snapshots.delete_version(page, version)

    def delete_all_versions(self, page: Page) -> int:
        return self.snapshots.delete_all_versions(page)

    # --- yardımcı işlemler ---

    def files_path(self, page: Page, version: VersionArg = 0) -> str:
        """Versiyonun (veya versiyon kopyasının) dosya dizini"""
        version = self.version_number(page, version)
        if not version:
            return self.assets.page_files_path(page)
        return self.assets.version_files_path(page, version)

    def get_version_fields(self, page: Page, version: VersionArg) -> List[str]:
        """Versiyonda değeri saklanmış alan adları"""
        version = self.version_number(page, version)
        if not version:
            return []
        stored_ids = set(self.repository.get_version_field_ids(self.db, page.id, version))
        names = []
        for field in page.fields:
            capability = self.allow_field_versions(field)
            if capability == FieldVersioning.GENERIC and field.id in stored_ids:
                names.append(field.name)
            elif capability == FieldVersioning.SELF_MANAGED:
                if self.snapshots.get_field_version(page, field.name, version) is not None:
                    names.append(field.name)
        return names

    def get_unsupported_fields(self, page: Optional[Page] = None, template: Optional[Template] = None) -> List[Field]:
        """Versiyonlanamayan alanlar"""
        template = template or (page.template if page is not None else None)
        if template is None:
            return []
        unsupported = self.registry.get_unsupported_fields(template)
        for field in template.fields:
            if field not in unsupported and self.allow_field_versions(field) == FieldVersioning.NO:
                unsupported.append(field)
        return unsupported

    def update_version_property(self, page: Page, version: VersionArg, name: str, value: Any) -> bool:
        version = self.version_number(page, version)
        if not version:
            return False
        return self.repository.update_version_property(self.db, page.id, version, name, value)

    def get_total_version_size(self, page: Page, version: VersionArg = 0) -> int:
        return self.assets.total_version_size(page, self.version_number(page, version))

    def get_all_pages_with_versions(self) -> List[Page]:
        return self.page_store.get_many(self.repository.get_page_ids_with_versions(self.db))

    def delete_all_versions_globally(self, are_you_sure: bool = False) -> int:
        """
        Tüm sayfaların tüm versiyonlarını siler

        Args:
            are_you_sure: Tam olarak True verilmedikçe hiçbir şey silinmez

        Returns:
            int: Silinen satır sayısı
        """
        if are_you_sure is not True:
            return 0
        qty = 0
        for page_id in self.repository.get_page_ids_with_versions(self.db):
            page = self.page_store.get(page_id)
            if page is None:
                qty += self.repository.delete_all_versions(self.db, page_id)
            else:
                qty += self.delete_all_versions(page)
        logger.warning(f"Deleted all versions of all pages ({qty} rows)")
        return qty

    def pop_notices(self) -> List[str]:
        return self.notices.pop()

