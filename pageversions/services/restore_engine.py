# Last reviewed: 2026-10-18 11:42:19 UTC (User: Teeksss)
from typing import List, Optional
import logging

from sqlalchemy.orm import Session

from ..core.exceptions import PartialRestoreUnsupportedError
from ..models.fields import Page
from ..models.fieldtypes import FieldVersioning
from ..repositories.page_repository import PageStore
from ..repositories.page_version_repository import PageVersionRepository
from ..schemas.page_version import VersionAction
from .asset_versioner import AssetVersioner
from .field_capabilities import FieldCapabilityRegistry
from .notices import VersionNotices
from .snapshot_engine import SnapshotEngine, VersionArg

logger = logging.getLogger(__name__)

# Geçici versiyonların açıklama öneki
TEMP_VERSION_MARKER = "[restore-temp]"

def temp_version_description(version: int) -> str:
    return f"{TEMP_VERSION_MARKER} staging restore of version {version}"

def is_temp_version_description(description: Optional[str]) -> bool:
    return bool(description) and description.startswith(TEMP_VERSION_MARKER)

class RestoreEngine:
    """
    Kayıtlı bir versiyonu canlı sayfaya uygular

    Sıra: (gerekirse) geçici versiyon, restore işareti, dosyalar, alanlar,
    canlı kayıt, işaretin kaldırılması, geçici versiyonun silinmesi.
    """

    def __init__(
        self,
        db: Session,
        page_store: PageStore,
        snapshots: SnapshotEngine,
        repository: PageVersionRepository,
        registry: FieldCapabilityRegistry,
        assets: AssetVersioner,
        notices: VersionNotices
    ):
        self.db = db
        self.page_store = page_store
        self.snapshots = snapshots
        self.repository = repository
        self.registry = registry
        self.assets = assets
        self.notices = notices

    def restore(
        self,
        page: Page,
        version: VersionArg,
        names: Optional[List[str]] = None,
        use_temp_version: Optional[bool] = None
    ) -> Optional[Page]:
        """
        Versiyonu canlı sayfaya geri yükler

        Args:
            page: Canlı sayfa veya geri yüklenecek versiyonun kopyası
            version: Geri yüklenecek versiyon (0 ise sayfanın temsil ettiği)
            names: Kısmi geri yükleme için alan/özellik adları
            use_temp_version: None ise alan türlerine sorulur

        Returns:
            Optional[Page]: Kaydedilmiş canlı sayfa veya versiyon yoksa None

        Raises:
            PartialRestoreUnsupportedError: İstenen adlardan biri versiyonlanamıyor
                veya dosya alanları kısmi geri yüklenemiyorsa
        """
        version = self.snapshots.version_number(page, version)
        if not version or not self.snapshots.allow_page(page):
            return None

        names = list(names or [])
        # Hiçbir şey yazılmadan önce kontrol edilir
        if names:
            unsupported = self.snapshots.unsupported_names(page, names)
            if unsupported or not self.registry.page_supports_partial_version(page, names):
                raise PartialRestoreUnsupportedError(page.id, unsupported or names)

        live = self.page_store.get_fresh(page.id) if page.is_version else page
        if live is None:
            return None

        if page.is_version and page.version_info.version == version and not names:
            source = page
        else:
            source = self.snapshots.get_version(page, version, names or None)
            if source is None:
                return None

        if use_temp_version is None:
            use_temp_version = self.registry.restore_hazard(source, names or None)

        temp_version = 0
        if use_temp_version:
            temp_version = self.snapshots.add_version(
                source, description=temp_version_description(version), names=names or None
            )
            staged = self.snapshots.get_version(live, temp_version, names or None)
            if staged is None:
                logger.error(
                    f"Page {page.id}: unable to load temp version {temp_version} "
                    f"staged from version {version}, restore aborted"
                )
                self.snapshots.delete_version(live, temp_version)
                return None
            source = staged
            logger.info(f"Page {page.id}: staged version {version} as temp version {temp_version}")

        source_version = temp_version or version
        source.version_info.action = VersionAction.RESTORE
        try:
            restored = self._apply(live, source, source_version, version, names)
        except Exception as e:
            # Restore işareti yalnızca uygulama sırasında geçerlidir
            source.version_info.action = VersionAction.NONE
            if temp_version:
                logger.error(
                    f"Page {page.id}: restore of version {version} failed, "
                    f"temp version {temp_version} left in place: {str(e)}"
                )
            raise

        restored.version_info = None

        if temp_version:
            self.snapshots.delete_version(live, temp_version)
        self.cleanup_temp_versions(restored)

        logger.info(f"Restored version {version} of page {page.id}")
        return restored

    def _apply(self, live: Page, source: Page, source_version: int, version: int, names: List[str]) -> Page:
        """Dosyaları ve alanları uygular, kaynağı canlı sayfa olarak kaydeder"""
        # Bazı alan türleri geri yüklenirken dosya durumunu okur; dosyalar önce gelir
        if not names:
            self.assets.restore_from_version(live, source, source_version)

        for field in source.fields:
            if names and field.name not in names:
                continue
            capability = self.snapshots.capability(field)
            strategy = self.snapshots.strategies.get(capability)
            if strategy is None:
                continue
            if capability == FieldVersioning.SELF_MANAGED:
                if not strategy.restore(source, field, source_version):
                    self.notices.page_field_error(source, field, f"Unable to restore from version {version}")
            elif names and self.registry.supports_per_field_asset_versioning(field):
                self.assets.restore_field_from_version(live, source, field, source_version)

        return self.page_store.save(source, allow_version_write=True)

    def cleanup_temp_versions(self, page: Page) -> int:
        """Önceki başarısız geri yüklemelerden kalan geçici versiyonları siler"""
        qty = 0
        for row in self.repository.list_versions(self.db, page.id, "version"):
            if not is_temp_version_description(row.description):
                continue
            if self.snapshots.delete_version(page, row.version):
                logger.info(f"Page {page.id}: removed stale temp version {row.version}")
                qty += 1
        return qty
