# Last reviewed: 2026-10-18 11:31:05 UTC (User: Teeksss)
from typing import Any, Callable, Dict, Iterable, List, Optional, Union
import json
import logging

from sqlalchemy.orm import Session

from ..core.exceptions import DuplicateVersionError, VersionAddRetryExhaustedError
from ..models.fields import NATIVE_PROPERTIES, Field, Page, from_timestamp, to_timestamp
from ..models.fieldtypes import FieldVersioning
from ..models.page_version import PageVersion
from ..repositories.page_repository import PageStore
from ..repositories.page_version_repository import PageVersionRepository
from ..schemas.page_version import VersionInfo
from ..utils.config import VERSION_ADD_RETRY, VERSION_DEFAULT_SORT
from .asset_versioner import AssetVersioner
from .field_capabilities import FieldCapabilityRegistry, FieldVersioningStrategy, build_strategies
from .notices import VersionNotices

logger = logging.getLogger(__name__)

VersionArg = Union[int, str, VersionInfo, None]

PARTIAL_FALLBACK_NOTICE = "Partial version not supported (file fields), saved full version"

class SnapshotEngine:
    """
    Sayfa versiyonlarını oluşturur, yükler ve listeler

    Sayfanın yerel özellikleri versions.data içinde, alan değerleri
    version_values tablosunda (veya alan türünün kendi deposunda)
    saklanır; dosyalar AssetVersioner ile kopyalanır.
    """

    def __init__(
        self,
        db: Session,
        page_store: PageStore,
        repository: PageVersionRepository,
        registry: FieldCapabilityRegistry,
        assets: AssetVersioner,
        notices: VersionNotices,
        capability: Optional[Callable[[Field], FieldVersioning]] = None,
        allow_page: Optional[Callable[[Page], bool]] = None,
        max_attempts: int = VERSION_ADD_RETRY,
        user_id: int = 0
    ):
        self.db = db
        self.page_store = page_store
        self.repository = repository
        self.registry = registry
        self.assets = assets
        self.notices = notices
        self.capability = capability or registry.supports_versioning
        self.allow_page = allow_page or (lambda page: True)
        self.max_attempts = max_attempts
        self.user_id = user_id
        self.strategies: Dict[FieldVersioning, FieldVersioningStrategy] = build_strategies(
            repository, db, notices
        )

    def strategy(self, field: Field) -> Optional[FieldVersioningStrategy]:
        """Alanın kabiliyetine göre strateji; versiyonlanamıyorsa None"""
        return self.strategies.get(self.capability(field))

    def unsupported_names(self, page: Page, names: Iterable[str]) -> List[str]:
        """Yerel özellik ya da versiyonlanabilir alan olmayan adlar"""
        unsupported = []
        for name in names:
            if name in NATIVE_PROPERTIES:
                continue
            field = page.template.get_field(name)
            if field is None or self.capability(field) == FieldVersioning.NO:
                unsupported.append(name)
        return unsupported

    def version_number(self, page: Page, version: VersionArg = 0) -> int:
        """
        Versiyon argümanını sayıya çevirir

        int, "2", "v2" veya VersionInfo kabul edilir. 0/None verilirse
        sayfa bir versiyon kopyasıysa onun numarası, değilse 0 döner.
        """
        if isinstance(version, VersionInfo):
            version = version.version
        elif isinstance(version, str):
            version = version.strip().lower()
            if version.startswith("v"):
                version = version[1:]
            version = int(version) if version.isdigit() else 0
        if not version:
            return page.version_info.version if page.is_version else 0
        return int(version)

    def next_version_number(self, page: Page) -> int:
        return self.repository.get_next_version_number(self.db, page.id)

    def native_properties(self, page: Page, names: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        """Versiyona yazılacak yerel özellikler (zamanlar unix saniye olarak)"""
        names = set(names) if names else None
        data = {}
        for name in NATIVE_PROPERTIES:
            if names is not None and name not in names:
                continue
            if name == "template":
                data[name] = page.template.name
                continue
            data[name] = to_timestamp(page.properties.get(name))
        return data

    # --- oluşturma ---

    def add_version(
        self,
        page: Page,
        description: str = "",
        names: Optional[List[str]] = None,
        user_id: Optional[int] = None
    ) -> int:
        """
        Sayfanın mevcut halinden yeni bir versiyon oluşturur

        Numara ayrılırken başka bir istekle çakışılırsa (DuplicateVersionError)
        bir sonraki boş numara ile yeniden denenir.

        Returns:
            int: Oluşturulan versiyon numarası, sayfa versiyonlanamıyorsa 0

        Raises:
            VersionAddRetryExhaustedError: Denemeler tükenirse
        """
        if not self.allow_page(page):
            return 0

        user_id = self.user_id if user_id is None else user_id
        names = self._partial_names(page, names)
        data = self.native_properties(page, names)
        version = self.next_version_number(page)

        for attempt in range(1, self.max_attempts + 1):
            try:
                self.repository.insert_version(self.db, page.id, version, data, description, user_id)
                break
            except DuplicateVersionError:
                logger.info(f"Page {page.id}: version {version} taken (attempt {attempt}), retrying")
                version = max(version + 1, self.next_version_number(page))
        else:
            raise VersionAddRetryExhaustedError(page.id, self.max_attempts)

        self._save_values(page, version, names)
        logger.info(f"Added version {version} for page {page.id}")
        return version

    def save_version(
        self,
        page: Page,
        version: VersionArg = 0,
        description: Optional[str] = None,
        names: Optional[List[str]] = None,
        user_id: Optional[int] = None
    ) -> int:
        """
        Sayfanın mevcut halini belirli bir versiyon slotuna kaydeder

        Slot yoksa oluşturulur, varsa created/created_by korunur.
        version 0 ise sayfanın temsil ettiği versiyon kullanılır; sayfa
        bir versiyon değilse add_version gibi davranır.

        Returns:
            int: Kullanılan versiyon numarası
        """
        version = self.version_number(page, version)
        if not version:
            return self.add_version(page, description or "", names, user_id)
        if not self.allow_page(page):
            return 0

        user_id = self.user_id if user_id is None else user_id
        names = self._partial_names(page, names)
        self.repository.upsert_version(
            self.db, page.id, version, self.native_properties(page, names), description, user_id
        )
        self._save_values(page, version, names)
        return version

    def _partial_names(self, page: Page, names: Optional[List[str]]) -> Optional[List[str]]:
        """Kısmi versiyon dosya alanları yüzünden desteklenmiyorsa tam versiyona döner"""
        if not names:
            return None
        if not self.registry.page_supports_partial_version(page, names):
            self.notices.page_error(page, PARTIAL_FALLBACK_NOTICE)
            return None
        return list(names)

    def _save_values(self, page: Page, version: int, names: Optional[List[str]]) -> None:
        # Kısmi versiyonda dosya alanı yoksa dosya kopyalanmaz
        if not names or self.registry.file_fields(page, names):
            self.assets.copy_to_version(page, version, names)

        for field in page.fields:
            if names and field.name not in names:
                continue
            strategy = self.strategy(field)
            if strategy is not None:
                strategy.save(page, field, version)

    # --- okuma ---

    def version_info(self, row: PageVersion) -> VersionInfo:
        try:
            properties = json.loads(row.data or "{}")
        except ValueError:
            properties = {}
        return VersionInfo(
            version=row.version,
            page_id=row.page_id,
            description=row.description or "",
            created=from_timestamp(row.created),
            modified=from_timestamp(row.modified),
            created_by=row.created_by or 0,
            modified_by=row.modified_by or 0,
            properties=properties,
        )

    def get_version_info(self, page: Page, version: VersionArg) -> Optional[VersionInfo]:
        version = self.version_number(page, version)
        if not version:
            return None
        row = self.repository.get_version(self.db, page.id, version)
        return self.version_info(row) if row is not None else None

    def load_version(
        self,
        page: Page,
        version: VersionArg,
        names: Optional[Iterable[str]] = None,
        raw: bool = False
    ) -> bool:
        """
        Versiyonu verilen sayfa nesnesine yükler

        Versiyonda değeri bulunmayan alanlar sayfadaki mevcut değerini korur.

        Args:
            page: Yüklenecek (genellikle ayrık kopya) sayfa
            version: Versiyon
            names: Yalnızca bu alan/özellikler
            raw: Alan değerleri wakeup yapılmadan (sleep hali) yüklenir

        Returns:
            bool: Versiyon satırı bulunduysa True
        """
        version = self.version_number(page, version)
        row = self.repository.get_version(self.db, page.id, version) if version else None
        if row is None:
            return False

        names = set(names) if names else None
        info = self.version_info(row)
        for name, value in (info.properties or {}).items():
            if name in ("id", "template"):
                continue
            if names is not None and name not in names:
                continue
            page.set_property(name, value, track=False)
        page.version_info = info

        for field in page.fields:
            if names is not None and field.name not in names:
                continue
            strategy = self.strategy(field)
            if strategy is None:
                continue
            found, value = strategy.read(page, field, version, raw)
            if found:
                page.values[field.name] = value

        page.reset_changes()
        return True

    def get_version(
        self,
        page: Page,
        version: VersionArg,
        names: Optional[Iterable[str]] = None
    ) -> Optional[Page]:
        """
        Versiyonu yüklenmiş ayrık bir sayfa kopyası döndürür

        Returns:
            Optional[Page]: Kopya veya versiyon yoksa None
        """
        if not self.allow_page(page):
            return None
        version = self.version_number(page, version)
        if not version:
            return None
        base = self.page_store.get_fresh(page.id) if page.is_version else page
        if base is None:
            return None
        copy = base.copy()
        copy.version_info = None
        if not self.load_version(copy, version, names):
            return None
        return copy

    def get_versions(
        self,
        page: Page,
        sort: str = VERSION_DEFAULT_SORT,
        get_info: bool = False
    ) -> List[Union[Page, VersionInfo]]:
        """
        Sayfanın tüm versiyonları

        Args:
            page: Sayfa
            sort: created, -created, modified, -modified, version, -version
            get_info: True ise sayfa kopyaları yerine VersionInfo listesi
        """
        if not self.allow_page(page):
            return []
        rows = self.repository.list_versions(self.db, page.id, sort)
        if get_info:
            return [self.version_info(row) for row in rows]
        versions = []
        for row in rows:
            copy = self.get_version(page, row.version)
            if copy is not None:
                versions.append(copy)
        return versions

    def get_field_version(self, page: Page, field_name: str, version: VersionArg, raw: bool = False) -> Any:
        """Tek bir alanın versiyondaki değeri; yoksa None"""
        field = page.template.get_field(field_name)
        version = self.version_number(page, version)
        if field is None or not version:
            return None
        strategy = self.strategy(field)
        if strategy is None:
            return None
        found, value = strategy.read(page, field, version, raw)
        return value if found else None

    # --- silme ---

    def delete_version(self, page: Page, version: VersionArg) -> bool:
        """
        Versiyonu, alan değerlerini ve dosya dizinini siler

        Returns:
            bool: Versiyon satırı silindiyse True
        """
        version = self.version_number(page, version)
        if not version:
            return False
        self._delete_self_managed(page, version)
        qty = self.repository.delete_version(self.db, page.id, version)
        self.assets.delete_version_assets(page, version)
        if qty:
            logger.info(f"Deleted version {version} of page {page.id}")
        return qty > 0

    def delete_all_versions(self, page: Page) -> int:
        """
        Sayfanın tüm versiyonlarını siler

        Returns:
            int: Silinen satır sayısı
        """
        for row in self.repository.list_versions(self.db, page.id, "version"):
            self._delete_self_managed(page, row.version)
        qty = self.repository.delete_all_versions(self.db, page.id)
        self.assets.delete_all_version_assets(page)
        if qty:
            logger.info(f"Deleted all versions of page {page.id} ({qty} rows)")
        return qty

    def _delete_self_managed(self, page: Page, version: int) -> None:
        for field in page.fields:
            if self.capability(field) != FieldVersioning.SELF_MANAGED:
                continue
            self.strategies[FieldVersioning.SELF_MANAGED].delete(page, field, version)
