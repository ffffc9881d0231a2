# Last reviewed: 2026-10-18 11:20:37 UTC (User: Teeksss)
import os
import re
import logging
from dataclasses import dataclass, field as dataclass_field
from typing import Iterable, List, Optional

from ..models.fields import Field, Page
from ..repositories.page_repository import PageStore
from ..utils import files
from ..utils.config import VERSION_FILES_DIR_PREFIX
from .field_capabilities import FieldCapabilityRegistry
from .notices import VersionNotices

logger = logging.getLogger(__name__)

@dataclass
class FileCopyResult:
    """Bir kopyalama işleminin sonucu"""
    copied: List[str] = dataclass_field(default_factory=list)
    failed: List[str] = dataclass_field(default_factory=list)

    def add(self, copied: Iterable[str], failed: Iterable[str]) -> "FileCopyResult":
        self.copied.extend(copied)
        self.failed.extend(failed)
        return self

    @property
    def success(self) -> bool:
        return not self.failed

class AssetVersioner:
    """
    Sayfa dosya dizinini versiyonlarla tutarlı tutar

    Versiyon dizini canlı dizinin içinde <önek><n>/ olarak durur. Dosya
    alanlarının tamamı alan bazında kopyalamayı destekliyorsa yalnızca
    alanların dosyaları, aksi halde tüm dizin kopyalanır.
    """

    def __init__(
        self,
        page_store: PageStore,
        registry: FieldCapabilityRegistry,
        notices: VersionNotices,
        prefix: str = VERSION_FILES_DIR_PREFIX
    ):
        self.page_store = page_store
        self.registry = registry
        self.notices = notices
        self.prefix = prefix
        self._version_dir = re.compile(rf"^{re.escape(prefix)}(\d+)$")

    # --- yollar ---

    def live_files_path(self, page: Page) -> str:
        return self.page_store.files_path(page)

    def version_files_path(self, page: Page, version: int) -> str:
        return os.path.join(self.live_files_path(page), f"{self.prefix}{int(version)}") + os.sep

    def page_files_path(self, page: Page) -> str:
        """Versiyon kopyası için versiyon dizini, canlı sayfa için canlı dizin"""
        if page.is_version:
            return self.version_files_path(page, page.version_info.version)
        return self.live_files_path(page)

    def has_files(self, page: Page) -> bool:
        return os.path.isdir(self.page_files_path(page))

    def version_numbers_on_disk(self, page: Page) -> List[int]:
        path = self.live_files_path(page)
        if not os.path.isdir(path):
            return []
        numbers = []
        for name in os.listdir(path):
            match = self._version_dir.match(name)
            if match and os.path.isdir(os.path.join(path, name)):
                numbers.append(int(match.group(1)))
        return sorted(numbers)

    # --- kopyalama ---

    def copy_to_version(self, page: Page, version: int, names: Optional[Iterable[str]] = None) -> FileCopyResult:
        """
        Sayfanın dosyalarını versiyon dizinine kopyalar

        Args:
            page: Canlı sayfa veya versiyon kopyası
            version: Hedef versiyon
            names: Kısmi versiyon için alan adları

        Returns:
            FileCopyResult: Kopyalanan ve kopyalanamayan dosyalar
        """
        if not self.has_files(page):
            return FileCopyResult()
        if self.registry.use_files_by_field(page):
            result = FileCopyResult()
            for field in self.registry.file_fields(page, names):
                self.copy_field_to_version(page, field, version, result)
            return result
        return self.copy_dir_to_version(page, version)

    def copy_dir_to_version(self, page: Page, version: int) -> FileCopyResult:
        """Dizindeki tüm dosyaları (alt dizinler hariç) versiyon dizinine kopyalar"""
        source = self.page_files_path(page)
        target = self.version_files_path(page, version)
        result = FileCopyResult()
        if not os.path.isdir(source):
            return result
        if files.same_path(source, target):
            logger.debug(f"Page {page.id} version {version}: files already in place")
            return result
        result.add(*files.copy_files(source, target))
        return self._report(page, result, f"copy files to version {version}")

    def copy_field_to_version(
        self,
        page: Page,
        field: Field,
        version: int,
        result: Optional[FileCopyResult] = None
    ) -> FileCopyResult:
        """Yalnızca alanın değerinde adı geçen dosyaları kopyalar"""
        result = result if result is not None else FileCopyResult()
        source = self.page_files_path(page)
        target = self.version_files_path(page, version)
        names = field.type.get_files(page, field)
        if not names or not os.path.isdir(source) or files.same_path(source, target):
            return result
        copied, failed = files.copy_files(source, target, names)
        result.add(copied, failed)
        if failed:
            self.notices.page_field_error(
                page, field, f"{len(failed)} file(s) could not be copied to version {version}"
            )
        return result

    # --- geri yükleme ---

    def restore_from_version(
        self,
        live: Page,
        source: Page,
        version: int,
        names: Optional[Iterable[str]] = None
    ) -> FileCopyResult:
        """
        Versiyon dosyalarını canlı dizine geri yükler

        Args:
            live: Canlı sayfa (silinecek mevcut dosyalar için)
            source: Versiyonun yüklendiği kopya (geri gelecek dosyalar için)
            version: Dosyaların alınacağı versiyon dizini
        """
        if self.registry.use_files_by_field(source):
            result = FileCopyResult()
            for field in self.registry.file_fields(source, names):
                self.restore_field_from_version(live, source, field, version, result)
            return result
        return self.restore_dir_from_version(live, version)

    def restore_dir_from_version(self, live: Page, version: int) -> FileCopyResult:
        """Canlı dizindeki dosyaları boşaltır ve versiyon dizinini içe aktarır"""
        source = self.version_files_path(live, version)
        target = self.live_files_path(live)
        result = FileCopyResult()
        if not os.path.isdir(source):
            return result
        files.ensure_dir(target)
        result.failed.extend(files.empty_dir(target))
        result.add(*files.copy_files(source, target))
        return self._report(live, result, f"restore files from version {version}")

    def restore_field_from_version(
        self,
        live: Page,
        source: Page,
        field: Field,
        version: int,
        result: Optional[FileCopyResult] = None
    ) -> FileCopyResult:
        """Alanın canlı dosyalarını kaldırır, versiyondaki dosyalarını kopyalar"""
        result = result if result is not None else FileCopyResult()
        target = self.live_files_path(live)
        version_path = self.version_files_path(live, version)
        wanted = field.type.get_files(source, field)
        current = [name for name in field.type.get_files(live, field) if name not in wanted]
        result.failed.extend(files.remove_files(target, current))
        if wanted and os.path.isdir(version_path):
            files.ensure_dir(target)
            copied, failed = files.copy_files(version_path, target, wanted)
            result.add(copied, failed)
        if result.failed:
            self.notices.page_field_error(
                live, field, f"{len(result.failed)} file(s) could not be restored from version {version}"
            )
        return result

    # --- silme ---

    def delete_version_assets(self, page: Page, version: int) -> bool:
        """Versiyon dizinini tamamen siler; dizin yoksa False"""
        path = self.version_files_path(page, version)
        if not os.path.isdir(path):
            return False
        removed = files.rmdir(path, recursive=True)
        if not removed:
            self.notices.page_error(page, f"Unable to remove files for version {version}")
        return removed

    def delete_all_version_assets(self, page: Page) -> int:
        qty = 0
        for version in self.version_numbers_on_disk(page):
            if self.delete_version_assets(page, version):
                qty += 1
        return qty

    def total_version_size(self, page: Page, version: int = 0) -> int:
        """
        Versiyon dizininin toplam boyutu (bayt)

        version 0 ise sayfanın kendi dosya dizini ölçülür.
        """
        if version:
            return files.dir_size(self.version_files_path(page, version))
        path = self.page_files_path(page)
        if page.is_version:
            return files.dir_size(path)
        return sum(
            os.path.getsize(os.path.join(path, name)) for name in files.list_files(path)
        )

    def _report(self, page: Page, result: FileCopyResult, action: str) -> FileCopyResult:
        if result.failed:
            self.notices.page_error(page, f"Unable to {action}: {len(result.failed)} file(s) failed")
        return result
