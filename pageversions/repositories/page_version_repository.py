# Last reviewed: 2026-10-18 10:41:27 UTC (User: Teeksss)
from typing import List, Optional, Dict, Any
import json
import logging

from sqlalchemy import select, insert, update, delete, func, and_, asc, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.exceptions import DuplicateVersionError, PayloadTooLargeError
from ..models.page_version import PageVersion, PageFieldVersion, utcnow
from ..utils.config import VERSION_MAX_DATA_LENGTH

logger = logging.getLogger(__name__)

# Listeleme sıralama seçenekleri
VERSION_SORTS = {
    "created": (asc(PageVersion.created), asc(PageVersion.version)),
    "-created": (desc(PageVersion.created), desc(PageVersion.version)),
    "modified": (asc(PageVersion.modified), asc(PageVersion.version)),
    "-modified": (desc(PageVersion.modified), desc(PageVersion.version)),
    "version": (asc(PageVersion.version),),
    "-version": (desc(PageVersion.version),),
}

# update_version_property ile değiştirilebilecek sütunlar
UPDATABLE_PROPERTIES = {"description", "data", "created", "modified", "created_by", "modified_by"}

# Versiyon 1 taslak (draft) kullanımı için ayrılmıştır
RESERVED_VERSION = 1

class PageVersionRepository:
    """
    Sayfa versiyonu repository sınıfı

    versions ve version_values tabloları üzerinde yalnızca CRUD işlemleri yapar.
    """

    def __init__(self, max_data_length: int = VERSION_MAX_DATA_LENGTH):
        self.max_data_length = max_data_length

    # --- versions ---

    def get_next_version_number(self, db: Session, page_id: int) -> int:
        """
        Sayfa için bir sonraki versiyon numarasını döndürür

        Args:
            db: Veritabanı oturumu
            page_id: Sayfa ID'si

        Returns:
            int: max(version) + 1, sonuç 1 ise 2
        """
        current = db.execute(
            select(func.max(PageVersion.version)).where(PageVersion.page_id == page_id)
        ).scalar()
        version = int(current or 0) + 1
        if version == RESERVED_VERSION:
            version += 1
        return version

    def insert_version(
        self,
        db: Session,
        page_id: int,
        version: int,
        data: Dict[str, Any],
        description: str = "",
        user_id: int = 0
    ) -> bool:
        """
        Yeni bir versiyon satırı ekler

        Raises:
            DuplicateVersionError: (page_id, version) zaten mevcutsa
        """
        now = utcnow()
        values = {
            "version": version,
            "object_id": page_id,
            "created": now,
            "modified": now,
            "created_by": user_id,
            "modified_by": user_id,
            "description": description or "",
            "data": json.dumps(data),
        }
        try:
            db.execute(insert(PageVersion.__table__).values(**values))
            db.commit()
            return True
        except IntegrityError:
            db.rollback()
            logger.info(f"Version {version} already exists for page {page_id}")
            raise DuplicateVersionError(page_id, version)

    def upsert_version(
        self,
        db: Session,
        page_id: int,
        version: int,
        data: Dict[str, Any],
        description: Optional[str] = None,
        user_id: int = 0
    ) -> None:
        """
        Versiyon satırını ekler, varsa yalnızca data/modified/modified_by
        (ve verilmişse description) sütunlarını günceller
        """
        now = utcnow()
        values = {
            "version": version,
            "object_id": page_id,
            "created": now,
            "modified": now,
            "created_by": user_id,
            "modified_by": user_id,
            "description": description or "",
            "data": json.dumps(data),
        }
        update_columns = ["data", "modified", "modified_by"]
        if description is not None:
            update_columns.append("description")
        self._upsert(db, PageVersion.__table__, values, ["version", "object_id"], update_columns)

    def get_version(self, db: Session, page_id: int, version: int) -> Optional[PageVersion]:
        """
        Belirli bir versiyon satırını getirir

        Returns:
            Optional[PageVersion]: Versiyon veya None
        """
        return db.execute(
            select(PageVersion).where(
                and_(PageVersion.page_id == page_id, PageVersion.version == version)
            )
        ).scalar_one_or_none()

    def list_versions(self, db: Session, page_id: int, sort: str = "-created") -> List[PageVersion]:
        """
        Sayfaya ait tüm versiyonları getirir

        Args:
            db: Veritabanı oturumu
            page_id: Sayfa ID'si
            sort: created, -created, modified, -modified, version, -version

        Returns:
            List[PageVersion]: Versiyon listesi
        """
        order_by = VERSION_SORTS.get(sort, VERSION_SORTS["-created"])
        stmt = select(PageVersion).where(PageVersion.page_id == page_id).order_by(*order_by)
        return list(db.execute(stmt).scalars().all())

    def count_versions(self, db: Session, page_id: int) -> int:
        return int(db.execute(
            select(func.count()).select_from(PageVersion).where(PageVersion.page_id == page_id)
        ).scalar() or 0)

    def get_page_ids_with_versions(self, db: Session) -> List[int]:
        """En az bir versiyonu olan sayfa ID'leri"""
        rows = db.execute(select(PageVersion.page_id).distinct().order_by(PageVersion.page_id))
        return [int(page_id) for page_id in rows.scalars().all()]

    def update_version_property(self, db: Session, page_id: int, version: int, name: str, value: Any) -> bool:
        """
        Versiyon satırındaki tek bir sütunu günceller

        Raises:
            ValueError: Bilinmeyen sütun veya data için sözlük olmayan değer
        """
        if name not in UPDATABLE_PROPERTIES:
            raise ValueError(f"Unknown property: {name}")
        if name == "data":
            if not isinstance(value, dict):
                raise ValueError("Value must be a dict when setting data")
            value = json.dumps(value)
        result = db.execute(
            update(PageVersion)
            .where(and_(PageVersion.page_id == page_id, PageVersion.version == version))
            .values({name: value})
        )
        db.commit()
        return result.rowcount > 0

    def delete_version(self, db: Session, page_id: int, version: int) -> int:
        """
        Versiyonu ve ona ait tüm alan değerlerini siler

        Returns:
            int: Silinen satır sayısı
        """
        qty = self.delete_all_field_values_for_version(db, page_id, version, commit=False)
        result = db.execute(
            delete(PageVersion).where(
                and_(PageVersion.page_id == page_id, PageVersion.version == version)
            )
        )
        db.commit()
        return qty + result.rowcount

    def delete_all_versions(self, db: Session, page_id: int) -> int:
        """
        Sayfaya ait tüm versiyonları ve alan değerlerini siler

        Returns:
            int: Silinen satır sayısı
        """
        qty = 0
        for model in (PageFieldVersion, PageVersion):
            result = db.execute(delete(model).where(model.page_id == page_id))
            qty += result.rowcount
        db.commit()
        return qty

    # --- version_values ---

    def get_field_value(self, db: Session, page_id: int, field_id: int, version: int) -> Optional[str]:
        """
        Alanın versiyondaki serileştirilmiş (JSON) değerini getirir

        Returns:
            Optional[str]: JSON metni veya kayıt yoksa None
        """
        return db.execute(
            select(PageFieldVersion.data).where(
                and_(
                    PageFieldVersion.page_id == page_id,
                    PageFieldVersion.field_id == field_id,
                    PageFieldVersion.version == version
                )
            )
        ).scalar_one_or_none()

    def set_field_value(self, db: Session, page_id: int, field_id: int, version: int, payload: str) -> bool:
        """
        Alanın versiyondaki değerini ekler veya günceller

        Raises:
            PayloadTooLargeError: payload sütunun maksimum boyutunu aşıyorsa
        """
        size = len(payload.encode("utf-8"))
        if size > self.max_data_length:
            logger.warning(
                f"Page {page_id} field {field_id} version {version}: "
                f"payload of {size} bytes exceeds {self.max_data_length}"
            )
            raise PayloadTooLargeError(page_id, field_id, size, self.max_data_length)
        values = {"object_id": page_id, "field_id": field_id, "version": version, "data": payload}
        self._upsert(db, PageFieldVersion.__table__, values, ["object_id", "field_id", "version"], ["data"])
        return True

    def delete_field_value(self, db: Session, page_id: int, field_id: int, version: int) -> bool:
        result = db.execute(
            delete(PageFieldVersion).where(
                and_(
                    PageFieldVersion.page_id == page_id,
                    PageFieldVersion.field_id == field_id,
                    PageFieldVersion.version == version
                )
            )
        )
        db.commit()
        return result.rowcount > 0

    def delete_all_field_values_for_version(self, db: Session, page_id: int, version: int, commit: bool = True) -> int:
        result = db.execute(
            delete(PageFieldVersion).where(
                and_(PageFieldVersion.page_id == page_id, PageFieldVersion.version == version)
            )
        )
        if commit:
            db.commit()
        return result.rowcount

    def get_version_field_ids(self, db: Session, page_id: int, version: int) -> List[int]:
        """Versiyonda değeri saklanan alan ID'leri"""
        rows = db.execute(
            select(PageFieldVersion.field_id).where(
                and_(PageFieldVersion.page_id == page_id, PageFieldVersion.version == version)
            ).order_by(PageFieldVersion.field_id)
        )
        return [int(field_id) for field_id in rows.scalars().all()]

    # --- yardımcılar ---

    def _upsert(self, db: Session, table, values: Dict[str, Any], keys: List[str], update_columns: List[str]) -> None:
        """Veritabanı türüne göre INSERT ... ON CONFLICT/ON DUPLICATE KEY UPDATE"""
        dialect = db.get_bind().dialect.name

        if dialect in ("sqlite", "postgresql"):
            if dialect == "sqlite":
                from sqlalchemy.dialects.sqlite import insert as dialect_insert
            else:
                from sqlalchemy.dialects.postgresql import insert as dialect_insert
            stmt = dialect_insert(table).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=keys,
                set_={column: stmt.excluded[column] for column in update_columns}
            )
        elif dialect in ("mysql", "mariadb"):
            from sqlalchemy.dialects.mysql import insert as dialect_insert
            stmt = dialect_insert(table).values(**values)
            stmt = stmt.on_duplicate_key_update(
                **{column: stmt.inserted[column] for column in update_columns}
            )
        else:
            # Genel yol: önce güncelle, satır yoksa ekle
            conditions = [table.c[key] == values[key] for key in keys]
            result = db.execute(
                table.update().where(and_(*conditions)).values(
                    {column: values[column] for column in update_columns}
                )
            )
            if result.rowcount == 0:
                db.execute(table.insert().values(**values))
            db.commit()
            return

        try:
            db.execute(stmt)
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(f"Error upserting into {table.name}: {str(e)}")
            raise
