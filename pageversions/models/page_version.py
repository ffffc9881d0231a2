# Last reviewed: 2026-10-18 10:15:48 UTC (User: Teeksss)
from sqlalchemy import Column, Integer, DateTime, Text, Index
from sqlalchemy.dialects import mysql
from datetime import datetime, timezone

from ..db.database import Base

# MySQL'de MEDIUMTEXT, diğer veritabanlarında TEXT
LongText = Text().with_variant(mysql.MEDIUMTEXT(), "mysql")

def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)

class PageVersion(Base):
    """Sayfa versiyonu, her (sayfa, versiyon) için bir satır"""
    __tablename__ = "versions"

    version = Column(Integer, primary_key=True, autoincrement=False)
    page_id = Column("object_id", Integer, primary_key=True, autoincrement=False)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    created_by = Column(Integer, nullable=False, default=0, index=True)
    modified_by = Column(Integer, nullable=False, default=0)
    description = Column(Text, nullable=True)
    data = Column(LongText, nullable=False)  # JSON: yerel özellik adı -> değer

    def __repr__(self):
        return f"<PageVersion(page_id={self.page_id}, version={self.version})>"

class PageFieldVersion(Base):
    """Bir alanın belirli bir versiyondaki serileştirilmiş değeri"""
    __tablename__ = "version_values"

    page_id = Column("object_id", Integer, primary_key=True, autoincrement=False)
    field_id = Column(Integer, primary_key=True, autoincrement=False)
    version = Column(Integer, primary_key=True, autoincrement=False)
    data = Column(LongText, nullable=False)

    __table_args__ = (
        Index("ix_version_values_field_id", "field_id"),
        Index("ix_version_values_version", "version"),
    )

    def __repr__(self):
        return f"<PageFieldVersion(page_id={self.page_id}, field_id={self.field_id}, version={self.version})>"
