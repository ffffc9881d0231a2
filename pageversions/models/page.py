# Last reviewed: 2026-10-18 10:15:48 UTC (User: Teeksss)
from sqlalchemy import Column, Integer, String, DateTime

from ..db.database import Base
from .page_version import LongText, utcnow

class PageRecord(Base):
    """Canlı sayfa tablosu; alan değerleri data sütununda JSON olarak tutulur"""
    __tablename__ = "pages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    parent_id = Column(Integer, nullable=False, default=0, index=True)
    template = Column(String(128), nullable=False, index=True)
    name = Column(String(255), nullable=False, default="")
    status = Column(Integer, nullable=False, default=1)
    sort = Column(Integer, nullable=False, default=0)
    created = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modified = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    published = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(Integer, nullable=False, default=0)
    modified_by = Column(Integer, nullable=False, default=0)
    data = Column(LongText, nullable=False, default="{}")

    def __repr__(self):
        return f"<PageRecord(id={self.id}, template={self.template}, name={self.name})>"
