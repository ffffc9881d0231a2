# Last reviewed: 2026-10-18 09:40:17 UTC (User: Teeksss)
import logging

from .database import engine as default_engine, Base

logger = logging.getLogger(__name__)

def init_db(engine=None) -> None:
    """
    Veritabanı şemasını oluşturur (pages, versions, version_values)
    """
    # Modellerin Base.metadata'ya kaydolması için import gerekli
    from ..models import page, page_version  # noqa: F401

    engine = engine or default_engine
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

def drop_db(engine=None) -> None:
    """Tüm versiyon ve sayfa tablolarını siler"""
    from ..models import page, page_version  # noqa: F401

    engine = engine or default_engine
    Base.metadata.drop_all(bind=engine)
    logger.info("Database tables dropped")
