# Last reviewed: 2026-10-18 09:40:17 UTC (User: Teeksss)
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from ..utils.config import DATABASE_URL, DATABASE_ECHO
from ..utils.logger import get_logger

logger = get_logger(__name__)

def build_engine(url: str = DATABASE_URL, echo: bool = DATABASE_ECHO):
    """Verilen URL için SQLAlchemy engine oluşturur"""
    connect_args = {}
    if url.startswith("sqlite"):
        # SQLite bağlantısı farklı thread'lerden kullanılabilsin
        connect_args["check_same_thread"] = False
    return create_engine(url, echo=echo, future=True, connect_args=connect_args)

# SQLAlchemy engine ve session
try:
    engine = build_engine()
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    logger.info("Database engine created")
except Exception as e:
    logger.critical(f"Database engine could not be created: {e}")
    raise

# DB session dependency - FastAPI'nin dependency injection sistemi için
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# SQLAlchemy model inheritance için Base sınıfı
Base = declarative_base()
