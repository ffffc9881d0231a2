# Last reviewed: 2026-10-18 09:12:40 UTC (User: Teeksss)
import logging
import sys
from .config import LOG_LEVEL, LOG_FORMAT

logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, stream=sys.stdout)

# Gürültülü kütüphanelerin log seviyesini ayarla
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

def get_logger(name):
    """İsimlendirilmiş bir logger instance'ı döndürür."""
    logger = logging.getLogger(name)
    return logger
