# Last reviewed: 2026-10-18 09:12:40 UTC (User: Teeksss)
import os
from typing import List

# Veritabanı bağlantı ayarları
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./pageversions.db")
DATABASE_ECHO = os.getenv("DATABASE_ECHO", "false").lower() == "true"

# Sayfa dosyalarının (asset) tutulduğu kök dizin
FILES_ROOT = os.getenv("FILES_ROOT", os.path.abspath("./files"))

# Versiyon dosya dizini öneki, ör. <files>/1234/v2/
VERSION_FILES_DIR_PREFIX = os.getenv("VERSION_FILES_DIR_PREFIX", "v")

# MEDIUMTEXT sütununun maksimum uzunluğu
VERSION_MAX_DATA_LENGTH = int(os.getenv("VERSION_MAX_DATA_LENGTH", "16777215"))

# Versiyon numarası çakışmasında en fazla kaç kez tekrar denenecek
VERSION_ADD_RETRY = int(os.getenv("VERSION_ADD_RETRY", "10"))

# Varsayılan versiyon listeleme sırası
VERSION_DEFAULT_SORT = os.getenv("VERSION_DEFAULT_SORT", "-created")

def parse_deny_page_types() -> List[str]:
    """
    VERSION_DENY_PAGE_TYPES çevre değişkenini ayrıştırır.

    Format: virgülle ayrılmış sayfa türleri, ör. "user,role,permission,language"
    """
    value = os.getenv("VERSION_DENY_PAGE_TYPES", "user,role,permission,language")
    return [item.strip().lower() for item in value.split(",") if item.strip()]

VERSION_DENY_PAGE_TYPES = parse_deny_page_types()

# Loglama ayarları
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
