# Last reviewed: 2026-10-18 11:06:12 UTC (User: Teeksss)
import logging
from typing import List, Optional

from ..models.fields import Field, Page

logger = logging.getLogger(__name__)

class VersionNotices:
    """
    Versiyon işlemleri sırasında oluşan, işlemi durdurmayan uyarılar

    Uyarılar hem loglanır hem de çağıranın (ör. API yanıtı) göstermesi
    için biriktirilir.
    """

    def __init__(self):
        self.messages: List[str] = []

    def page_error(self, page: Page, message: str) -> bool:
        text = f"Page {page.id}: {message}"
        logger.warning(text)
        self.messages.append(text)
        return False

    def page_field_error(self, page: Page, field: Field, message: str) -> bool:
        text = f"Page {page.id} field {field.name}: {message}"
        logger.warning(text)
        self.messages.append(text)
        return False

    def pop(self) -> List[str]:
        messages, self.messages = self.messages, []
        return messages

    def __len__(self):
        return len(self.messages)

    def __iter__(self):
        return iter(self.messages)

    def last(self) -> Optional[str]:
        return self.messages[-1] if self.messages else None
