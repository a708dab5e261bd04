from folio.db.repositories.content_repository import ContentRepository
from folio.db.repositories.setting_repository import SettingRepository

__all__ = [
    "ContentRepository",
    "SettingRepository",
]
