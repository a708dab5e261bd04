from folio.db.models.content import ContentHistory, ContentItem, DocSection
from folio.db.models.setting import SiteSetting

__all__ = [
    "ContentItem",
    "ContentHistory",
    "DocSection",
    "SiteSetting",
]
