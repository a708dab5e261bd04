from folio.domains.settings.schemas import SiteSettings, SiteSettingsUpdate

__all__ = [
    "SiteSettings",
    "SiteSettingsUpdate",
]
