import logging
from typing import Dict

from sqlalchemy.ext.asyncio import AsyncSession

from folio.config import settings as app_settings
from folio.db.repositories.setting_repository import SettingRepository
from folio.domains.preview.theme import RenderConfig
from folio.domains.settings.schemas import SiteSettings, SiteSettingsUpdate

log = logging.getLogger(__name__)

ALLOWED_KEYS = tuple(SiteSettings.model_fields)


def _decode(key: str, value: str):
    if key == "maintenance":
        return value == "true"
    return value


def _encode(key: str, value) -> str:
    if key == "maintenance":
        return "true" if value else "false"
    return str(value)


class SettingsService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.setting_repository = SettingRepository(session)

    async def get(self) -> SiteSettings:
        stored = await self.setting_repository.get_all()
        values = {key: _decode(key, value) for key, value in stored.items() if key in ALLOWED_KEYS}
        return SiteSettings(**values)

    async def update(self, data: SiteSettingsUpdate) -> SiteSettings:
        changes: Dict[str, str] = {
            key: _encode(key, value)
            for key, value in data.model_dump(exclude_none=True).items()
            if key in ALLOWED_KEYS
        }
        if changes:
            await self.setting_repository.upsert_many(changes)
            await self.session.commit()
            log.info("Updated site settings: %s", ", ".join(sorted(changes)))
        return await self.get()

    async def render_config(self) -> RenderConfig:
        """Render configuration for the persisted theme"""
        site = await self.get()
        return RenderConfig.for_theme(site.theme, debounce_seconds=app_settings.preview_debounce_ms / 1000)
