from typing import Dict, Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from folio.db.models.setting import SiteSetting as SiteSettingModel


class SettingRepository:
    """Key/value site settings"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_all(self) -> Dict[str, str]:
        result = await self.session.execute(select(SiteSettingModel))
        return {row.key: row.value for row in result.scalars().all()}

    async def upsert_many(self, values: Mapping[str, str]) -> None:
        for key, value in values.items():
            existing = await self.session.get(SiteSettingModel, key)
            if existing is None:
                self.session.add(SiteSettingModel(key=key, value=value))
            else:
                existing.value = value
        await self.session.flush()
