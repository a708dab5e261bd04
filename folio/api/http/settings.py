from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from folio.core.auth import require_admin
from folio.core.db import get_db
from folio.domains.settings.schemas import SiteSettings, SiteSettingsUpdate
from folio.domains.settings.services import SettingsService

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SiteSettings)
async def get_settings(db: AsyncSession = Depends(get_db)):
    return await SettingsService(db).get()


@router.put("", response_model=SiteSettings)
async def update_settings(
    data: SiteSettingsUpdate,
    _: bool = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return await SettingsService(db).update(data)
