from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from folio.core.auth import require_admin
from folio.core.db import get_db
from folio.domains.documents.interpolation import interpolate
from folio.domains.preview.highlighter import fragments_to_html, highlight_document
from folio.domains.preview.markup import MarkupRenderer, extract_toc
from folio.domains.preview.schemas import PreviewRequest, PreviewResponse, TocEntryOut
from folio.domains.settings.services import SettingsService

router = APIRouter(prefix="/preview", tags=["preview"])


@router.post("", response_model=PreviewResponse)
async def render_preview(
    data: PreviewRequest,
    _: bool = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Render a body without opening an editing session"""
    config = await SettingsService(db).render_config()
    source = interpolate(data.body, data.preamble) if data.interpolate else data.body
    blocks = MarkupRenderer(config).render_blocks(source)
    return PreviewResponse(
        blocks=[block.html for block in blocks],
        overlay=[fragments_to_html(line.fragments, config) for line in highlight_document(data.body)],
        toc=[TocEntryOut(text=entry.text, slug=entry.slug) for entry in extract_toc(source)],
    )
