from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from folio.core.auth import get_is_admin, require_admin
from folio.core.db import get_db
from folio.domains.content.entities import (
    ContentExistsError,
    ContentKind,
    ContentNotFoundError,
    InvalidContentIdError,
    NothingToPublishError,
    ProjectNotFoundError,
    VersionedContent,
)
from folio.domains.content.schemas import (
    ContentCreate,
    ContentMetadataUpdate,
    ContentResponse,
    DraftSave,
    HistorySnapshotResponse,
    RenderedContentResponse,
    ReorderRequest,
    SectionDelete,
    SectionOrderUpdate,
    TocEntryResponse,
)
from folio.domains.content.services import ContentService, render_published
from folio.domains.settings.services import SettingsService

router = APIRouter(prefix="/content", tags=["content"])


def content_kind(kind: str) -> ContentKind:
    """Path parameter `articles|docs|pages|profile`"""
    try:
        return ContentKind.from_route(kind)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown content kind: {kind}")


def not_found(error: ContentNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


def to_response(item: VersionedContent, is_admin: bool) -> ContentResponse:
    """Drafts and history are only shown to the administrator"""
    return ContentResponse(
        id=item.id,
        kind=item.kind.value,
        title=item.title,
        published_content=item.published_content,
        draft_content=item.draft_content if is_admin else None,
        history=[HistorySnapshotResponse.model_validate(snapshot) for snapshot in item.history] if is_admin else [],
        visible=item.visible,
        project=item.project,
        section=item.section,
        sort_order=item.sort_order,
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


# fixed docs paths are registered ahead of the /{kind}/{content_id} routes
@router.get("/docs/sections", response_model=List[str])
async def list_doc_sections(project: str = Query(..., min_length=1), db: AsyncSession = Depends(get_db)):
    """Section names of a project in display order"""
    return await ContentService(db).list_sections(project)


@router.delete("/docs/section")
async def delete_doc_section(
    data: SectionDelete,
    _: bool = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    deleted = await ContentService(db).delete_section(data.project, data.section)
    return {"ok": True, "deleted": deleted}


@router.put("/docs/section-order")
async def reorder_doc_sections(
    data: SectionOrderUpdate,
    _: bool = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        await ContentService(db).reorder_sections(data.project, data.sections)
    except ProjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return {"ok": True}


@router.get("/{kind}", response_model=List[ContentResponse])
async def list_content(
    kind: ContentKind = Depends(content_kind),
    is_admin: bool = Depends(get_is_admin),
    db: AsyncSession = Depends(get_db),
):
    items = await ContentService(db).list(kind, is_admin=is_admin)
    return [to_response(item, is_admin) for item in items]


@router.post("/{kind}", response_model=ContentResponse, status_code=status.HTTP_201_CREATED)
async def create_content(
    data: ContentCreate,
    kind: ContentKind = Depends(content_kind),
    _: bool = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        item = await ContentService(db).create(kind, data)
    except InvalidContentIdError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except ContentExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    return to_response(item, True)


@router.post("/{kind}/reorder")
async def reorder_content(
    data: ReorderRequest,
    kind: ContentKind = Depends(content_kind),
    _: bool = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await ContentService(db).reorder(kind, data.ids)
    return {"ok": True}


@router.get("/{kind}/{content_id}", response_model=ContentResponse)
async def get_content(
    content_id: str,
    kind: ContentKind = Depends(content_kind),
    is_admin: bool = Depends(get_is_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        item = await ContentService(db).get_visible(kind, content_id, is_admin)
    except ContentNotFoundError as e:
        raise not_found(e)
    return to_response(item, is_admin)


@router.patch("/{kind}/{content_id}", response_model=ContentResponse)
async def update_content_metadata(
    content_id: str,
    data: ContentMetadataUpdate,
    kind: ContentKind = Depends(content_kind),
    _: bool = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        item = await ContentService(db).update_metadata(kind, content_id, data)
    except ContentNotFoundError as e:
        raise not_found(e)
    return to_response(item, True)


@router.put("/{kind}/{content_id}/draft", response_model=ContentResponse)
async def save_draft(
    content_id: str,
    data: DraftSave,
    kind: ContentKind = Depends(content_kind),
    _: bool = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Snapshot the current version into history and store the new draft"""
    try:
        item = await ContentService(db).save_draft(kind, content_id, data.content, data.summary, data.title)
    except ContentNotFoundError as e:
        raise not_found(e)
    return to_response(item, True)


@router.post("/{kind}/{content_id}/publish", response_model=ContentResponse)
async def publish(
    content_id: str,
    kind: ContentKind = Depends(content_kind),
    _: bool = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        item = await ContentService(db).publish(kind, content_id)
    except ContentNotFoundError as e:
        raise not_found(e)
    except NothingToPublishError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    return to_response(item, True)


@router.post("/{kind}/{content_id}/history/{history_id}/restore", response_model=ContentResponse)
async def restore(
    content_id: str,
    history_id: int,
    kind: ContentKind = Depends(content_kind),
    _: bool = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    try:
        item = await ContentService(db).restore(kind, content_id, history_id)
    except ContentNotFoundError as e:
        raise not_found(e)
    return to_response(item, True)


@router.delete("/{kind}/{content_id}")
async def delete_content(
    content_id: str,
    kind: ContentKind = Depends(content_kind),
    _: bool = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    if kind is ContentKind.PROFILE:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The profile cannot be deleted")
    try:
        await ContentService(db).delete(kind, content_id)
    except ContentNotFoundError as e:
        raise not_found(e)
    return {"ok": True}


@router.get("/{kind}/{content_id}/rendered", response_model=RenderedContentResponse)
async def get_rendered(
    content_id: str,
    kind: ContentKind = Depends(content_kind),
    is_admin: bool = Depends(get_is_admin),
    db: AsyncSession = Depends(get_db),
):
    """Published version as HTML, with its table of contents"""
    try:
        item = await ContentService(db).get_visible(kind, content_id, is_admin)
    except ContentNotFoundError as e:
        raise not_found(e)

    config = await SettingsService(db).render_config()
    html, toc = render_published(item, config)
    return RenderedContentResponse(
        id=item.id,
        title=item.title,
        html=html,
        toc=[TocEntryResponse.model_validate(entry) for entry in toc],
    )
