import logging
from typing import List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from folio.db.repositories.content_repository import ContentRepository
from folio.domains.content.entities import (
    DEFAULT_SUMMARY,
    PROFILE_ID,
    ContentExistsError,
    ContentKind,
    ContentNotFoundError,
    HistorySnapshot,
    InvalidContentIdError,
    ProjectNotFoundError,
    VersionedContent,
)
from folio.domains.content.schemas import ContentCreate, ContentMetadataUpdate
from folio.domains.documents.codec import parse
from folio.domains.documents.interpolation import interpolate
from folio.domains.preview.markup import MarkupRenderer, TocEntry, extract_toc
from folio.domains.preview.theme import DEFAULT_CONFIG, RenderConfig

log = logging.getLogger(__name__)


class ContentService:
    """Draft, publish and history operations on stored content"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.content_repository = ContentRepository(session)

    async def get(self, kind: ContentKind, content_id: str) -> VersionedContent:
        item = await self.content_repository.get(kind, content_id)
        if item is None and kind is ContentKind.PROFILE and content_id == PROFILE_ID:
            item = await self._create_profile()
        if item is None:
            raise ContentNotFoundError(kind, content_id)
        return item

    async def _create_profile(self) -> VersionedContent:
        profile = await self.content_repository.create(VersionedContent.create(ContentKind.PROFILE, title="Profile", visible=True))
        await self.session.commit()
        log.info("Created empty profile")
        return profile

    async def get_visible(self, kind: ContentKind, content_id: str, is_admin: bool) -> VersionedContent:
        """Hidden items do not exist for visitors"""
        item = await self.get(kind, content_id)
        if not item.visible and not is_admin and kind is not ContentKind.PROFILE:
            raise ContentNotFoundError(kind, content_id)
        return item

    async def list(self, kind: ContentKind, is_admin: bool = False) -> List[VersionedContent]:
        if kind is ContentKind.PROFILE:
            return [await self.get(kind, PROFILE_ID)]
        return await self.content_repository.list(kind, visible_only=not is_admin)

    async def create(self, kind: ContentKind, data: ContentCreate) -> VersionedContent:
        item = VersionedContent.create(
            kind,
            title=data.title,
            content=data.content,
            content_id=data.id,
            visible=data.visible,
            project=data.project,
            section=data.section,
        )
        if not item.id:
            raise InvalidContentIdError(data.title)
        if await self.content_repository.exists(kind, item.id):
            raise ContentExistsError(kind, item.id)

        if kind is ContentKind.ARTICLE:
            # newest article goes first
            await self.content_repository.shift_sort_orders(kind)

        created = await self.content_repository.create(item)
        await self.session.commit()
        log.info("Created %s %s", kind.value, created.id)
        return created

    async def update_metadata(self, kind: ContentKind, content_id: str, data: ContentMetadataUpdate) -> VersionedContent:
        item = await self.get(kind, content_id)
        item.update_metadata(**data.model_dump(exclude_unset=True))
        updated = await self.content_repository.save(item)
        await self.session.commit()
        return updated

    async def save_draft(
        self,
        kind: ContentKind,
        content_id: str,
        content: str,
        summary: Optional[str] = None,
        title: Optional[str] = None,
    ) -> VersionedContent:
        item = await self.get(kind, content_id)
        item.save_draft(content, summary=summary or DEFAULT_SUMMARY)
        if title:
            item.title = title
        saved = await self.content_repository.save(item)
        await self.session.commit()
        log.info("Saved draft of %s %s (%d history entries)", kind.value, content_id, len(saved.history))
        return saved

    async def publish(self, kind: ContentKind, content_id: str) -> VersionedContent:
        item = await self.get(kind, content_id)
        item.publish()
        published = await self.content_repository.save(item)
        await self.session.commit()
        log.info("Published %s %s", kind.value, content_id)
        return published

    async def restore(self, kind: ContentKind, content_id: str, history_id: int) -> VersionedContent:
        item = await self.get(kind, content_id)
        snapshot: HistorySnapshot = item.find_snapshot(history_id)
        item.restore(snapshot)
        restored = await self.content_repository.save(item)
        await self.session.commit()
        log.info("Restored history %d into draft of %s %s", history_id, kind.value, content_id)
        return restored

    async def delete(self, kind: ContentKind, content_id: str) -> None:
        if not await self.content_repository.delete(kind, content_id):
            raise ContentNotFoundError(kind, content_id)
        await self.session.commit()
        log.info("Deleted %s %s", kind.value, content_id)

    async def reorder(self, kind: ContentKind, content_ids: Sequence[str]) -> None:
        await self.content_repository.reorder(kind, content_ids)
        await self.session.commit()

    async def list_sections(self, project: str) -> List[str]:
        return await self.content_repository.section_names(project)

    async def delete_section(self, project: str, section: str) -> int:
        """Delete every doc filed under a project section"""
        deleted = await self.content_repository.delete_section(project, section)
        await self.session.commit()
        log.info("Deleted section %s/%s (%d docs)", project, section, deleted)
        return deleted

    async def reorder_sections(self, project: str, sections: Sequence[str]) -> None:
        if not await self.content_repository.section_names(project):
            raise ProjectNotFoundError(project)
        await self.content_repository.set_section_order(project, sections)
        await self.session.commit()


def render_published(item: VersionedContent, config: RenderConfig = DEFAULT_CONFIG):
    """HTML and table of contents of the published version"""
    document = parse(item.published_content)
    body = document.body
    if item.kind.interpolates:
        body = interpolate(body, document.preamble)
    html = MarkupRenderer(config).render_html(body)
    toc: List[TocEntry] = extract_toc(body)
    return html, toc
