from typing import List, Optional, Sequence

from sqlalchemy import and_, delete, desc, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from folio.db.models.content import (
    ContentHistory as ContentHistoryModel,
    ContentItem as ContentItemModel,
    DocSection as DocSectionModel,
)
from folio.domains.content.entities import ContentKind, HistorySnapshot, VersionedContent


class ContentRepository:
    """Persistence for versioned content items and their history.

    Methods flush but never commit; the calling service owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _select(self):
        return select(ContentItemModel).options(selectinload(ContentItemModel.history))

    async def _get_model(self, kind: ContentKind, content_id: str) -> Optional[ContentItemModel]:
        result = await self.session.execute(
            self._select()
            .where(ContentItemModel.kind == kind.value, ContentItemModel.slug == content_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get(self, kind: ContentKind, content_id: str) -> Optional[VersionedContent]:
        db_item = await self._get_model(kind, content_id)
        return self._to_domain(db_item) if db_item else None

    async def exists(self, kind: ContentKind, content_id: str) -> bool:
        result = await self.session.execute(
            select(ContentItemModel.id).where(ContentItemModel.kind == kind.value, ContentItemModel.slug == content_id)
        )
        return result.scalar_one_or_none() is not None

    async def list(self, kind: ContentKind, visible_only: bool = False) -> List[VersionedContent]:
        query = self._select().where(ContentItemModel.kind == kind.value)
        if visible_only:
            query = query.where(ContentItemModel.visible.is_(True))
        result = await self.session.execute(
            query.order_by(ContentItemModel.sort_order, ContentItemModel.created_at.desc())
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(db_item) for db_item in result.scalars().all()]

    async def create(self, item: VersionedContent) -> VersionedContent:
        db_item = ContentItemModel(
            kind=item.kind.value,
            slug=item.id,
            title=item.title,
            published_content=item.published_content,
            draft_content=item.draft_content,
            visible=item.visible,
            project=item.project,
            section=item.section,
            sort_order=item.sort_order,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )
        self.session.add(db_item)
        await self.session.flush()
        return await self.get(item.kind, item.id)

    async def save(self, item: VersionedContent) -> VersionedContent:
        """Write item fields and insert history snapshots that have no id yet"""
        db_item = await self._get_model(item.kind, item.id)
        if db_item is None:
            raise LookupError(f"{item.kind.value} {item.id} does not exist")

        db_item.title = item.title
        db_item.published_content = item.published_content
        db_item.draft_content = item.draft_content
        db_item.visible = item.visible
        db_item.project = item.project
        db_item.section = item.section
        db_item.sort_order = item.sort_order
        db_item.updated_at = item.updated_at

        # history is newest first; insert the oldest new snapshot first so ids keep that order
        for snapshot in reversed([s for s in item.history if s.id is None]):
            self.session.add(ContentHistoryModel(
                item_id=db_item.id,
                timestamp=snapshot.timestamp,
                summary=snapshot.summary,
                content=snapshot.content,
            ))

        await self.session.flush()
        return await self.get(item.kind, item.id)

    async def delete(self, kind: ContentKind, content_id: str) -> bool:
        db_item = await self._get_model(kind, content_id)
        if db_item is None:
            return False
        # loaded history rows are removed with the item
        await self.session.delete(db_item)
        await self.session.flush()
        return True

    async def shift_sort_orders(self, kind: ContentKind) -> None:
        """Push every item of a kind one position down"""
        await self.session.execute(
            update(ContentItemModel)
            .where(ContentItemModel.kind == kind.value)
            .values(sort_order=ContentItemModel.sort_order + 1)
        )

    async def reorder(self, kind: ContentKind, content_ids: Sequence[str]) -> None:
        for position, content_id in enumerate(content_ids):
            await self.session.execute(
                update(ContentItemModel)
                .where(ContentItemModel.kind == kind.value, ContentItemModel.slug == content_id)
                .values(sort_order=position)
            )
        await self.session.flush()

    async def delete_section(self, project: str, section: str) -> int:
        """Remove every doc of a project section; returns how many went"""
        result = await self.session.execute(
            self._select().where(
                ContentItemModel.kind == ContentKind.DOC.value,
                ContentItemModel.project == project,
                ContentItemModel.section == section,
            )
        )
        db_items = result.scalars().all()
        for db_item in db_items:
            await self.session.delete(db_item)
        await self.session.execute(
            delete(DocSectionModel).where(DocSectionModel.project == project, DocSectionModel.name == section)
        )
        await self.session.flush()
        return len(db_items)

    async def section_names(self, project: str) -> List[str]:
        """Sections holding docs of a project, in their stored order; unordered ones go last"""
        result = await self.session.execute(
            select(ContentItemModel.section, DocSectionModel.sort_order)
            .outerjoin(
                DocSectionModel,
                and_(DocSectionModel.project == ContentItemModel.project, DocSectionModel.name == ContentItemModel.section),
            )
            .where(
                ContentItemModel.kind == ContentKind.DOC.value,
                ContentItemModel.project == project,
                ContentItemModel.section.is_not(None),
            )
            .distinct()
        )
        rows = result.all()
        rows.sort(key=lambda row: (row.sort_order is None, row.sort_order or 0, row.section))
        return [row.section for row in rows]

    async def set_section_order(self, project: str, sections: Sequence[str]) -> None:
        result = await self.session.execute(select(DocSectionModel).where(DocSectionModel.project == project))
        existing = {db_section.name: db_section for db_section in result.scalars().all()}
        for position, name in enumerate(sections):
            db_section = existing.get(name)
            if db_section is None:
                self.session.add(DocSectionModel(project=project, name=name, sort_order=position))
            else:
                db_section.sort_order = position
        await self.session.flush()

    async def search_visible(self, kind: ContentKind, query: str) -> List[VersionedContent]:
        """Visible items whose title or published content contains the query"""
        pattern = f"%{query}%"
        result = await self.session.execute(
            self._select()
            .where(
                ContentItemModel.kind == kind.value,
                ContentItemModel.visible.is_(True),
                or_(ContentItemModel.title.ilike(pattern), ContentItemModel.published_content.ilike(pattern)),
            )
            .order_by(ContentItemModel.sort_order, desc(ContentItemModel.updated_at))
            .execution_options(populate_existing=True)
        )
        return [self._to_domain(db_item) for db_item in result.scalars().all()]

    def _to_domain(self, db_item: ContentItemModel) -> VersionedContent:
        return VersionedContent(
            id=db_item.slug,
            kind=ContentKind(db_item.kind),
            title=db_item.title,
            published_content=db_item.published_content,
            draft_content=db_item.draft_content,
            history=[
                HistorySnapshot(timestamp=entry.timestamp, summary=entry.summary, content=entry.content, id=entry.id)
                for entry in db_item.history
            ],
            visible=db_item.visible,
            project=db_item.project,
            section=db_item.section,
            sort_order=db_item.sort_order,
            created_at=db_item.created_at,
            updated_at=db_item.updated_at,
        )
