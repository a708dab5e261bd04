import re
from typing import List

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from folio.db.repositories.content_repository import ContentRepository
from folio.domains.content.entities import ContentKind, VersionedContent

MIN_QUERY_LENGTH = 2
MAX_RESULTS = 15
PREVIEW_LENGTH = 120

_HEADING_PREFIX_RE = re.compile(r"^#+\s*")


class SearchHit(BaseModel):
    id: str
    title_path: List[str]
    heading_context: str = ""
    preview_snippet: str = ""


def build_hit(item: VersionedContent, query: str) -> SearchHit:
    """Locate the first matching line and the section heading above it"""
    needle = query.lower()
    preview = ""
    heading = ""

    for line in item.published_content.split("\n"):
        if line.startswith("## ") or line.startswith("### "):
            heading = _HEADING_PREFIX_RE.sub("", line)
        if needle in line.lower():
            preview = _HEADING_PREFIX_RE.sub("", line).strip()
            break

    if not preview and needle in item.title.lower():
        preview = item.title

    if len(preview) > PREVIEW_LENGTH:
        preview = preview[:PREVIEW_LENGTH] + "…"

    title_path = [part for part in (item.project, item.section, item.title) if part]
    return SearchHit(id=item.id, title_path=title_path, heading_context=heading, preview_snippet=preview)


class SearchService:
    """Full-text lookup over visible documentation"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.content_repository = ContentRepository(session)

    async def search_docs(self, query: str) -> List[SearchHit]:
        query = query.strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []
        items = await self.content_repository.search_visible(ContentKind.DOC, query)
        return [build_hit(item, query) for item in items[:MAX_RESULTS]]
