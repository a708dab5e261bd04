import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

PROFILE_ID = "profile"
DEFAULT_SUMMARY = "Edit"

_ID_SEPARATOR_RE = re.compile(r"[^a-z0-9]+")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def content_id_from_title(title: str) -> str:
    return _ID_SEPARATOR_RE.sub("-", title.lower()).strip("-")


class ContentKind(str, Enum):
    ARTICLE = "article"
    DOC = "doc"
    PAGE = "page"
    PROFILE = "profile"

    @property
    def route(self) -> str:
        return self.value if self is ContentKind.PROFILE else f"{self.value}s"

    @classmethod
    def from_route(cls, route: str) -> "ContentKind":
        for kind in cls:
            if kind.route == route:
                return kind
        raise ValueError(f"Unknown content kind: {route}")

    @property
    def interpolates(self) -> bool:
        """Static pages substitute preamble values into their body"""
        return self is ContentKind.PAGE


class ContentNotFoundError(LookupError):
    """No content item (or history snapshot) with the requested id"""

    def __init__(self, kind: ContentKind, content_id: str, history_id: Optional[int] = None):
        self.kind = kind
        self.content_id = content_id
        self.history_id = history_id
        target = f"{kind.value} {content_id}"
        if history_id is not None:
            target = f"history {history_id} of {target}"
        super().__init__(f"Not found: {target}")


class NothingToPublishError(ValueError):
    """Publish was requested while no draft exists"""

    def __init__(self, content_id: str):
        self.content_id = content_id
        super().__init__("nothing to publish")


class InvalidContentIdError(ValueError):
    """The title does not reduce to a usable id"""

    def __init__(self, title: str):
        self.title = title
        super().__init__(f"Title {title!r} does not yield a usable id")


class ContentExistsError(ValueError):
    def __init__(self, kind: ContentKind, content_id: str):
        self.kind = kind
        self.content_id = content_id
        super().__init__(f"{kind.value} {content_id} already exists")


class ProjectNotFoundError(LookupError):
    def __init__(self, project: str):
        self.project = project
        super().__init__(f"No docs in project {project}")


@dataclass(frozen=True)
class HistorySnapshot:
    """Content as it was before a draft save; never modified once taken"""
    timestamp: datetime
    summary: str
    content: str
    id: Optional[int] = None


class VersionedContent:
    """A content item with a published version, an optional draft and its history.

    `draft_content is None` exactly when there are no unpublished changes.
    History is newest first and only ever grows at the front.
    """

    def __init__(
        self,
        id: str,
        kind: ContentKind,
        title: str = "",
        published_content: str = "",
        draft_content: Optional[str] = None,
        history: Optional[List[HistorySnapshot]] = None,
        visible: bool = False,
        project: Optional[str] = None,
        section: Optional[str] = None,
        sort_order: int = 0,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
    ):
        self.id = id
        self.kind = kind
        self.title = title
        self.published_content = published_content
        self.draft_content = draft_content
        self.history: List[HistorySnapshot] = list(history or [])
        self.visible = visible
        self.project = project
        self.section = section
        self.sort_order = sort_order
        self.created_at = created_at or utcnow()
        self.updated_at = updated_at or self.created_at

    @property
    def has_draft(self) -> bool:
        return self.draft_content is not None

    @property
    def effective_content(self) -> str:
        """What the editor shows: the draft if any, else the published content"""
        return self.draft_content if self.draft_content is not None else self.published_content

    def save_draft(self, content: str, summary: str = DEFAULT_SUMMARY, now: Optional[datetime] = None) -> HistorySnapshot:
        """Snapshot the current effective content, then replace the draft"""
        now = now or utcnow()
        snapshot = HistorySnapshot(timestamp=now, summary=summary, content=self.effective_content)
        self.history.insert(0, snapshot)
        self.draft_content = content
        self.updated_at = now
        return snapshot

    def publish(self, now: Optional[datetime] = None) -> None:
        if self.draft_content is None:
            raise NothingToPublishError(self.id)
        self.published_content = self.draft_content
        self.draft_content = None
        self.updated_at = now or utcnow()

    def restore(self, snapshot: HistorySnapshot, now: Optional[datetime] = None) -> HistorySnapshot:
        """Bring an older version back as the draft"""
        summary = f"Restore from {snapshot.timestamp:%Y-%m-%d %H:%M}"
        return self.save_draft(snapshot.content, summary=summary, now=now)

    def find_snapshot(self, history_id: int) -> HistorySnapshot:
        for snapshot in self.history:
            if snapshot.id == history_id:
                return snapshot
        raise ContentNotFoundError(self.kind, self.id, history_id)

    def update_metadata(self, **changes) -> None:
        for field in ("title", "visible", "project", "section", "sort_order"):
            if changes.get(field) is not None:
                setattr(self, field, changes[field])
        self.updated_at = utcnow()

    @classmethod
    def create(cls, kind: ContentKind, title: str, content: str = "", content_id: Optional[str] = None, **metadata) -> "VersionedContent":
        if kind is ContentKind.PROFILE:
            content_id = PROFILE_ID
        return cls(
            id=content_id or content_id_from_title(title),
            kind=kind,
            title=title,
            published_content=content,
            **metadata,
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, VersionedContent):
            return False
        return self.kind == other.kind and self.id == other.id

    def __repr__(self) -> str:
        return f"VersionedContent(kind={self.kind.value}, id={self.id}, has_draft={self.has_draft}, history={len(self.history)})"
