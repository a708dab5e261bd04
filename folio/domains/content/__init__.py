from folio.domains.content.entities import (
    ContentExistsError,
    ContentKind,
    ContentNotFoundError,
    HistorySnapshot,
    InvalidContentIdError,
    NothingToPublishError,
    ProjectNotFoundError,
    VersionedContent,
)

__all__ = [
    "ContentExistsError",
    "ContentKind",
    "ContentNotFoundError",
    "HistorySnapshot",
    "InvalidContentIdError",
    "NothingToPublishError",
    "ProjectNotFoundError",
    "VersionedContent",
]
