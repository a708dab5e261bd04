from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

MAX_CONTENT_LENGTH = 1_000_000


class ContentCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    content: str = Field(default="", max_length=MAX_CONTENT_LENGTH)
    id: Optional[str] = Field(None, max_length=255, pattern=r"^[a-z0-9][a-z0-9-]*$")
    visible: bool = False
    project: Optional[str] = None
    section: Optional[str] = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()


class ContentMetadataUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    visible: Optional[bool] = None
    project: Optional[str] = None
    section: Optional[str] = None
    sort_order: Optional[int] = Field(None, ge=0)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip() if v else v


class DraftSave(BaseModel):
    content: str = Field(..., max_length=MAX_CONTENT_LENGTH)
    summary: Optional[str] = Field(None, max_length=255)
    title: Optional[str] = Field(None, min_length=1, max_length=255)


class ReorderRequest(BaseModel):
    ids: List[str]


class HistorySnapshotResponse(BaseModel):
    id: Optional[int]
    timestamp: datetime
    summary: str
    content: str

    model_config = ConfigDict(from_attributes=True)


class ContentResponse(BaseModel):
    id: str
    kind: str
    title: str
    published_content: str
    draft_content: Optional[str] = None
    history: List[HistorySnapshotResponse] = []
    visible: bool
    project: Optional[str] = None
    section: Optional[str] = None
    sort_order: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TocEntryResponse(BaseModel):
    text: str
    slug: str

    model_config = ConfigDict(from_attributes=True)


class RenderedContentResponse(BaseModel):
    id: str
    title: str
    html: str
    toc: List[TocEntryResponse]


class SectionDelete(BaseModel):
    project: str = Field(..., min_length=1, max_length=255)
    section: str = Field(..., min_length=1, max_length=255)


class SectionOrderUpdate(BaseModel):
    project: str = Field(..., min_length=1, max_length=255)
    sections: List[str]
