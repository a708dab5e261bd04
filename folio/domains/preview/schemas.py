from typing import Any, Dict, List

from pydantic import BaseModel, Field


class PreviewRequest(BaseModel):
    body: str = Field(default="", max_length=1000000)
    preamble: Dict[str, Any] = Field(default_factory=dict)
    interpolate: bool = False


class TocEntryOut(BaseModel):
    text: str
    slug: str


class PreviewResponse(BaseModel):
    """One-shot render: preview blocks and edit pane overlay lines as HTML"""
    blocks: List[str]
    overlay: List[str]
    toc: List[TocEntryOut]
