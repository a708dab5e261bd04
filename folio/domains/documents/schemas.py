from pydantic import BaseModel, Field
from typing import Any, Dict


class DocumentText(BaseModel):
    """Raw preamble + body text"""
    text: str = Field(default="", max_length=1000000)


class DocumentPayload(BaseModel):
    """Decoded document: preamble mapping and markdown body"""
    preamble: Dict[str, Any] = Field(default_factory=dict)
    body: str = Field(default="", max_length=1000000)
