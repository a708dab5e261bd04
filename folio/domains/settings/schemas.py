from typing import Literal, Optional

from pydantic import BaseModel, Field


class SiteSettings(BaseModel):
    maintenance: bool = False
    theme: Literal["dark", "light"] = "dark"
    articles_subtitle: str = ""
    articles_desc: str = ""
    docs_subtitle: str = ""
    docs_desc: str = ""


class SiteSettingsUpdate(BaseModel):
    """Only the fields present in the request are written"""
    maintenance: Optional[bool] = None
    theme: Optional[Literal["dark", "light"]] = None
    articles_subtitle: Optional[str] = Field(None, max_length=500)
    articles_desc: Optional[str] = Field(None, max_length=2000)
    docs_subtitle: Optional[str] = Field(None, max_length=500)
    docs_desc: Optional[str] = Field(None, max_length=2000)
