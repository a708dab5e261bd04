from sqlalchemy import Column, String, Text

from folio.core.db import Base


class SiteSetting(Base):
    __tablename__ = "settings"

    key = Column(String(64), primary_key=True)
    value = Column(Text, nullable=False)
