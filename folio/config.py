from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite+aiosqlite:///./folio.db"
    sql_echo: bool = False

    jwt_secret: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    session_ttl_minutes: int = 60 * 24

    # passlib hash of the single administrator password
    admin_password_hash: Optional[str] = None

    preview_debounce_ms: int = Field(150, ge=50, le=1000)

    diagram_renderer: Literal["none", "http", "cli"] = "none"
    diagram_renderer_url: str = "https://kroki.io"
    diagram_cli_path: str = "mmdc"
    diagram_timeout_seconds: float = 10.0

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="FOLIO_", extra="ignore")


settings = Settings()
