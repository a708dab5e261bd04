from folio.api.http.health import router as health_router
from folio.api.http.auth import router as auth_router
from folio.api.http.content import router as content_router
from folio.api.http.documents import router as documents_router
from folio.api.http.preview import router as preview_router
from folio.api.http.search import router as search_router
from folio.api.http.settings import router as settings_router

__all__ = [
    "health_router",
    "auth_router",
    "content_router",
    "documents_router",
    "preview_router",
    "search_router",
    "settings_router",
]
