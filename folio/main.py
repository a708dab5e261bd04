import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from folio.api.http import (
    auth_router,
    content_router,
    documents_router,
    health_router,
    preview_router,
    search_router,
    settings_router,
)
from folio.api.ws.editor import router as editor_router
from folio.core.db import init_models
from folio.core.logging_config import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    await init_models()
    logger.info("folio started")
    yield


app = FastAPI(
    title="folio",
    description="Content site authoring core: drafts, publishing, history and live preview",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(auth_router)
app.include_router(content_router)
app.include_router(documents_router)
app.include_router(preview_router)
app.include_router(search_router)
app.include_router(settings_router)
app.include_router(editor_router)


@app.get("/")
async def root():
    return {
        "message": "folio API",
        "version": "0.1.0",
        "docs": "/docs",
        "health": "/health",
    }
