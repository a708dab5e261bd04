import itertools
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from folio.config import settings
from folio.core.auth import websocket_is_admin
from folio.core.db import get_db
from folio.domains.content.entities import ContentKind, ContentNotFoundError
from folio.domains.content.services import ContentService
from folio.domains.documents.codec import parse, serialize
from folio.domains.documents.entities import StructuredDocument
from folio.domains.preview.diagrams import build_diagram_renderer
from folio.domains.preview.highlighter import fragments_to_html
from folio.domains.preview.pipeline import OVERLAY, PreviewPipeline
from folio.domains.preview.renderer import Append, Directive, Truncate, Update
from folio.domains.preview.theme import RenderConfig
from folio.domains.settings.services import SettingsService

logger = logging.getLogger(__name__)

router = APIRouter()


def encode_directives(target: str, directives: List[Directive], config: RenderConfig) -> List[Dict[str, Any]]:
    """JSON form of patch directives; overlay payloads are token fragments"""

    def payload_html(payload) -> str:
        return fragments_to_html(payload, config) if target == OVERLAY else payload

    encoded = []
    for directive in directives:
        if isinstance(directive, Update):
            encoded.append({"op": "update", "index": directive.index, "html": payload_html(directive.payload)})
        elif isinstance(directive, Append):
            encoded.append({"op": "append", "html": payload_html(directive.payload)})
        elif isinstance(directive, Truncate):
            encoded.append({"op": "truncate", "length": directive.length})
    return encoded


class EditorSession:
    """One open editor: the document being edited and its preview pipeline"""

    def __init__(
        self,
        websocket: WebSocket,
        kind: ContentKind,
        content_id: str,
        config: RenderConfig,
        preamble: Optional[Dict[str, Any]] = None,
    ):
        self.websocket = websocket
        self.kind = kind
        self.content_id = content_id
        self.config = config
        self.pipeline = PreviewPipeline(
            self.send_patch,
            config=config,
            diagram_renderer=build_diagram_renderer(settings),
            preamble=preamble,
            interpolate_body=kind.interpolates,
        )

    async def send(self, message: Dict[str, Any]):
        await self.websocket.send_text(json.dumps(message, default=str))

    async def send_patch(self, target: str, directives: List[Directive]):
        await self.send({
            "type": f"{target}_patch",
            "data": {"directives": encode_directives(target, directives, self.config)},
        })

    async def send_error(self, message: str):
        await self.send({"type": "error", "data": {"message": message}})

    def document(self) -> StructuredDocument:
        return StructuredDocument(preamble=self.pipeline.preamble, body=self.pipeline.body)


class SessionManager:
    def __init__(self):
        # {"kind/id": {session number: session}}
        self.active_sessions: Dict[str, Dict[int, EditorSession]] = {}
        self._numbers = itertools.count(1)

    def connect(self, session: EditorSession) -> int:
        key = f"{session.kind.value}/{session.content_id}"
        number = next(self._numbers)
        self.active_sessions.setdefault(key, {})[number] = session
        if len(self.active_sessions[key]) > 1:
            logger.warning("%d editor sessions open on %s; the last save wins", len(self.active_sessions[key]), key)
        logger.info("Editor session %d opened on %s", number, key)
        return number

    def disconnect(self, session: EditorSession, number: int):
        key = f"{session.kind.value}/{session.content_id}"
        session.pipeline.close()
        sessions = self.active_sessions.get(key, {})
        sessions.pop(number, None)
        if not sessions:
            self.active_sessions.pop(key, None)
        logger.info("Editor session %d closed on %s", number, key)


manager = SessionManager()


async def handle_message(session: EditorSession, message: Dict[str, Any], db: AsyncSession):
    message_type = message.get("type")
    data = message.get("data")
    if data is None:
        data = {}
    if not isinstance(data, dict):
        await session.send_error("Message data must be an object")
        return
    pipeline = session.pipeline

    if message_type == "edit":
        body = data.get("body")
        if not isinstance(body, str):
            await session.send_error("edit requires a string body")
            return
        await pipeline.on_edit(body)

    elif message_type == "preamble":
        preamble = data.get("preamble")
        if not isinstance(preamble, dict):
            await session.send_error("preamble must be an object")
            return
        await pipeline.set_preamble(preamble)

    elif message_type == "scroll":
        try:
            ratio = pipeline.on_scroll(
                float(data["scroll_top"]), float(data["scroll_height"]), float(data["client_height"])
            )
        except (KeyError, TypeError, ValueError):
            await session.send_error("scroll requires scroll_top, scroll_height and client_height")
            return
        if ratio is not None:
            await session.send({"type": "scroll", "data": {"ratio": ratio}})

    elif message_type == "layout":
        try:
            pipeline.set_layout(data.get("layout"))
        except ValueError as e:
            await session.send_error(str(e))

    elif message_type == "save":
        summary = data.get("summary") if isinstance(data.get("summary"), str) else None
        await pipeline.flush()
        text = serialize(session.document())
        try:
            item = await ContentService(db).save_draft(session.kind, session.content_id, text, summary)
        except ContentNotFoundError as e:
            await session.send_error(str(e))
            return
        await session.send({
            "type": "saved",
            "data": {"has_draft": item.has_draft, "history_count": len(item.history)},
        })

    elif message_type == "ping":
        await session.send({"type": "pong"})

    else:
        await session.send_error(f"Unknown message type: {message_type}")


@router.websocket("/ws/editor/{kind}/{content_id}")
async def editor_endpoint(websocket: WebSocket, kind: str, content_id: str, db: AsyncSession = Depends(get_db)):
    """Editing session: raw text in, overlay and preview patches out"""
    if not websocket_is_admin(websocket):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    try:
        content_kind = ContentKind.from_route(kind)
        item = await ContentService(db).get(content_kind, content_id)
    except (ValueError, ContentNotFoundError) as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=str(e))
        return

    await websocket.accept()
    config = await SettingsService(db).render_config()
    document = parse(item.effective_content)
    session = EditorSession(websocket, content_kind, content_id, config, preamble=document.preamble)
    number = manager.connect(session)

    try:
        await session.send({
            "type": "loaded",
            "data": {"preamble": document.preamble, "body": document.body, "has_draft": item.has_draft},
        })
        await session.pipeline.open(document.body)

        while True:
            raw = await websocket.receive_text()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await session.send_error("Message is not valid JSON")
                continue
            if not isinstance(message, dict):
                await session.send_error("Message must be an object")
                continue
            await handle_message(session, message, db)

    except WebSocketDisconnect:
        manager.disconnect(session, number)

    except Exception as e:
        logger.error(f"Editor session error on {kind}/{content_id}: {e}")
        manager.disconnect(session, number)
        raise
