"""
Editing-session preview pipeline.

Each keystroke patches the edit pane overlay right away. The rendered
preview is rebuilt only once edits stop for the configured quiet period;
a newer edit cancels the pending rebuild instead of queueing another one.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Set

from folio.domains.documents.interpolation import interpolate
from folio.domains.preview.diagrams import DiagramCoordinator, DiagramRenderer
from folio.domains.preview.markup import MarkupRenderer
from folio.domains.preview.renderer import Directive, PreviewSurface, RenderState
from folio.domains.preview.theme import DEFAULT_CONFIG, RenderConfig

log = logging.getLogger(__name__)

OVERLAY = "overlay"
PREVIEW = "preview"

LAYOUTS = ("split", "editor", "preview")

PatchSink = Callable[[str, List[Directive]], Awaitable[None]]


def scroll_ratio(scroll_top: float, scroll_height: float, client_height: float) -> float:
    """Scroll position of the edit pane as a fraction of its scrollable range"""
    scrollable = scroll_height - client_height
    if scrollable <= 0:
        return 0.0
    return min(max(scroll_top / scrollable, 0.0), 1.0)


def preview_scroll_top(ratio: float, scroll_height: float, client_height: float) -> float:
    return max(scroll_height - client_height, 0) * ratio


class PreviewPipeline:
    """Overlay and preview state for one editing session"""

    def __init__(
        self,
        sink: PatchSink,
        config: RenderConfig = DEFAULT_CONFIG,
        diagram_renderer: Optional[DiagramRenderer] = None,
        preamble: Optional[Mapping[str, Any]] = None,
        interpolate_body: bool = False,
        layout: str = "split",
    ):
        self.config = config
        self.body = ""
        self.preamble: Dict[str, Any] = dict(preamble or {})
        self.interpolate_body = interpolate_body
        self.layout = layout
        self.render_count = 0

        self.overlay = RenderState()
        self.surface = PreviewSurface()
        self._markup = MarkupRenderer(config)
        self._sink = sink
        self._diagrams: Optional[DiagramCoordinator] = None
        if diagram_renderer is not None:
            self._diagrams = DiagramCoordinator(diagram_renderer, self.surface, self._send_preview)

        self._timer: Optional[asyncio.TimerHandle] = None
        self._renders: Set[asyncio.Task] = set()
        self._closed = False

    @property
    def render_pending(self) -> bool:
        return self._timer is not None

    async def open(self, body: str):
        """Show a freshly loaded document without waiting for the quiet period"""
        self.body = body
        await self._send(OVERLAY, self.overlay.apply(body))
        await self.render_preview()

    async def on_edit(self, raw_text: str):
        self.body = raw_text
        await self._send(OVERLAY, self.overlay.apply(raw_text))
        self._schedule_render()

    async def set_preamble(self, preamble: Mapping[str, Any]):
        self.preamble = dict(preamble)
        if self.interpolate_body:
            self._schedule_render()

    def set_layout(self, layout: str):
        if layout not in LAYOUTS:
            raise ValueError(f"Unknown layout: {layout}")
        self.layout = layout

    def on_scroll(self, scroll_top: float, scroll_height: float, client_height: float) -> Optional[float]:
        """Ratio to apply to the preview pane, or None when it is not shown beside the editor"""
        if self.layout != "split":
            return None
        return scroll_ratio(scroll_top, scroll_height, client_height)

    def _schedule_render(self):
        if self._closed:
            return
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.config.debounce_seconds, self._fire)

    def _fire(self):
        self._timer = None
        task = asyncio.ensure_future(self.render_preview())
        self._renders.add(task)
        task.add_done_callback(self._renders.discard)

    async def render_preview(self):
        if self._closed:
            return
        source = interpolate(self.body, self.preamble) if self.interpolate_body else self.body
        blocks = self._markup.render_blocks(source)
        directives = self.surface.apply(blocks)
        self.render_count += 1
        log.debug("Preview render %d produced %d directives", self.render_count, len(directives))
        await self._send(PREVIEW, directives)
        if self._diagrams is not None:
            self._diagrams.schedule()

    async def flush(self):
        """Run a pending render now and wait for in-flight work"""
        if self.render_pending:
            self._timer.cancel()
            self._timer = None
            await self.render_preview()
        while self._renders:
            await asyncio.gather(*list(self._renders), return_exceptions=True)
        if self._diagrams is not None:
            await self._diagrams.wait_idle()

    def close(self):
        """Cancel pending work and detach the preview so late diagram results are dropped"""
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        for task in list(self._renders):
            task.cancel()
        self.surface.detach_all()
        self.overlay.reset()

    async def _send_preview(self, directives: List[Directive]):
        await self._send(PREVIEW, directives)

    async def _send(self, target: str, directives: List[Directive]):
        if not directives or self._closed:
            return
        try:
            await self._sink(target, directives)
        except Exception as exc:
            # the client went away mid-session
            log.debug("Dropping %d %s directives: %s", len(directives), target, exc)
