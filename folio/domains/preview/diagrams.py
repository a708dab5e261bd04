"""
Asynchronous diagram rendering for preview surfaces.

Renderers turn diagram source into SVG markup. The coordinator starts one
render per unrendered diagram node and, when it resolves, injects the
result only if the node is still attached to its surface and not already
marked rendered. Late results for replaced or detached nodes are dropped.
"""

import asyncio
import itertools
import logging
import os
import tempfile
from typing import Awaitable, Callable, List, Optional, Set

import httpx

from folio.config import Settings
from folio.domains.preview.renderer import DiagramNode, Directive, PreviewSurface, Update

log = logging.getLogger(__name__)


class DiagramRenderError(Exception):
    """Raised when a renderer cannot produce output for a diagram"""


class DiagramRenderer:
    """Base class for diagram renderers"""

    async def render(self, render_id: str, language: str, source: str) -> str:
        raise NotImplementedError

    async def discard(self, render_id: str) -> None:
        """Remove any partial artifacts left by a failed render"""


class HttpDiagramRenderer(DiagramRenderer):
    """Renders through a Kroki-compatible HTTP service"""

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def render(self, render_id: str, language: str, source: str) -> str:
        url = f"{self.base_url}/{language}/svg"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    url, content=source.encode("utf-8"), headers={"Content-Type": "text/plain"}
                )
                response.raise_for_status()
        except httpx.HTTPError as exc:
            raise DiagramRenderError(f"{language} render {render_id} failed: {exc}") from exc
        return response.text


class CliDiagramRenderer(DiagramRenderer):
    """Renders mermaid diagrams with the mermaid-cli `mmdc` executable"""

    def __init__(self, executable: str = "mmdc", timeout: float = 10.0, workdir: Optional[str] = None):
        self.executable = executable
        self.timeout = timeout
        self.workdir = workdir or tempfile.gettempdir()

    def _paths(self, render_id: str):
        base = os.path.join(self.workdir, f"folio-{render_id}")
        return base + ".mmd", base + ".svg"

    async def render(self, render_id: str, language: str, source: str) -> str:
        if language != "mermaid":
            raise DiagramRenderError(f"{self.executable} cannot render {language}")

        input_path, output_path = self._paths(render_id)
        await asyncio.to_thread(_write_text, input_path, source)

        try:
            try:
                process = await asyncio.create_subprocess_exec(
                    self.executable, "-i", input_path, "-o", output_path, "-q",
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except FileNotFoundError as exc:
                raise DiagramRenderError(f"Command not found: {self.executable}") from exc

            try:
                _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
            except asyncio.TimeoutError as exc:
                process.kill()
                await process.wait()
                raise DiagramRenderError(f"{self.executable} timed out after {self.timeout}s") from exc

            if process.returncode != 0:
                message = stderr.decode("utf-8", errors="replace").strip()
                raise DiagramRenderError(message or f"{self.executable} exited with {process.returncode}")

            return await asyncio.to_thread(_read_and_remove, output_path)
        finally:
            await asyncio.to_thread(_remove_if_present, input_path)

    async def discard(self, render_id: str) -> None:
        _, output_path = self._paths(render_id)
        await asyncio.to_thread(_remove_if_present, output_path)


def _write_text(path: str, text: str):
    with open(path, "w", encoding="utf-8") as handle:
        handle.write(text)


def _read_and_remove(path: str) -> str:
    with open(path, encoding="utf-8") as handle:
        text = handle.read()
    os.remove(path)
    return text


def _remove_if_present(path: str):
    if os.path.exists(path):
        os.remove(path)


def build_diagram_renderer(settings: Settings) -> Optional[DiagramRenderer]:
    """Renderer selected by configuration, or None to keep raw sources"""
    if settings.diagram_renderer == "http":
        return HttpDiagramRenderer(settings.diagram_renderer_url, settings.diagram_timeout_seconds)
    if settings.diagram_renderer == "cli":
        return CliDiagramRenderer(settings.diagram_cli_path, settings.diagram_timeout_seconds)
    return None


DirectiveSink = Callable[[List[Directive]], Awaitable[None]]


class DiagramCoordinator:
    """Schedules diagram renders for one preview surface"""

    _ids = itertools.count(1)

    def __init__(self, renderer: DiagramRenderer, surface: PreviewSurface, sink: DirectiveSink):
        self.renderer = renderer
        self.surface = surface
        self._sink = sink
        self._tasks: Set[asyncio.Task] = set()

    def schedule(self) -> int:
        """Start renders for every diagram node that has none yet"""
        started = 0
        for node in self.surface.unrendered_diagrams():
            if not node.source.strip():
                continue
            node.pending = True
            render_id = f"diagram-{next(self._ids)}"
            task = asyncio.create_task(self._render(node, render_id))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            started += 1
        return started

    async def _render(self, node: DiagramNode, render_id: str):
        try:
            svg = await self.renderer.render(render_id, node.language, node.source)
        except Exception as exc:
            # renderer errors stay inside the task; the node keeps its source
            node.pending = False
            node.failed = True
            await self.renderer.discard(render_id)
            log.warning("Diagram render %s failed: %s", render_id, exc)
            return

        node.pending = False
        if not self.surface.is_attached(node) or node.rendered:
            log.debug("Dropping diagram render %s for a detached node", render_id)
            return

        node.mark_rendered(svg)
        await self._sink([Update(self.surface.index_of(node), node.html)])

    async def wait_idle(self):
        """Wait for every render started so far"""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
