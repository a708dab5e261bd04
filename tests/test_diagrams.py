import asyncio

import pytest

from folio.config import Settings
from folio.domains.preview.diagrams import (
    CliDiagramRenderer,
    DiagramCoordinator,
    DiagramRenderError,
    DiagramRenderer,
    HttpDiagramRenderer,
    build_diagram_renderer,
)
from folio.domains.preview.markup import MarkupRenderer
from folio.domains.preview.renderer import PreviewSurface, Update

DOC = "Intro\n\n```mermaid\ngraph TD; A-->B\n```\n"


class GatedRenderer(DiagramRenderer):
    """Resolves only when the test opens the gate"""

    def __init__(self):
        self.gate = asyncio.Event()
        self.calls = []
        self.discarded = []

    async def render(self, render_id, language, source):
        self.calls.append(source)
        await self.gate.wait()
        return f"<svg>{source.strip()}</svg>"

    async def discard(self, render_id):
        self.discarded.append(render_id)


class FailingRenderer(GatedRenderer):
    async def render(self, render_id, language, source):
        self.calls.append(source)
        raise DiagramRenderError("syntax error in graph")


@pytest.fixture()
def surface():
    surface = PreviewSurface()
    surface.apply(MarkupRenderer().render_blocks(DOC))
    return surface


@pytest.fixture()
def received():
    return []


def coordinator_for(renderer, surface, received):
    async def sink(directives):
        received.append(directives)

    return DiagramCoordinator(renderer, surface, sink)


async def test_injects_result_into_attached_node(surface, received):
    renderer = GatedRenderer()
    coordinator = coordinator_for(renderer, surface, received)

    assert coordinator.schedule() == 1
    renderer.gate.set()
    await coordinator.wait_idle()

    node = surface.nodes[1]
    assert node.rendered
    assert received == [[Update(1, node.html)]]
    assert "<svg>graph TD; A-->B</svg>" in node.html


async def test_never_renders_a_node_twice(surface, received):
    renderer = GatedRenderer()
    coordinator = coordinator_for(renderer, surface, received)

    coordinator.schedule()
    assert coordinator.schedule() == 0
    surface.apply(MarkupRenderer().render_blocks(DOC))
    assert coordinator.schedule() == 0

    renderer.gate.set()
    await coordinator.wait_idle()
    assert len(renderer.calls) == 1


async def test_result_for_replaced_node_is_dropped(surface, received):
    renderer = GatedRenderer()
    coordinator = coordinator_for(renderer, surface, received)
    coordinator.schedule()
    stale = surface.nodes[1]

    surface.apply(MarkupRenderer().render_blocks(DOC.replace("A-->B", "A-->C")))
    renderer.gate.set()
    await coordinator.wait_idle()

    assert received == []
    assert not stale.rendered
    assert not surface.nodes[1].rendered


async def test_result_after_detach_is_dropped(surface, received):
    renderer = GatedRenderer()
    coordinator = coordinator_for(renderer, surface, received)
    coordinator.schedule()

    surface.detach_all()
    renderer.gate.set()
    await coordinator.wait_idle()

    assert received == []


async def test_failure_keeps_source_and_discards_artifacts(surface, received):
    renderer = FailingRenderer()
    coordinator = coordinator_for(renderer, surface, received)

    coordinator.schedule()
    await coordinator.wait_idle()

    node = surface.nodes[1]
    assert node.failed
    assert not node.rendered
    assert len(renderer.discarded) == 1
    assert '<pre class="diagram"' in node.html
    assert received == []
    assert coordinator.schedule() == 0


async def test_cli_renderer_reports_missing_executable(tmp_path):
    renderer = CliDiagramRenderer("folio-no-such-mmdc", timeout=1.0, workdir=str(tmp_path))
    with pytest.raises(DiagramRenderError):
        await renderer.render("x1", "mermaid", "graph TD; A-->B")
    assert list(tmp_path.iterdir()) == []


async def test_cli_renderer_rejects_other_languages(tmp_path):
    renderer = CliDiagramRenderer(workdir=str(tmp_path))
    with pytest.raises(DiagramRenderError):
        await renderer.render("x2", "plantuml", "@startuml\n@enduml")


def test_build_diagram_renderer():
    assert build_diagram_renderer(Settings(diagram_renderer="none")) is None
    assert isinstance(build_diagram_renderer(Settings(diagram_renderer="http")), HttpDiagramRenderer)
    assert isinstance(build_diagram_renderer(Settings(diagram_renderer="cli")), CliDiagramRenderer)


async def test_cli_renderer_reads_output_and_cleans_up(tmp_path):
    tool = tmp_path / "fake-mmdc"
    tool.write_text('#!/bin/sh\nsed "s/^/<svg>/" "$2" > "$4"\n')
    tool.chmod(0o755)
    workdir = tmp_path / "work"
    workdir.mkdir()
    renderer = CliDiagramRenderer(str(tool), timeout=5.0, workdir=str(workdir))

    svg = await renderer.render("x3", "mermaid", "graph TD; A-->B\n")

    assert svg == "<svg>graph TD; A-->B\n"
    assert list(workdir.iterdir()) == []


async def test_cli_renderer_discard_removes_leftover_output(tmp_path):
    renderer = CliDiagramRenderer(workdir=str(tmp_path))
    leftover = tmp_path / "folio-x4.svg"
    leftover.write_text("<svg/>")

    await renderer.discard("x4")
    await renderer.discard("x4")

    assert not leftover.exists()
