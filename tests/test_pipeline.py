import asyncio

import pytest

from folio.domains.preview.diagrams import DiagramRenderer
from folio.domains.preview.pipeline import OVERLAY, PREVIEW, PreviewPipeline, preview_scroll_top, scroll_ratio
from folio.domains.preview.renderer import Append, Update
from folio.domains.preview.theme import RenderConfig

QUICK = RenderConfig(debounce_seconds=0.05)


class Recorder:
    def __init__(self):
        self.messages = []

    async def __call__(self, target, directives):
        self.messages.append((target, directives))

    def for_target(self, target):
        return [directives for sent_to, directives in self.messages if sent_to == target]


class InstantRenderer(DiagramRenderer):
    def __init__(self):
        self.calls = 0

    async def render(self, render_id, language, source):
        self.calls += 1
        return "<svg>ok</svg>"


class TestDebounce:
    async def test_overlay_is_patched_on_every_edit(self):
        sink = Recorder()
        pipeline = PreviewPipeline(sink, config=QUICK)

        await pipeline.on_edit("# One")
        await pipeline.on_edit("# One\nmore")

        overlay = sink.for_target(OVERLAY)
        assert len(overlay) == 2
        assert isinstance(overlay[1][0], Append)
        pipeline.close()

    async def test_only_last_edit_in_quiet_period_renders(self):
        sink = Recorder()
        pipeline = PreviewPipeline(sink, config=QUICK)

        await pipeline.on_edit("# One")
        await pipeline.on_edit("# Two")
        await pipeline.on_edit("# Three")
        assert pipeline.render_count == 0
        assert pipeline.render_pending

        await asyncio.sleep(0.2)
        await pipeline.flush()

        assert pipeline.render_count == 1
        assert "Three" in pipeline.surface.html()
        assert "One" not in pipeline.surface.html()
        assert len(sink.for_target(PREVIEW)) == 1

    async def test_flush_renders_pending_edit(self):
        sink = Recorder()
        pipeline = PreviewPipeline(sink, config=RenderConfig(debounce_seconds=10))
        await pipeline.on_edit("Hello")

        await pipeline.flush()

        assert pipeline.render_count == 1
        assert not pipeline.render_pending

    async def test_close_cancels_pending_render(self):
        sink = Recorder()
        pipeline = PreviewPipeline(sink, config=QUICK)
        await pipeline.on_edit("# Soon gone")

        pipeline.close()
        await asyncio.sleep(0.15)

        assert pipeline.render_count == 0
        assert sink.for_target(PREVIEW) == []


class TestPreviewContent:
    async def test_open_renders_immediately(self):
        sink = Recorder()
        pipeline = PreviewPipeline(sink, config=QUICK)

        await pipeline.open("# Title\n\nText")

        assert pipeline.render_count == 1
        assert len(sink.for_target(PREVIEW)[0]) == 2

    async def test_interpolation_for_pages(self):
        sink = Recorder()
        pipeline = PreviewPipeline(sink, config=QUICK, preamble={"name": "Ada"}, interpolate_body=True)

        await pipeline.open("Hello {{name}}")
        assert "Hello Ada" in pipeline.surface.html()

        await pipeline.set_preamble({"name": "Grace"})
        await pipeline.flush()
        assert "Hello Grace" in pipeline.surface.html()

    async def test_no_interpolation_by_default(self):
        pipeline = PreviewPipeline(Recorder(), config=QUICK, preamble={"name": "Ada"})
        await pipeline.open("Hello {{name}}")
        assert "Hello {{name}}" in pipeline.surface.html()

    async def test_diagram_rendered_once_across_edits(self):
        sink = Recorder()
        renderer = InstantRenderer()
        pipeline = PreviewPipeline(sink, config=QUICK, diagram_renderer=renderer)
        text = "Intro\n\n```mermaid\ngraph TD; A-->B\n```"

        await pipeline.open(text)
        await pipeline.flush()
        await pipeline.on_edit(text)
        await pipeline.flush()

        assert renderer.calls == 1
        assert "<svg>ok</svg>" in pipeline.surface.html()
        diagram_updates = [d for directives in sink.for_target(PREVIEW) for d in directives if isinstance(d, Update)]
        assert len(diagram_updates) == 1


class TestScroll:
    def test_ratio(self):
        assert scroll_ratio(250, 1000, 500) == 0.5
        assert scroll_ratio(0, 1000, 500) == 0.0
        assert scroll_ratio(500, 1000, 500) == 1.0

    def test_unscrollable(self):
        assert scroll_ratio(0, 400, 400) == 0.0
        assert scroll_ratio(10, 300, 400) == 0.0

    def test_clamped(self):
        assert scroll_ratio(600, 1000, 500) == 1.0
        assert scroll_ratio(-5, 1000, 500) == 0.0

    def test_preview_scroll_top(self):
        assert preview_scroll_top(0.5, 2000, 1000) == 500
        assert preview_scroll_top(0.5, 800, 1000) == 0

    async def test_only_forwarded_in_split_layout(self):
        pipeline = PreviewPipeline(Recorder(), config=QUICK)
        assert pipeline.on_scroll(250, 1000, 500) == 0.5

        pipeline.set_layout("editor")
        assert pipeline.on_scroll(250, 1000, 500) is None

        with pytest.raises(ValueError):
            pipeline.set_layout("sideways")
