from folio.domains.preview.highlighter import highlight_document
from folio.domains.preview.markup import MarkupRenderer
from folio.domains.preview.renderer import (
    Append,
    DiagramNode,
    PreviewSurface,
    RenderState,
    Truncate,
    Update,
    diff_sequences,
    patch,
)


class TestDiffSequences:
    def test_identical(self):
        assert diff_sequences(["a", "b"], ["a", "b"]) == []

    def test_update_and_truncate(self):
        assert diff_sequences(["a", "b", "c"], ["a", "x"]) == [Update(1, "x"), Truncate(2)]

    def test_append(self):
        assert diff_sequences(["a"], ["a", "b", "c"]) == [Append("b"), Append("c")]

    def test_from_empty(self):
        assert diff_sequences([], ["a"]) == [Append("a")]

    def test_to_empty(self):
        assert diff_sequences(["a", "b"], []) == [Truncate(0)]


class TestPatch:
    def test_single_character_change_yields_one_update(self):
        text = "\n".join(f"line {i}" for i in range(200))
        lines = highlight_document(text)

        changed = text.split("\n")
        changed[150] = "line 15X"
        new_lines, directives = patch(lines, "\n".join(changed))

        assert len(new_lines) == 200
        assert directives == [Update(150, new_lines[150].fragments)]

    def test_appending_a_line(self):
        lines, _ = patch([], "one\ntwo")
        new_lines, directives = patch(lines, "one\ntwo\nthree")
        assert directives == [Append(new_lines[2].fragments)]

    def test_removing_lines(self):
        lines, _ = patch([], "one\ntwo\nthree")
        _, directives = patch(lines, "one")
        assert directives == [Truncate(1)]

    def test_fence_change_updates_following_lines(self):
        lines, _ = patch([], "text\necho hi\nmore")
        _, directives = patch(lines, "```bash\necho hi\nmore")
        assert [directive.index for directive in directives] == [0, 1, 2]

    def test_render_state_keeps_previous_lines(self):
        state = RenderState()
        assert state.apply("a\nb") == [Append(state.lines[0].fragments), Append(state.lines[1].fragments)]
        assert state.apply("a\nb") == []


DIAGRAM_DOC = "# Title\n\n```mermaid\ngraph TD; A-->B\n```\n"


class TestPreviewSurface:
    def setup_method(self):
        self.markup = MarkupRenderer()

    def test_first_render_appends_every_block(self):
        surface = PreviewSurface()
        directives = surface.apply(self.markup.render_blocks(DIAGRAM_DOC))
        assert len(directives) == 2
        assert all(isinstance(directive, Append) for directive in directives)
        assert isinstance(surface.nodes[1], DiagramNode)

    def test_unchanged_blocks_produce_no_directives(self):
        surface = PreviewSurface()
        surface.apply(self.markup.render_blocks(DIAGRAM_DOC))
        assert surface.apply(self.markup.render_blocks(DIAGRAM_DOC)) == []

    def test_marked_diagram_is_kept(self):
        surface = PreviewSurface()
        surface.apply(self.markup.render_blocks(DIAGRAM_DOC))
        node = surface.nodes[1]
        node.mark_rendered("<svg/>")

        directives = surface.apply(self.markup.render_blocks(DIAGRAM_DOC))

        assert directives == []
        assert surface.nodes[1] is node
        assert surface.unrendered_diagrams() == []

    def test_changed_diagram_replaces_node(self):
        surface = PreviewSurface()
        surface.apply(self.markup.render_blocks(DIAGRAM_DOC))
        old = surface.nodes[1]
        old.pending = True

        directives = surface.apply(self.markup.render_blocks(DIAGRAM_DOC.replace("A-->B", "A-->C")))

        assert len(directives) == 1
        assert directives[0].index == 1
        assert surface.nodes[1] is not old
        assert not surface.is_attached(old)
        assert surface.unrendered_diagrams() == [surface.nodes[1]]

    def test_rendered_diagram_survives_block_inserted_above(self):
        surface = PreviewSurface()
        surface.apply(self.markup.render_blocks(DIAGRAM_DOC))
        node = surface.nodes[1]
        node.mark_rendered("<svg/>")

        edited = DIAGRAM_DOC.replace("# Title\n", "# Title\n\nNew paragraph\n")
        directives = surface.apply(self.markup.render_blocks(edited))

        assert surface.nodes[2] is node
        assert surface.unrendered_diagrams() == []
        assert directives == [Update(1, "<p>New paragraph</p>\n"), Append(node.html)]

    def test_rendered_diagram_survives_block_removed_above(self):
        edited = DIAGRAM_DOC.replace("# Title\n", "# Title\n\nNew paragraph\n")
        surface = PreviewSurface()
        surface.apply(self.markup.render_blocks(edited))
        node = surface.nodes[2]
        node.pending = True

        directives = surface.apply(self.markup.render_blocks(DIAGRAM_DOC))

        assert surface.nodes[1] is node
        assert surface.unrendered_diagrams() == []
        assert directives == [Update(1, node.html), Truncate(2)]

    def test_detach_all(self):
        surface = PreviewSurface()
        surface.apply(self.markup.render_blocks(DIAGRAM_DOC))
        node = surface.nodes[1]
        surface.detach_all()
        assert not surface.is_attached(node)
        assert surface.nodes == []
