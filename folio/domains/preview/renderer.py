"""
Incremental rendering.

Nothing here touches a DOM. Each pass compares the previous rendered
sequence with the new one and yields the smallest list of directives that
turns one into the other; clients replay them against their own view.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from folio.domains.preview.highlighter import TokenLine, highlight_document
from folio.domains.preview.markup import Block, DiagramSource

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Update:
    index: int
    payload: Any


@dataclass(frozen=True)
class Append:
    payload: Any


@dataclass(frozen=True)
class Truncate:
    length: int


Directive = Union[Update, Append, Truncate]


def diff_sequences(
    previous: Sequence[Any],
    current: Sequence[Any],
    key: Callable[[Any], Any] = lambda item: item,
    payload: Callable[[Any], Any] = lambda item: item,
) -> List[Directive]:
    """Directives turning `previous` into `current`, compared index by index"""
    directives: List[Directive] = []
    common = min(len(previous), len(current))

    for index in range(common):
        if key(previous[index]) != key(current[index]):
            directives.append(Update(index, payload(current[index])))

    for item in current[common:]:
        directives.append(Append(payload(item)))

    if len(current) < len(previous):
        directives.append(Truncate(len(current)))

    return directives


def patch(previous_lines: Sequence[TokenLine], new_raw_text: str) -> Tuple[List[TokenLine], List[Directive]]:
    """Re-tokenize the text and diff it against the previous overlay lines"""
    new_lines = highlight_document(new_raw_text)
    directives = diff_sequences(
        previous_lines,
        new_lines,
        key=lambda line: line.fragments,
        payload=lambda line: line.fragments,
    )
    return new_lines, directives


class RenderState:
    """Token lines currently shown by one edit pane overlay"""

    def __init__(self):
        self.lines: List[TokenLine] = []

    def apply(self, raw_text: str) -> List[Directive]:
        self.lines, directives = patch(self.lines, raw_text)
        return directives

    def reset(self):
        self.lines = []


class PreviewNode:
    """One top-level block of the rendered preview"""

    def __init__(self, block: Block):
        self.block = block

    @property
    def html(self) -> str:
        return self.block.html

    def __repr__(self) -> str:
        return f"PreviewNode(html_length={len(self.block.html)})"


class DiagramNode(PreviewNode):
    """A diagram block with its idempotency flags.

    `pending` is set when a render is started, `rendered` once its output is
    injected, `failed` when the renderer gave up. Any of them means the node
    must never be handed to the renderer again.
    """

    def __init__(self, block: Block):
        super().__init__(block)
        self.rendered = False
        self.pending = False
        self.failed = False
        self.svg: Optional[str] = None

    @property
    def language(self) -> str:
        return self.block.diagram.language

    @property
    def source(self) -> str:
        return self.block.diagram.source

    @property
    def is_marked(self) -> bool:
        return self.rendered or self.pending or self.failed

    def matches(self, block: Block) -> bool:
        return block.diagram is not None and block.diagram == self.block.diagram

    def mark_rendered(self, svg: str):
        self.svg = svg
        self.rendered = True

    @property
    def html(self) -> str:
        if not self.rendered:
            return self.block.html
        return (
            f'<div class="diagram diagram-rendered" data-diagram="{self.language}" '
            f'data-diagram-rendered="true">{self.svg}</div>'
        )

    def __repr__(self) -> str:
        return (f"DiagramNode(language={self.language!r}, rendered={self.rendered}, "
                f"pending={self.pending}, failed={self.failed})")


def make_node(block: Block) -> PreviewNode:
    if block.diagram is not None:
        return DiagramNode(block)
    return PreviewNode(block)


def _is_marked_diagram(node: PreviewNode) -> bool:
    return isinstance(node, DiagramNode) and node.is_marked


class PreviewSurface:
    """Rendered preview nodes of one editing session"""

    def __init__(self):
        self.nodes: List[PreviewNode] = []
        self.attached = True

    def apply(self, blocks: Sequence[Block]) -> List[Directive]:
        """Reconcile the nodes with freshly rendered blocks.

        Marked diagram nodes are looked up by language and source wherever
        their block lands, so inserting or removing text around a diagram
        never starts a second render for it.
        """
        marked: Dict[DiagramSource, List[DiagramNode]] = {}
        for old in self.nodes:
            if isinstance(old, DiagramNode) and old.is_marked:
                marked.setdefault(old.block.diagram, []).append(old)

        directives: List[Directive] = []
        nodes: List[PreviewNode] = []

        for index, block in enumerate(blocks):
            previous = self.nodes[index] if index < len(self.nodes) else None
            candidates = marked.get(block.diagram) if block.diagram is not None else None

            if candidates:
                node = candidates.pop(0)
            elif previous is not None and previous.block == block and not _is_marked_diagram(previous):
                node = previous
            else:
                node = make_node(block)

            nodes.append(node)
            if previous is None:
                directives.append(Append(node.html))
            elif previous is not node and previous.html != node.html:
                directives.append(Update(index, node.html))

        if len(blocks) < len(self.nodes):
            directives.append(Truncate(len(blocks)))

        self.nodes = nodes
        return directives

    def is_attached(self, node: PreviewNode) -> bool:
        return self.attached and any(existing is node for existing in self.nodes)

    def index_of(self, node: PreviewNode) -> int:
        for index, existing in enumerate(self.nodes):
            if existing is node:
                return index
        raise ValueError("Node is not attached to this surface")

    def unrendered_diagrams(self) -> List[DiagramNode]:
        return [node for node in self.nodes if isinstance(node, DiagramNode) and not node.is_marked]

    def html(self) -> str:
        return "".join(node.html for node in self.nodes)

    def detach_all(self):
        log.debug("Detaching %d preview nodes", len(self.nodes))
        self.nodes = []
        self.attached = False
