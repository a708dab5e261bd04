"""Markdown to HTML for previews and published pages."""

import html
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from markdown_it import MarkdownIt
from markdown_it.token import Token

from folio.domains.preview.highlighter import fragments_to_html, highlight_line, language_family
from folio.domains.preview.theme import DEFAULT_CONFIG, RenderConfig

_TAG_RE = re.compile(r"<[^>]*>")
_SLUG_SEPARATOR_RE = re.compile(r"[^a-z0-9àâéèêëïîôùûüÿçœæ]+")


@dataclass(frozen=True)
class DiagramSource:
    language: str
    source: str


@dataclass(frozen=True)
class Block:
    """One top-level rendered block; `diagram` is set for diagram fences"""
    html: str
    diagram: Optional[DiagramSource] = None


@dataclass(frozen=True)
class TocEntry:
    text: str
    slug: str


def slugify(text: str) -> str:
    text = _TAG_RE.sub("", text.lower())
    return _SLUG_SEPARATOR_RE.sub("-", text).strip("-")


def extract_toc(markdown: str) -> List[TocEntry]:
    """Second-level headings of a document, in order"""
    if not markdown:
        return []
    return [
        TocEntry(text=line[3:], slug=slugify(line[3:]))
        for line in markdown.split("\n")
        if line.startswith("## ")
    ]


class MarkupRenderer:
    """Converts markdown to HTML with highlighted code and marked diagram fences."""

    def __init__(self, config: RenderConfig = DEFAULT_CONFIG):
        self.config = config
        self._md = MarkdownIt("commonmark", {"html": True}).enable("table").enable("strikethrough")
        self._md.renderer.rules["fence"] = self._render_fence
        self._md.renderer.rules["code_inline"] = self._render_code_inline
        self._md.renderer.rules["heading_open"] = self._render_heading_open

    def render_html(self, markdown: str) -> str:
        return self._md.render(markdown, {})

    def render_blocks(self, markdown: str) -> List[Block]:
        """Render each top-level block on its own so previews can be diffed"""
        env: Dict[str, Any] = {}
        tokens = self._md.parse(markdown, env)

        blocks: List[Block] = []
        group: List[Token] = []
        depth = 0
        for token in tokens:
            group.append(token)
            depth += token.nesting
            if depth == 0:
                blocks.append(self._block(group, env))
                group = []

        if group:
            blocks.append(self._block(group, env))
        return blocks

    def _block(self, group: Sequence[Token], env: Dict[str, Any]) -> Block:
        rendered = self._md.renderer.render(group, self._md.options, env)
        diagram = None
        if len(group) == 1 and group[0].type == "fence":
            language = self._fence_language(group[0])
            if language in self.config.diagram_languages:
                diagram = DiagramSource(language=language, source=group[0].content)
        return Block(html=rendered, diagram=diagram)

    @staticmethod
    def _fence_language(token: Token) -> str:
        return token.info.strip().split(maxsplit=1)[0].lower() if token.info.strip() else ""

    def _render_fence(self, tokens, idx, options, env):
        token = tokens[idx]
        language = self._fence_language(token)
        code = token.content

        if language in self.config.diagram_languages:
            # raw source stays visible until a diagram renderer replaces it
            return (
                f'<pre class="diagram" data-diagram="{html.escape(language)}">'
                f'<code class="language-{html.escape(language)}">{html.escape(code)}</code></pre>\n'
            )

        lines = code[:-1].split("\n") if code.endswith("\n") else code.split("\n")
        if language_family(language) is None:
            body = html.escape("\n".join(lines), quote=False)
        else:
            body = "\n".join(
                fragments_to_html(highlight_line(line, language, in_code=True), self.config) if line else ""
                for line in lines
            )
        class_attr = f' class="language-{html.escape(language)}"' if language else ""
        return f'<div class="md-code"><pre class="md-code-plain"><code{class_attr}>{body}</code></pre></div>\n'

    def _render_code_inline(self, tokens, idx, options, env):
        return f'<code class="md-inline-code">{html.escape(tokens[idx].content, quote=False)}</code>'

    def _render_heading_open(self, tokens, idx, options, env):
        token = tokens[idx]
        text = tokens[idx + 1].content if idx + 1 < len(tokens) else ""
        token.attrSet("id", slugify(text))
        if token.tag in ("h2", "h3"):
            token.attrSet("class", f"md-{token.tag}")
        return self._md.renderer.renderToken(tokens, idx, options, env)
