from folio.domains.preview.highlighter import Fragment, TokenLine, highlight_document, highlight_line
from folio.domains.preview.markup import Block, MarkupRenderer, extract_toc, slugify
from folio.domains.preview.pipeline import PreviewPipeline, preview_scroll_top, scroll_ratio
from folio.domains.preview.renderer import Append, RenderState, Truncate, Update, diff_sequences, patch
from folio.domains.preview.theme import DEFAULT_CONFIG, RenderConfig

__all__ = [
    "Fragment",
    "TokenLine",
    "highlight_line",
    "highlight_document",
    "Block",
    "MarkupRenderer",
    "extract_toc",
    "slugify",
    "PreviewPipeline",
    "scroll_ratio",
    "preview_scroll_top",
    "Update",
    "Append",
    "Truncate",
    "RenderState",
    "diff_sequences",
    "patch",
    "RenderConfig",
    "DEFAULT_CONFIG",
]
