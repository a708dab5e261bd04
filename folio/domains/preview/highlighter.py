"""
Line-level syntax coloring for the edit pane overlay.

Every function here is pure: the same line (and code-block context) always
yields the same fragments, and the fragment texts always concatenate back to
the input line. The only cross-line state is whether a fenced code block is
open, tracked by `highlight_document`.
"""

import html
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import List, Optional, Tuple

from pygments import lex
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.token import Token
from pygments.util import ClassNotFound

from folio.domains.preview.theme import DEFAULT_CONFIG, RenderConfig

log = logging.getLogger(__name__)

FENCE = "```"


@dataclass(frozen=True)
class Fragment:
    text: str
    style: str = "text"


@dataclass(frozen=True)
class TokenLine:
    raw_text: str
    fragments: Tuple[Fragment, ...]


LANGUAGE_FAMILIES = {
    "bash": "shell", "sh": "shell", "shell": "shell", "zsh": "shell", "console": "shell",
    "js": "clike", "javascript": "clike", "jsx": "clike", "ts": "clike", "typescript": "clike",
    "tsx": "clike", "c": "clike", "cpp": "clike", "java": "clike", "go": "clike",
    "rust": "clike", "json": "clike",
    "env": "env", "dotenv": "env", "ini": "env", "properties": "env",
}

# fence names pygments knows under another alias
FAMILY_LEXERS = {"shell": "bash", "zsh": "bash", "console": "bash", "env": "ini", "dotenv": "ini"}
FAMILY_DEFAULT_LEXERS = {"shell": "bash", "clike": "javascript", "env": "ini"}

_HEADING_RE = re.compile(r"^(#{1,6} )(.*)$")
_TASK_RE = re.compile(r"^(\s*[-*+] \[[ xX]\] )(.*)$")
_BULLET_RE = re.compile(r"^(\s*[-*+] )(.*)$")
_NUMBERED_RE = re.compile(r"^(\s*\d+[.)] )(.*)$")
_QUOTE_RE = re.compile(r"^(>+ ?)(.*)$")
_RULE_RE = re.compile(r"^(?:-{3,}|\*{3,}|_{3,})\s*$")

# first alternative that matches at a position wins
_INLINE_RE = re.compile(
    r"(?P<bold>\*\*[^*]+\*\*)"
    r"|(?P<italic>\*[^*]+\*)"
    r"|(?P<strike>~~[^~]+~~)"
    r"|(?P<code>`[^`]+`)"
    r"|(?P<image>!\[[^\]]*\]\([^)]+\))"
    r"|(?P<link>\[[^\]]+\]\([^)]+\))"
)
_INLINE_STYLES = {
    "bold": "bold", "italic": "italic", "strike": "strike",
    "code": "code-span", "image": "link", "link": "link",
}


def language_family(info: Optional[str]) -> Optional[str]:
    """Map a fence info string (```` ```ts title ````) to a tokenizer family"""
    if not info:
        return None
    words = info.strip().split()
    if not words:
        return None
    return LANGUAGE_FAMILIES.get(words[0].lower())


def highlight_line(line: str, language: Optional[str] = None, in_code: bool = False) -> Tuple[Fragment, ...]:
    """Tokenize one line.

    `in_code` marks a line inside a fenced block; `language` is the fence
    info string of that block. Fence delimiter lines are recognized in both
    contexts.
    """
    if not line:
        return ()
    if line.startswith(FENCE):
        return (Fragment(line, "fence"),)
    if in_code:
        return _highlight_code(line, language_family(language), language)
    return _highlight_body(line)


def highlight_document(text: str) -> List[TokenLine]:
    lines: List[TokenLine] = []
    in_code = False
    language: Optional[str] = None

    for line in text.split("\n"):
        lines.append(TokenLine(line, highlight_line(line, language, in_code)))
        if line.startswith(FENCE):
            if in_code:
                in_code, language = False, None
            else:
                in_code, language = True, line[len(FENCE):]

    return lines


def fragments_to_html(fragments: Tuple[Fragment, ...], config: RenderConfig = DEFAULT_CONFIG) -> str:
    if not fragments:
        # zero-width space so an empty overlay line keeps its height
        return "\u200b"
    return "".join(
        f'<span class="tok-{fragment.style}" style="color:{config.color_for(fragment.style)}">'
        f"{html.escape(fragment.text, quote=False)}</span>"
        for fragment in fragments
    )


def _highlight_body(line: str) -> Tuple[Fragment, ...]:
    match = _HEADING_RE.match(line)
    if match:
        style = "title" if match.group(1) == "# " else "heading"
        return _pair(match.group(1), "heading-marker", match.group(2), style)

    if _RULE_RE.match(line):
        return (Fragment(line, "rule"),)

    match = _TASK_RE.match(line)
    if match:
        return (Fragment(match.group(1), "task"),) + _highlight_inline(match.group(2))

    for pattern in (_BULLET_RE, _NUMBERED_RE):
        match = pattern.match(line)
        if match:
            return (Fragment(match.group(1), "list-marker"),) + _highlight_inline(match.group(2))

    match = _QUOTE_RE.match(line)
    if match:
        return _pair(match.group(1), "quote-marker", match.group(2), "quote")

    if line.startswith("|"):
        return (Fragment(line, "table"),)

    return _highlight_inline(line)


def _highlight_inline(text: str) -> Tuple[Fragment, ...]:
    fragments = []
    position = 0
    for match in _INLINE_RE.finditer(text):
        if match.start() > position:
            fragments.append(Fragment(text[position:match.start()], "text"))
        fragments.append(Fragment(match.group(0), _INLINE_STYLES[match.lastgroup]))
        position = match.end()
    if position < len(text):
        fragments.append(Fragment(text[position:], "text"))
    return tuple(fragments)


def _highlight_code(line: str, family: Optional[str], language: Optional[str]) -> Tuple[Fragment, ...]:
    if family is None:
        return (Fragment(line, "code"),)

    fragments: List[Fragment] = []
    rest = line
    if family == "shell" and line.startswith("$ "):
        fragments.append(Fragment("$ ", "prompt"))
        rest = line[2:]

    lexer = _lexer_for(family, language)
    remaining = len(rest)
    # lexers see a trailing newline; it is cut off again here
    for token_type, value in lex(rest, lexer):
        value = value[:remaining]
        if not value:
            break
        remaining -= len(value)
        _append(fragments, value, _style_for(token_type, value, family))

    if "".join(fragment.text for fragment in fragments) != line:
        log.debug("Lexer altered a %s line, falling back to plain code", family)
        return (Fragment(line, "code"),)
    return tuple(fragments)


@lru_cache(maxsize=None)
def _lexer_for(family: str, language: Optional[str]) -> Lexer:
    name = language.strip().split()[0].lower()
    try:
        return get_lexer_by_name(FAMILY_LEXERS.get(name, name), stripnl=False)
    except ClassNotFound:
        return get_lexer_by_name(FAMILY_DEFAULT_LEXERS[family], stripnl=False)


def _style_for(token_type, value: str, family: str) -> str:
    if token_type in Token.Comment:
        return "comment"
    if family == "env":
        if token_type in Token.Name.Attribute:
            return "env-key"
        if token_type in Token.Literal.String:
            return "env-value"
        if token_type in Token.Keyword:
            return "section"
    if token_type in Token.Name.Variable or token_type in Token.Literal.String.Interpol:
        return "variable"
    if token_type in Token.Keyword or token_type in Token.Name.Builtin:
        return "keyword"
    if token_type in Token.Literal.String:
        return "string"
    if token_type in Token.Literal.Number:
        return "number"
    if token_type in Token.Operator or token_type in Token.Punctuation:
        return "operator"
    if token_type in Token.Name:
        return "identifier"
    if value.isspace():
        return "code"
    if family == "shell":
        return "flag" if value.startswith("-") and len(value) > 1 else "identifier"
    return "code"


def _append(fragments: List[Fragment], text: str, style: str):
    if fragments and fragments[-1].style == style:
        fragments[-1] = Fragment(fragments[-1].text + text, style)
    else:
        fragments.append(Fragment(text, style))


def _pair(first: str, first_style: str, second: str, second_style: str) -> Tuple[Fragment, ...]:
    if not second:
        return (Fragment(first, first_style),)
    return (Fragment(first, first_style), Fragment(second, second_style))
