"""
Preamble + body document codec.

The on-disk format is::

    ---
    key: scalar value
    listKey:
      - item1
    recordListKey:
      - field1: value
        field2: [a, b, c]
    ---

    body text (markdown)

Both directions go through ruamel.yaml (YAML 1.2, so ``yes``/``on`` stay
strings). The dumper is configured for indented block sequences and the
record fields are flow-styled, which gives the layout above.
"""

from __future__ import annotations

import io
import logging
import re
from datetime import date, datetime
from typing import Any, Mapping

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError
from ruamel.yaml.representer import RoundTripRepresenter

from folio.domains.documents.entities import StructuredDocument

log = logging.getLogger(__name__)

DELIMITER = "---"

_DOCUMENT_RE = re.compile(r"\A---\n(.*?)\n---\n?(.*)\Z", re.DOTALL)
_LEADING_BLANK_RE = re.compile(r"\A(?:[ \t]*\n)+")
_TRAILING_BLANK_RE = re.compile(r"(?:\n[ \t]*)+\Z")
_LINE_BREAK_RE = re.compile("[\r\n\x85\u2028\u2029]")


class PreambleRepresenter(RoundTripRepresenter):
    pass


def _represent_str(representer, data):
    # line breaks are escaped inside double quotes, never folded
    style = '"' if _LINE_BREAK_RE.search(data) else None
    return representer.represent_scalar("tag:yaml.org,2002:str", data, style=style)


def _represent_none(representer, data):
    return representer.represent_scalar("tag:yaml.org,2002:null", "null")


PreambleRepresenter.add_representer(str, _represent_str)
PreambleRepresenter.add_representer(type(None), _represent_none)

_loader = YAML(typ="safe", pure=True)

_dumper = YAML()
_dumper.Representer = PreambleRepresenter
_dumper.indent(mapping=2, sequence=4, offset=2)
_dumper.width = 4096
_dumper.allow_unicode = True


def parse(text: str) -> StructuredDocument:
    """Split text into preamble and body.

    Input without the leading delimiter block, or whose preamble does not
    decode to a mapping, is treated as body-only content.
    """
    text = text.replace("\r\n", "\n")
    match = _DOCUMENT_RE.match(text)
    if not match:
        log.debug("No preamble block found, treating %d chars as body", len(text))
        return StructuredDocument(preamble={}, body=text)

    raw_preamble, body = match.group(1), match.group(2)
    try:
        decoded = _loader.load(raw_preamble)
    except YAMLError as exc:
        log.warning("Unreadable preamble, treating document as body only: %s", exc)
        return StructuredDocument(preamble={}, body=text)

    if decoded is None:
        decoded = {}
    if not isinstance(decoded, dict):
        log.warning("Preamble decoded to %s instead of a mapping, treating document as body only",
                    type(decoded).__name__)
        return StructuredDocument(preamble={}, body=text)

    preamble = {str(key): value for key, value in decoded.items()}
    return StructuredDocument(preamble=preamble, body=_trim_blank_lines(body))


def serialize(document: StructuredDocument) -> str:
    """Encode a document; `parse(serialize(doc)) == doc` for UI-reachable values"""
    data = CommentedMap()
    for key, value in document.preamble.items():
        data[str(key)] = _block_value(value)

    stream = io.StringIO()
    _dumper.dump(data, stream)
    return f"{DELIMITER}\n{stream.getvalue()}{DELIMITER}\n\n{document.body}"


def _trim_blank_lines(body: str) -> str:
    body = _LEADING_BLANK_RE.sub("", body)
    return _TRAILING_BLANK_RE.sub("", body)


def _block_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        items = CommentedSeq()
        for item in value:
            items.append(_record(item) if isinstance(item, Mapping) else _scalar(item))
        return items
    if isinstance(value, Mapping):
        mapping = CommentedMap()
        for field, inner in value.items():
            mapping[str(field)] = _flow_value(inner)
        return mapping
    return _scalar(value)


def _record(record: Mapping) -> CommentedMap:
    fields = CommentedMap()
    for field, value in record.items():
        fields[str(field)] = _flow_value(value)
    if not fields:
        fields.fa.set_flow_style()
    return fields


def _flow_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        items = CommentedSeq(_flow_value(item) for item in value)
        items.fa.set_flow_style()
        return items
    if isinstance(value, Mapping):
        mapping = CommentedMap((str(field), _flow_value(inner)) for field, inner in value.items())
        mapping.fa.set_flow_style()
        return mapping
    return _scalar(value)


def _scalar(value: Any) -> Any:
    if value is None or isinstance(value, (str, bool, int, float, date, datetime)):
        return value
    # unknown objects are stored as their text form
    return str(value)
