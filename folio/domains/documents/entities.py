from typing import Any, Dict, Mapping, Optional


class StructuredDocument:
    """A preamble of key/value metadata followed by a free-text markdown body.

    Preamble values are scalars, lists of scalars or lists of flat records
    (records may carry inline-list fields). Equality compares the decoded
    preamble and the body text.
    """

    def __init__(self, preamble: Optional[Mapping[str, Any]] = None, body: str = ""):
        self.preamble: Dict[str, Any] = dict(preamble or {})
        self.body = body

    def __eq__(self, other) -> bool:
        if not isinstance(other, StructuredDocument):
            return False
        return self.preamble == other.preamble and self.body == other.body

    def __repr__(self) -> str:
        return f"StructuredDocument(keys={list(self.preamble)}, body_length={len(self.body)})"
