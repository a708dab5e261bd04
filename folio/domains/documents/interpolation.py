import re
from typing import Any, Mapping

_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def interpolate(body: str, preamble: Mapping[str, Any]) -> str:
    """Replace {{key}} markers with string preamble values.

    Unknown keys and non-string values leave the marker in place so the author
    can see what is missing.
    """
    if not isinstance(preamble, Mapping):
        return body

    def _replace(match: "re.Match[str]") -> str:
        value = preamble.get(match.group(1))
        return value if isinstance(value, str) else match.group(0)

    return _PLACEHOLDER_RE.sub(_replace, body)
