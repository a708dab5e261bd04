"""
Immutable render configuration.

Palettes, debounce timing and the set of diagram languages travel through
render calls as one frozen value instead of living in module-level state.
The theme choice itself is persisted by the settings service.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import FrozenSet, Mapping

DARK_PALETTE = MappingProxyType({
    "white": "#e8e8ec",
    "body": "#c8c8cc",
    "secondary": "#9a9aa0",
    "tertiary": "#888890",
    "blue": "#3b82f6",
    "blue_hover": "#60a5fa",
    "pink": "#f472b6",
    "purple": "#e879f9",
    "green": "#34d399",
    "yellow": "#fbbf24",
})

LIGHT_PALETTE = MappingProxyType({
    "white": "#1a1a24",
    "body": "#3a3a44",
    "secondary": "#5a5a66",
    "tertiary": "#72727e",
    "blue": "#2563eb",
    "blue_hover": "#1d4ed8",
    "pink": "#be185d",
    "purple": "#7e22ce",
    "green": "#065f46",
    "yellow": "#92400e",
})

PALETTES = {"dark": DARK_PALETTE, "light": LIGHT_PALETTE}

# token style -> palette entry
STYLE_COLORS = MappingProxyType({
    "text": "body",
    "title": "white",
    "heading": "white",
    "heading-marker": "tertiary",
    "list-marker": "pink",
    "task": "pink",
    "quote-marker": "blue",
    "quote": "secondary",
    "rule": "tertiary",
    "table": "secondary",
    "bold": "yellow",
    "italic": "purple",
    "strike": "tertiary",
    "code-span": "green",
    "link": "blue",
    "fence": "tertiary",
    "code": "green",
    "identifier": "blue_hover",
    "comment": "tertiary",
    "keyword": "pink",
    "string": "green",
    "variable": "yellow",
    "number": "yellow",
    "flag": "purple",
    "operator": "tertiary",
    "prompt": "tertiary",
    "env-key": "purple",
    "env-value": "green",
    "section": "pink",
})


@dataclass(frozen=True)
class RenderConfig:
    theme: str = "dark"
    debounce_seconds: float = 0.15
    diagram_languages: FrozenSet[str] = frozenset({"mermaid"})

    @classmethod
    def for_theme(cls, theme: str, **overrides) -> "RenderConfig":
        """Build a config for a named theme, falling back to dark"""
        name = theme if theme in PALETTES else "dark"
        return cls(theme=name, **overrides)

    @property
    def palette(self) -> Mapping[str, str]:
        return PALETTES.get(self.theme, DARK_PALETTE)

    def color_for(self, style: str) -> str:
        return self.palette[STYLE_COLORS.get(style, "body")]


DEFAULT_CONFIG = RenderConfig()
