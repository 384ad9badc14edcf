"""Named style themes."""
from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Theme:
    name: str
    description: str
    styles: Dict[str, Any] = field(default_factory=dict)


BUILTIN_THEMES: Dict[str, Theme] = {
    "default": Theme("Default", "Default light theme"),
    "dark": Theme(
        "Dark",
        "Dark theme for pathway visualization",
        {
            "node": {"fill": "#2D3748", "stroke": "#E2E8F0", "strokeWidth": 2},
            "connection": {"stroke": "#A0AEC0", "strokeWidth": 2},
            "enzyme": {"fill": "#2D3748", "stroke": "#E2E8F0"},
            "marker": {"colors": {"P": "#FFD700", "O": "#FC8181", "S": "#68D391", "N": "#90CDF4"}},
            "dna": {"strand1Color": "#90CDF4", "strand2Color": "#D6BCFA"},
            "rna": {"strandColor": "#ED8936"},
        },
    ),
    "blueprint": Theme(
        "Blueprint",
        "Technical blueprint style theme",
        {
            "node": {
                "fill": "#EBF8FF",
                "stroke": "#2B6CB0",
                "strokeWidth": 1.5,
                "labelFontFamily": "Courier New, monospace",
            },
            "connection": {"stroke": "#2B6CB0", "strokeWidth": 1.5, "dashArray": "5,3"},
            "enzyme": {"fill": "#E6FFFA", "stroke": "#2B6CB0", "strokeWidth": 1.5},
            "compartment": {"defaultColor": "#4299E1", "strokeOpacity": 0.5},
        },
    ),
    "scientific": Theme(
        "Scientific",
        "Clean theme suitable for scientific publications",
        {
            "node": {
                "fill": "#FFFFFF",
                "stroke": "#000000",
                "strokeWidth": 1,
                "labelFontFamily": "Arial, sans-serif",
                "labelFontSize": 10,
                "innerStroke": False,
            },
            "connection": {"stroke": "#000000", "strokeWidth": 1, "arrowSize": 8},
            "enzyme": {"fill": "#FFFFFF", "stroke": "#000000", "strokeWidth": 1, "labelFontSize": 9},
            "marker": {
                "colors": {"P": "#000000", "O": "#000000", "S": "#000000", "N": "#000000"},
                "fontWeight": "normal",
                "fontSize": 9,
            },
            "compartment": {
                "defaultColor": "#000000",
                "strokeOpacity": 0.3,
                "fontWeight": "normal",
                "fontSize": 10,
            },
        },
    ),
    "colorful": Theme(
        "Colorful",
        "Vibrant colorful theme for presentations",
        {
            "node": {"fill": "#FFFFFF", "stroke": "#805AD5", "strokeWidth": 3, "dropShadow": True},
            "connection": {"stroke": "#3182CE", "strokeWidth": 2.5, "curve": "curved"},
            "enzyme": {"fill": "#FED7E2", "stroke": "#D53F8C", "strokeWidth": 2, "cornerRadius": 10},
            "marker": {
                "colors": {"P": "#F6E05E", "O": "#F56565", "S": "#48BB78", "N": "#4299E1"},
                "fontSize": 12,
            },
            "dna": {"strand1Color": "#4FD1C5", "strand2Color": "#B794F4", "strokeWidth": 3},
            "rna": {"strandColor": "#F6AD55", "strokeWidth": 3},
        },
    ),
}


class ThemeRegistry:
    """Built-in themes plus themes registered at runtime.

    Each registry owns its custom themes; built-ins are shared read-only.
    """

    def __init__(self) -> None:
        self._custom: Dict[str, Theme] = {}

    def get_theme(self, name: str) -> Theme:
        if name in BUILTIN_THEMES:
            return BUILTIN_THEMES[name]
        if name in self._custom:
            return self._custom[name]
        logger.warning('theme "%s" not found, using default theme', name)
        return BUILTIN_THEMES["default"]

    def has_theme(self, name: str) -> bool:
        return name in BUILTIN_THEMES or name in self._custom

    def register_theme(
        self,
        name: str,
        styles: Optional[Mapping[str, Any]] = None,
        *,
        description: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> "ThemeRegistry":
        if not name:
            raise ValueError("theme name must be a non-empty string")
        if styles is not None and not isinstance(styles, Mapping):
            raise TypeError(f"theme styles must be a mapping, got {type(styles).__name__}")
        self._custom[name] = Theme(
            display_name or name,
            description or f"Custom theme: {name}",
            copy.deepcopy(dict(styles or {})),
        )
        return self

    def list_themes(self) -> List[Dict[str, Any]]:
        listing: List[Dict[str, Any]] = []
        for key, theme in BUILTIN_THEMES.items():
            listing.append(
                {"id": key, "name": theme.name, "description": theme.description, "is_custom": False}
            )
        for key, theme in self._custom.items():
            listing.append(
                {"id": key, "name": theme.name, "description": theme.description, "is_custom": True}
            )
        return listing
