"""Label measurement backed by Pillow fonts, with a character-class heuristic fallback."""
from __future__ import annotations

import re
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import ImageFont

DEFAULT_FONT_FAMILY = "sans-serif"
GENERIC_FONT_FALLBACKS = {
    "sans-serif": ["Arial", "Helvetica", "Liberation Sans", "DejaVu Sans"],
    "serif": ["Times New Roman", "Times", "Liberation Serif", "DejaVu Serif"],
    "monospace": ["Courier New", "Courier", "Liberation Mono", "DejaVu Sans Mono"],
}


class TextMeasurer:
    """Caches Pillow fonts per (family, size) and measures label widths."""

    FONT_DIRS = [
        Path("/System/Library/Fonts"),
        Path("/System/Library/Fonts/Supplemental"),
        Path("/Library/Fonts"),
        Path("~/Library/Fonts").expanduser(),
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
        Path("C:/Windows/Fonts"),
    ]

    def __init__(self, use_fonts: bool = True) -> None:
        self.use_fonts = use_fonts
        self._font_cache: Dict[Tuple[str, int], Optional[ImageFont.FreeTypeFont]] = {}
        self._font_paths: Dict[str, Optional[str]] = {}

    def font(self, size: float, family: Optional[str] = None) -> Optional[ImageFont.FreeTypeFont]:
        if not self.use_fonts:
            return None
        key_size = max(1, int(round(size)))
        family_list = family or DEFAULT_FONT_FAMILY
        cache_key = (family_list.lower(), key_size)
        if cache_key in self._font_cache:
            return self._font_cache[cache_key]

        candidates: List[str] = []
        for name in _split_family(family_list):
            for fam in GENERIC_FONT_FALLBACKS.get(name.lower(), [name]):
                resolved = self._locate_font(fam)
                if resolved:
                    candidates.append(resolved)
        candidates.append("DejaVuSans.ttf")

        font: Optional[ImageFont.FreeTypeFont] = None
        for candidate in candidates:
            try:
                font = ImageFont.truetype(candidate, key_size)
                break
            except OSError:
                continue
        self._font_cache[cache_key] = font
        return font

    def measure(self, text: str, size: float, family: Optional[str] = None) -> float:
        font = self.font(size, family)
        if font is None:
            return heuristic_width(text, size)
        return float(font.getlength(text))

    def line_height(self, size: float) -> float:
        return size * 1.2

    def _locate_font(self, family: str) -> Optional[str]:
        key = family.lower()
        if key in self._font_paths:
            return self._font_paths[key]
        normalized = re.sub(r"[^a-z0-9]+", "", key)
        best: Optional[Tuple[int, str]] = None
        if normalized:
            for directory in self.FONT_DIRS:
                if not directory.is_dir():
                    continue
                for path in directory.rglob("*.ttf"):
                    stem = re.sub(r"[^a-z0-9]+", "", path.stem.lower())
                    if stem in (normalized, normalized + "mt", normalized + "psmt"):
                        score = 0
                    elif stem.startswith(normalized):
                        score = 1
                    else:
                        continue
                    if best is None or score < best[0]:
                        best = (score, str(path))
        self._font_paths[key] = best[1] if best else None
        return self._font_paths[key]


def heuristic_width(text: str, font_size: float) -> float:
    width = 0.0
    for ch in text:
        if ch.isspace():
            width += font_size * 0.33
        elif ch in "il.,:;'|!":
            width += font_size * 0.3
        elif ch in "mwMW@#":
            width += font_size * 0.9
        else:
            width += font_size * 0.6
    return width


def wrap_label(
    text: str,
    width_limit: float,
    font_size: float,
    family: Optional[str] = None,
    measurer: Optional[TextMeasurer] = None,
) -> List[str]:
    """Greedy word wrap; a single word wider than the limit stays on its own line."""
    measurer = measurer or DEFAULT_MEASURER
    lines: List[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if not current or measurer.measure(candidate, font_size, family) <= width_limit:
            current = candidate
            continue
        lines.append(current)
        current = word
    if current:
        lines.append(current)
    return lines or [""]


def fit_font_size(
    text: str,
    width_limit: float,
    font_size: float,
    family: Optional[str] = None,
    measurer: Optional[TextMeasurer] = None,
    minimum: float = 6.0,
) -> float:
    """Largest size not above ``font_size`` at which ``text`` fits ``width_limit``."""
    measurer = measurer or DEFAULT_MEASURER
    width = measurer.measure(text, font_size, family)
    if width <= width_limit or width == 0:
        return font_size
    return max(minimum, font_size * width_limit / width)


def _split_family(family: str) -> List[str]:
    names = [part.strip().strip("'\"") for part in family.split(",")]
    return [name for name in names if name]


DEFAULT_MEASURER = TextMeasurer()
