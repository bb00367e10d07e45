"""Text for the centerline and target labels.

Values are formatted the way the y-axis shows them; directional targets
(arrows or a bare ``<``/``>``) are recognised here because they change
both the label text and whether a target line is drawn.
"""

from __future__ import annotations

__all__ = [
    "ARROW_DOWN",
    "ARROW_UP",
    "BASELINE_HEADER",
    "CURRENT_LEVEL_HEADER",
    "TARGET_HEADER",
    "arrow_direction",
    "centerline_header",
    "create_responsive_label",
    "format_target_prefix",
    "format_y_value",
    "has_arrow_symbol",
]

import math
import re

ARROW_UP = "↑"
ARROW_DOWN = "↓"
_ARROWS = re.compile("[↑↓→←]")
_BARE_COMPARISON = re.compile(r"^[<>]\s*$")

CURRENT_LEVEL_HEADER = "NUV. NIVEAU"
BASELINE_HEADER = "BASELINE"
TARGET_HEADER = "UDVIKLINGSMÅL"


def has_arrow_symbol(text: str | None) -> bool:
    """True for arrow characters, or a comparison sign with no number.

    ``"<"`` and ``"> "`` count as directional; ``"<18"`` and ``">= 80"``
    are ordinary targets.
    """
    if text is None or not text.strip():
        return False
    if _ARROWS.search(text):
        return True
    return bool(_BARE_COMPARISON.match(text))


def format_target_prefix(text: str | None) -> str:
    """Trim target text and turn a bare ``<``/``>`` into an arrow."""
    if text is None:
        return ""
    trimmed = text.strip()
    if trimmed == "<":
        return ARROW_DOWN
    if trimmed == ">":
        return ARROW_UP
    return trimmed


def arrow_direction(text: str | None) -> str | None:
    """``"down"``, ``"up"`` or None for a non-directional target."""
    if not has_arrow_symbol(text):
        return None
    formatted = format_target_prefix(text)
    if ARROW_UP in formatted:
        return "up"
    return "down"


def centerline_header(
    centerline_value: float | None = None,
    has_freeze: bool = False,
    has_shift: bool = False,
) -> str:
    """A fixed centerline, or a frozen baseline without shifts, is a baseline."""
    if centerline_value is not None and math.isfinite(centerline_value):
        return BASELINE_HEADER
    if has_freeze and not has_shift:
        return BASELINE_HEADER
    return CURRENT_LEVEL_HEADER


def _group_thousands(n: int) -> str:
    return f"{n:,}".replace(",", ".")


def _decimal(value: float, max_decimals: int = 2) -> str:
    if math.isclose(value, round(value), abs_tol=1e-10):
        return _group_thousands(int(round(value)))
    text = f"{value:.{max_decimals}f}".rstrip("0").rstrip(".")
    whole, _, frac = text.partition(".")
    sign = "-" if whole.startswith("-") else ""
    whole = _group_thousands(abs(int(whole)))
    return f"{sign}{whole},{frac}" if frac else f"{sign}{whole}"


def _format_count(value: float) -> str:
    magnitude = abs(value)
    if magnitude >= 1e6:
        return f"{_decimal(value / 1e6, 1)}M"
    if magnitude >= 1e4:
        return f"{_decimal(value / 1e3, 1)}K"
    return _group_thousands(int(round(value)))


def format_y_value(value: float | None, unit: str = "count") -> str:
    """Format a value as the y-axis would (Danish separators).

    ``percent`` values are on a 0-1 scale.
    """
    if value is None or not math.isfinite(value):
        return ""
    if unit == "percent":
        return f"{round(value * 100)}%"
    if unit == "count":
        return _format_count(value)
    return _decimal(value)


def create_responsive_label(header: str, value: str) -> str:
    """Two-line label block: header above the value."""
    if not value:
        return header
    return f"{header}\n{value}"
