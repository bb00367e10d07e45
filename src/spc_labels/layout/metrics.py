"""Text metrics: label heights in absolute and panel (NPC) units.

The provider never fails. When no drawing surface is available, or
measuring raises, it returns the configured fallback height and marks the
result as degraded. A failing cache is skipped, never the measurement.
"""

from __future__ import annotations

__all__ = [
    "FixedMetricsMeasurer",
    "MatplotlibMeasurer",
    "TextMeasurer",
    "TextMetrics",
    "TextMetricsProvider",
    "count_text_lines",
]

import logging
import math
import re
from dataclasses import dataclass
from typing import Protocol

from spc_labels.config import DEFAULT_CONFIG, LabelPlacementConfig
from spc_labels.layout.cache import MeasurementCache, make_cache_key
from spc_labels.layout.constants import (
    CHAR_WIDTH_EM,
    PARAGRAPH_SPACING_LINES,
    POINTS_PER_INCH,
)

logger = logging.getLogger(__name__)

_PARAGRAPH_BREAK = re.compile(r"\n[ \t]*\n")


class TextMeasurer(Protocol):
    """A drawing surface able to report rendered text height."""

    def text_height(
        self,
        text: str,
        font_size: float,
        line_height: float,
        panel_width: float,
        panel_height: float,
    ) -> float:
        """Rendered height of *text* in inches."""
        ...


@dataclass(frozen=True)
class TextMetrics:
    height_npc: float
    height_absolute: float | None
    degraded: bool = False


def count_text_lines(text: str) -> tuple[int, int]:
    """Return (text lines, paragraph breaks) of a label.

    A paragraph break is a blank line; it is not counted as a text line.
    """
    stripped = text.strip("\n")
    if not stripped:
        return 0, 0
    paragraphs = _PARAGRAPH_BREAK.split(stripped)
    n_lines = sum(len(p.split("\n")) for p in paragraphs)
    return n_lines, len(paragraphs) - 1


class FixedMetricsMeasurer:
    """Deterministic estimate from font size and line counts.

    Lines wider than the panel are wrapped using an average glyph width.
    """

    def __init__(self, char_width_em: float = CHAR_WIDTH_EM) -> None:
        self.char_width_em = char_width_em

    def text_height(
        self,
        text: str,
        font_size: float,
        line_height: float,
        panel_width: float,
        panel_height: float,
    ) -> float:
        stripped = text.strip("\n")
        if not stripped:
            return 0.0
        char_w = font_size * self.char_width_em / POINTS_PER_INCH
        max_chars = max(1, int(panel_width / char_w)) if char_w > 0 else 0

        paragraphs = _PARAGRAPH_BREAK.split(stripped)
        n_lines = 0
        for paragraph in paragraphs:
            for line in paragraph.split("\n"):
                if max_chars and len(line) > max_chars:
                    n_lines += math.ceil(len(line) / max_chars)
                else:
                    n_lines += 1
        breaks = len(paragraphs) - 1

        line_pts = font_size * line_height
        total_pts = n_lines * line_pts + breaks * PARAGRAPH_SPACING_LINES * line_pts
        return total_pts / POINTS_PER_INCH


class MatplotlibMeasurer:
    """Measure with an off-screen Agg figure of the panel's size.

    A fresh figure is created per measurement and discarded afterwards, so
    no pyplot state is touched.
    """

    def __init__(self, dpi: float = 96.0, font_family: str = "sans-serif") -> None:
        self.dpi = dpi
        self.font_family = font_family

    def text_height(
        self,
        text: str,
        font_size: float,
        line_height: float,
        panel_width: float,
        panel_height: float,
    ) -> float:
        from matplotlib.backends.backend_agg import FigureCanvasAgg
        from matplotlib.figure import Figure

        fig = Figure(figsize=(panel_width, panel_height), dpi=self.dpi)
        try:
            canvas = FigureCanvasAgg(fig)
            artist = fig.text(
                0.0,
                0.0,
                text,
                fontsize=font_size,
                linespacing=line_height,
                family=self.font_family,
            )
            bbox = artist.get_window_extent(renderer=canvas.get_renderer())
            return float(bbox.height) / fig.dpi
        finally:
            fig.clear()


class _MeasurementError(Exception):
    """The drawing surface could not measure a text."""


def _positive(value: float | None) -> bool:
    return value is not None and math.isfinite(value) and value > 0


class TextMetricsProvider:
    """Measure label text, optionally through a MeasurementCache.

    Without a *measurer* there is no drawing surface and every non-empty
    text gets the fallback height.
    """

    def __init__(
        self,
        measurer: TextMeasurer | None = None,
        cache: MeasurementCache | None = None,
        config: LabelPlacementConfig = DEFAULT_CONFIG,
    ) -> None:
        self.measurer = measurer
        self.cache = cache
        self.config = config

    def fallback(self, panel_height: float | None) -> TextMetrics:
        npc = self.config.height_fallback_npc
        absolute = npc * panel_height if _positive(panel_height) else None
        return TextMetrics(height_npc=npc, height_absolute=absolute, degraded=True)

    def measure(
        self,
        text: str,
        font_size: float,
        line_height: float | None = None,
        panel_width: float | None = None,
        panel_height: float | None = None,
    ) -> TextMetrics:
        """Height of *text* as a fraction of the panel and in inches."""
        if not text:
            return TextMetrics(height_npc=0.0, height_absolute=0.0)
        if line_height is None:
            line_height = self.config.label_lineheight

        if self.measurer is None:
            logger.debug("No drawing surface; using fallback label height")
            return self.fallback(panel_height)
        if not (_positive(panel_width) and _positive(panel_height)):
            logger.debug(
                "Panel size %r x %r unusable; using fallback label height",
                panel_width,
                panel_height,
            )
            return self.fallback(panel_height)
        if not (_positive(font_size) and _positive(line_height)):
            logger.warning(
                "Invalid font size %r / line height %r; using fallback",
                font_size,
                line_height,
            )
            return self.fallback(panel_height)

        def compute() -> TextMetrics:
            try:
                height_in = float(
                    self.measurer.text_height(
                        text, font_size, line_height, panel_width, panel_height
                    )
                )
            except Exception as exc:
                raise _MeasurementError(str(exc)) from exc
            if not math.isfinite(height_in) or height_in < 0:
                raise _MeasurementError(
                    f"measured height {height_in!r} is not usable"
                )
            height_in *= self.config.height_safety_margin
            return TextMetrics(
                height_npc=height_in / panel_height, height_absolute=height_in
            )

        try:
            if self.cache is None:
                return compute()
            key = make_cache_key(
                text, font_size, line_height, panel_width, panel_height
            )
            return self._cached(key, compute)
        except _MeasurementError as exc:
            logger.warning("Text measurement failed (%s); using fallback", exc)
            return self.fallback(panel_height)

    def _cached(self, key: str, compute) -> TextMetrics:
        """Measure through the cache; a failing cache is bypassed."""
        try:
            return self.cache.get_or_compute(key, compute)
        except _MeasurementError:
            raise
        except Exception:
            logger.debug(
                "Measurement cache unavailable, measuring directly", exc_info=True
            )
            return compute()
