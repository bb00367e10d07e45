"""Chart assembly: panel geometry, label requests and label placement.

Turns a ChartSeries into a ChartLayout that the SVG renderer draws
without further decisions. Label placement runs once per chart.
"""

from __future__ import annotations

__all__ = [
    "ChartLayout",
    "ChartOptions",
    "LabelPlan",
    "PanelGeometry",
    "PlacedLabel",
    "assemble_chart",
    "build_label_plan",
]

import logging
import math
import warnings
from dataclasses import dataclass, field
from datetime import date

from spc_labels.config import DEFAULT_CONFIG, LabelPlacementConfig
from spc_labels.layout.constants import (
    ARROW_INSET_FACTOR,
    GGPLOT_PT,
    LABEL_LINEHEIGHT,
    LABEL_SIZE_HEIGHT_BASELINE,
)
from spc_labels.layout.labels import (
    TARGET_HEADER,
    arrow_direction,
    centerline_header,
    create_responsive_label,
    format_target_prefix,
    format_y_value,
    has_arrow_symbol,
)
from spc_labels.layout.metrics import FixedMetricsMeasurer, TextMetricsProvider
from spc_labels.layout.placement import place_labels
from spc_labels.model import (
    ChartSeries,
    LabelRequest,
    LabelRole,
    LayoutStrategy,
    MeasuredLabel,
    PlacementResult,
)
from spc_labels.render.constants import (
    BASE_LABEL_SIZE,
    DPI,
    FLAT_RANGE_PADDING,
    LABEL_GUTTER,
    LABEL_GUTTER_PAD,
    MARGIN_BOTTOM,
    MARGIN_LEFT,
    MARGIN_TOP,
    TITLE_HEIGHT,
    Y_EXPANSION,
)

logger = logging.getLogger(__name__)


@dataclass
class ChartOptions:
    """Presentation settings for one chart (sizes in inches)."""

    width: float = 10.0
    height: float = 6.0
    title: str = ""
    y_axis_unit: str = "count"
    target_text: str | None = None
    centerline_value: float | None = None
    has_freeze: bool = False
    has_shift: bool = False
    label_size: float = BASE_LABEL_SIZE
    theme: str = "bfh"

    def __post_init__(self) -> None:
        if not (self.width > 0 and self.height > 0):
            raise ValueError(
                f"Chart size must be positive, got {self.width} x {self.height}"
            )


@dataclass(frozen=True)
class PanelGeometry:
    """Data panel position within the figure, top-left origin, inches."""

    left: float
    top: float
    width: float
    height: float

    @classmethod
    def for_figure(cls, width: float, height: float, title: bool) -> PanelGeometry:
        top = MARGIN_TOP + (TITLE_HEIGHT if title else 0.0)
        return cls(
            left=MARGIN_LEFT,
            top=top,
            width=max(width - MARGIN_LEFT - LABEL_GUTTER, 0.0),
            height=max(height - top - MARGIN_BOTTOM, 0.0),
        )

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def npc_to_px(self, npc: float) -> float:
        """Vertical NPC (0 = bottom) to SVG pixels (y down)."""
        return (self.top + (1.0 - npc) * self.height) * DPI


@dataclass
class LabelPlan:
    """Which labels a chart gets, before measurement."""

    centerline: LabelRequest | None = None
    target: LabelRequest | None = None
    suppress_targetline: bool = False
    arrow: str | None = None

    @property
    def requests(self) -> list[LabelRequest]:
        return [r for r in (self.centerline, self.target) if r is not None]


@dataclass
class PlacedLabel:
    request: LabelRequest
    measured: MeasuredLabel
    y_npc: float


@dataclass
class ChartLayout:
    """Everything the renderer needs, in figure inches and data units."""

    series: ChartSeries
    options: ChartOptions
    panel: PanelGeometry
    y_min: float
    y_max: float
    x_positions: list[float]
    plan: LabelPlan
    placement: PlacementResult
    font_size: float
    line_height: float = LABEL_LINEHEIGHT
    labels: list[PlacedLabel] = field(default_factory=list)
    merged_text: str | None = None

    def y_to_npc(self, value: float) -> float:
        return (value - self.y_min) / (self.y_max - self.y_min)

    def y_to_px(self, value: float) -> float:
        return self.panel.npc_to_px(self.y_to_npc(value))

    def x_to_px(self, index: int) -> float:
        lo, hi = self.x_positions[0], self.x_positions[-1]
        frac = 0.5 if hi == lo else (self.x_positions[index] - lo) / (hi - lo)
        return (self.panel.left + frac * self.panel.width) * DPI

    @property
    def label_x_px(self) -> float:
        return (self.panel.right + LABEL_GUTTER_PAD) * DPI


def _x_value(x: float | date) -> float:
    if isinstance(x, date):
        return float(x.toordinal())
    return float(x)


def _y_scale(series: ChartSeries) -> tuple[float, float]:
    extent = series.value_extent()
    if extent is None:
        return 0.0, 1.0
    lo, hi = extent
    if hi == lo:
        return lo - FLAT_RANGE_PADDING, hi + FLAT_RANGE_PADDING
    pad = (hi - lo) * Y_EXPANSION
    return lo - pad, hi + pad


def _arrow_anchor(series: ChartSeries, direction: str, fallback: float) -> float:
    extent = series.y_extent()
    if extent is None:
        return fallback
    y_lo, y_hi = extent
    inset = (y_hi - y_lo) * ARROW_INSET_FACTOR
    return y_lo + inset if direction == "down" else y_hi - inset


def build_label_plan(series: ChartSeries, options: ChartOptions) -> LabelPlan:
    """Decide label texts and anchors for the centerline and target."""
    plan = LabelPlan()
    cl = series.latest_centerline()
    target = series.target_value()
    if cl is None and target is None:
        warnings.warn(
            "No centerline or target values found; chart has no summary labels",
            stacklevel=2,
        )
        return plan

    unit = options.y_axis_unit
    if cl is not None:
        header = centerline_header(
            options.centerline_value, options.has_freeze, options.has_shift
        )
        plan.centerline = LabelRequest(
            role=LabelRole.CENTERLINE,
            text=create_responsive_label(header, format_y_value(cl, unit)),
            anchor=cl,
        )

    if target is not None:
        anchor = target
        raw = options.target_text
        if raw is not None and raw.strip():
            value_text = format_target_prefix(raw)
            if has_arrow_symbol(raw):
                plan.arrow = arrow_direction(raw)
                plan.suppress_targetline = True
                anchor = _arrow_anchor(series, plan.arrow, target)
            elif unit == "percent" and "%" not in value_text:
                value_text += "%"
        else:
            value_text = format_y_value(target, unit)
        plan.target = LabelRequest(
            role=LabelRole.TARGET,
            text=create_responsive_label(TARGET_HEADER, value_text),
            anchor=anchor,
        )
    return plan


def label_font_size(options: ChartOptions) -> float:
    """Label font size in points, scaled up for tall figures."""
    scale = max(1.0, options.height / LABEL_SIZE_HEIGHT_BASELINE)
    return options.label_size * scale * GGPLOT_PT


def assemble_chart(
    series: ChartSeries,
    options: ChartOptions | None = None,
    provider: TextMetricsProvider | None = None,
    config: LabelPlacementConfig = DEFAULT_CONFIG,
) -> ChartLayout:
    """Lay out a chart and place its centerline/target labels."""
    if options is None:
        options = ChartOptions()
    if provider is None:
        provider = TextMetricsProvider(FixedMetricsMeasurer(), config=config)

    panel = PanelGeometry.for_figure(options.width, options.height, bool(options.title))
    y_min, y_max = _y_scale(series)
    plan = build_label_plan(series, options)
    font_size = label_font_size(options)

    layout = ChartLayout(
        series=series,
        options=options,
        panel=panel,
        y_min=y_min,
        y_max=y_max,
        x_positions=[_x_value(o.x) for o in series.observations],
        plan=plan,
        placement=PlacementResult(strategy=LayoutStrategy.EMPTY),
        font_size=font_size,
        line_height=config.label_lineheight,
    )

    measured: list[MeasuredLabel] = []
    for request in plan.requests:
        metrics = provider.measure(
            request.text,
            font_size,
            config.label_lineheight,
            LABEL_GUTTER - LABEL_GUTTER_PAD,
            panel.height,
        )
        measured.append(
            MeasuredLabel(
                request=request,
                anchor_npc=layout.y_to_npc(request.anchor),
                height_npc=metrics.height_npc,
                height_absolute=metrics.height_absolute,
                degraded=metrics.degraded,
            )
        )
    if not measured:
        return layout

    placement_config = config
    if plan.arrow is not None:
        # Arrow targets point at the panel edge, not a value; no gap needed.
        placement_config = config.override(relative_gap_labels=0.0)

    label_a = measured[0]
    label_b = measured[1] if len(measured) > 1 else None
    result = place_labels(
        label_a,
        label_b,
        config=placement_config,
        panel_height_absolute=panel.height,
    )
    layout.placement = result

    for label, y in zip(measured, (result.y_a, result.y_b)):
        if y is not None and math.isfinite(y):
            layout.labels.append(PlacedLabel(label.request, label, y))
    if result.merged and len(layout.labels) == 2:
        layout.merged_text = "\n".join(p.request.text for p in layout.labels)

    logger.debug(
        "Assembled chart: %d label(s), strategy %s",
        len(layout.labels),
        result.strategy.value,
    )
    return layout
