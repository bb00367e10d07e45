"""SVG rendering of an assembled SPC chart using drawsvg."""

from __future__ import annotations

__all__ = ["render_svg"]

import math

import drawsvg as draw

from spc_labels.config import calculate_base_size
from spc_labels.layout.constants import POINTS_PER_INCH
from spc_labels.model import LabelRole
from spc_labels.render.chart import ChartLayout
from spc_labels.render.constants import (
    DPI,
    NOTE_MAX_LENGTH,
    NOTE_OFFSET_PX,
    NOTE_SIZE_RATIO,
    REFERENCE_DASH,
    TITLE_SIZE_RATIO,
)
from spc_labels.render.style import BFH_THEME, Theme


def _pt_to_px(points: float) -> float:
    return points / POINTS_PER_INCH * DPI


def _finite(value: float | None) -> bool:
    return value is not None and math.isfinite(value)


def _runs(layout: ChartLayout, attr: str) -> list[list[tuple[float, float]]]:
    """Pixel polylines for *attr*, split wherever the value is missing."""
    runs: list[list[tuple[float, float]]] = []
    current: list[tuple[float, float]] = []
    for i, obs in enumerate(layout.series.observations):
        value = getattr(obs, attr)
        if not _finite(value):
            if current:
                runs.append(current)
            current = []
            continue
        current.append((layout.x_to_px(i), layout.y_to_px(value)))
    if current:
        runs.append(current)
    return runs


def _polyline(points: list[tuple[float, float]], **kwargs) -> draw.Lines:
    flat = [c for point in points for c in point]
    return draw.Lines(*flat, close=False, fill="none", **kwargs)


def _truncate_note(note: str) -> str:
    note = " ".join(note.split())
    if len(note) <= NOTE_MAX_LENGTH:
        return note
    return note[: NOTE_MAX_LENGTH - 3].rstrip() + "..."


def _draw_limit_band(d: draw.Drawing, layout: ChartLayout, theme: Theme) -> None:
    upper: list[tuple[float, float]] = []
    lower: list[tuple[float, float]] = []
    for i, obs in enumerate(layout.series.observations):
        if _finite(obs.ucl) and _finite(obs.lcl):
            x = layout.x_to_px(i)
            upper.append((x, layout.y_to_px(obs.ucl)))
            lower.append((x, layout.y_to_px(obs.lcl)))
    if len(upper) < 2:
        return
    outline = upper + lower[::-1]
    flat = [c for point in outline for c in point]
    d.append(
        draw.Lines(
            *flat,
            close=True,
            fill=theme.limit_band_color,
            fill_opacity=theme.limit_band_opacity,
            stroke="none",
        )
    )


def _draw_reference_lines(d: draw.Drawing, layout: ChartLayout, theme: Theme) -> None:
    """Centerline per point, target across the panel, both extended to labels."""
    for run in _runs(layout, "cl"):
        if len(run) > 1:
            d.append(
                _polyline(
                    run,
                    stroke=theme.centerline_color,
                    stroke_width=theme.reference_line_width,
                )
            )

    left = layout.panel.left * DPI
    gutter_x = layout.label_x_px
    for label in layout.labels:
        request = label.request
        is_target = request.role is LabelRole.TARGET
        if is_target and layout.plan.suppress_targetline:
            continue
        y = layout.y_to_px(request.anchor)
        if is_target:
            # Target spans the panel; the centerline only extends past the data.
            d.append(
                draw.Line(
                    left,
                    y,
                    gutter_x,
                    y,
                    stroke=theme.target_color,
                    stroke_width=theme.reference_line_width,
                )
            )
        else:
            d.append(
                draw.Line(
                    layout.x_to_px(len(layout.x_positions) - 1),
                    y,
                    gutter_x,
                    y,
                    stroke=theme.centerline_color,
                    stroke_width=theme.reference_line_width,
                    stroke_dasharray=REFERENCE_DASH,
                )
            )


def _draw_data(d: draw.Drawing, layout: ChartLayout, theme: Theme) -> None:
    for run in _runs(layout, "y"):
        if len(run) > 1:
            d.append(
                _polyline(
                    run, stroke=theme.data_color, stroke_width=theme.data_line_width
                )
            )
        for x, y in run:
            d.append(draw.Circle(x, y, theme.point_radius, fill=theme.point_color))


def _draw_notes(
    d: draw.Drawing, layout: ChartLayout, theme: Theme, font_px: float
) -> None:
    for i, obs in enumerate(layout.series.observations):
        if not obs.note or not _finite(obs.y):
            continue
        d.append(
            draw.Text(
                _truncate_note(obs.note),
                font_px,
                layout.x_to_px(i),
                layout.y_to_px(obs.y) - NOTE_OFFSET_PX,
                text_anchor="middle",
                fill=theme.note_color,
                font_family=theme.font_family,
            )
        )


def _draw_text_block(
    d: draw.Drawing,
    text: str,
    center_y: float,
    x: float,
    font_px: float,
    line_height: float,
    colors: list[str],
    font_family: str,
) -> None:
    """Draw lines of *text* centered vertically on *center_y*.

    *colors* gives one color per line; the last color repeats.
    """
    lines = text.split("\n")
    pitch = font_px * line_height
    top = center_y - len(lines) * pitch / 2
    for i, line in enumerate(lines):
        if not line:
            continue
        d.append(
            draw.Text(
                line,
                font_px,
                x,
                top + (i + 0.5) * pitch,
                dominant_baseline="central",
                fill=colors[min(i, len(colors) - 1)],
                font_family=font_family,
                font_weight="bold",
            )
        )


def _label_color(role: LabelRole, theme: Theme) -> str:
    if role is LabelRole.TARGET:
        return theme.label_target_color
    return theme.label_centerline_color


def _draw_labels(
    d: draw.Drawing, layout: ChartLayout, theme: Theme, debug: bool
) -> None:
    font_px = _pt_to_px(layout.font_size)
    x = layout.label_x_px

    if layout.merged_text is not None:
        first, second = layout.labels
        n_first = len(first.request.text.split("\n"))
        colors = [_label_color(first.request.role, theme)] * n_first + [
            _label_color(second.request.role, theme)
        ]
        height = layout.placement.merged_height_npc or 0.0
        blocks = [(layout.merged_text, first.y_npc, colors, height)]
    else:
        blocks = [
            (
                p.request.text,
                p.y_npc,
                [_label_color(p.request.role, theme)],
                p.measured.height_npc,
            )
            for p in layout.labels
        ]

    for text, y_npc, colors, height_npc in blocks:
        center_y = layout.panel.npc_to_px(y_npc)
        _draw_text_block(
            d,
            text,
            center_y,
            x,
            font_px,
            layout.line_height,
            colors,
            theme.font_family,
        )
        if debug:
            height = height_npc * layout.panel.height * DPI
            d.append(
                draw.Rectangle(
                    x,
                    center_y - height / 2,
                    layout.options.width * DPI - x,
                    height,
                    fill="none",
                    stroke="#ff00ff",
                    stroke_dasharray="2,2",
                )
            )


def render_svg(
    layout: ChartLayout,
    theme: Theme = BFH_THEME,
    debug: bool = False,
) -> str:
    """Render an assembled chart to an SVG string.

    With *debug*, dashed boxes show the measured extent of each label block.
    """
    options = layout.options
    width_px = options.width * DPI
    height_px = options.height * DPI
    base_size = calculate_base_size(options.width, options.height)
    panel = layout.panel

    d = draw.Drawing(width_px, height_px)
    if theme.background_color != "none":
        d.append(draw.Rectangle(0, 0, width_px, height_px, fill=theme.background_color))

    if options.title:
        d.append(
            draw.Text(
                options.title,
                _pt_to_px(base_size * TITLE_SIZE_RATIO),
                panel.left * DPI,
                panel.top * DPI / 2,
                dominant_baseline="central",
                fill=theme.title_color,
                font_family=theme.font_family,
                font_weight="bold",
            )
        )

    d.append(
        draw.Rectangle(
            panel.left * DPI,
            panel.top * DPI,
            panel.width * DPI,
            panel.height * DPI,
            fill=theme.panel_color,
            stroke=theme.axis_color,
            stroke_width=0.5,
        )
    )

    _draw_limit_band(d, layout, theme)
    _draw_reference_lines(d, layout, theme)
    _draw_data(d, layout, theme)
    _draw_notes(d, layout, theme, _pt_to_px(base_size * NOTE_SIZE_RATIO))
    _draw_labels(d, layout, theme, debug)

    return d.as_svg()
