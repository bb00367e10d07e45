"""Chart assembly and SVG/PNG output."""

from spc_labels.render.chart import ChartLayout, ChartOptions, assemble_chart
from spc_labels.render.export import write_png, write_svg
from spc_labels.render.style import THEMES, Theme
from spc_labels.render.svg import render_svg

__all__ = [
    "THEMES",
    "ChartLayout",
    "ChartOptions",
    "Theme",
    "assemble_chart",
    "render_svg",
    "write_png",
    "write_svg",
]
