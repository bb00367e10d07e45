"""Visual theme for rendered SPC charts."""

from __future__ import annotations

__all__ = ["BFH_THEME", "PLAIN_THEME", "THEMES", "Theme"]

from dataclasses import dataclass


@dataclass(frozen=True)
class Theme:
    """Colors and fonts for one chart style."""

    name: str
    background_color: str
    panel_color: str
    axis_color: str
    data_color: str
    point_color: str
    limit_band_color: str
    limit_band_opacity: float
    centerline_color: str
    target_color: str
    label_centerline_color: str
    label_target_color: str
    note_color: str
    title_color: str
    font_family: str = "Roboto, Helvetica, Arial, sans-serif"
    data_line_width: float = 1.5
    reference_line_width: float = 1.5
    point_radius: float = 3.0


BFH_THEME = Theme(
    name="bfh",
    background_color="#ffffff",
    panel_color="#ffffff",
    axis_color="#858585",
    data_color="#a0a0a0",
    point_color="#858585",
    limit_band_color="#e1edfb",
    limit_band_opacity=0.5,
    centerline_color="#009ce8",
    target_color="#565656",
    label_centerline_color="#009ce8",
    label_target_color="#565656",
    note_color="#565656",
    title_color="#000000",
)

PLAIN_THEME = Theme(
    name="plain",
    background_color="none",
    panel_color="none",
    axis_color="#333333",
    data_color="#333333",
    point_color="#333333",
    limit_band_color="#dddddd",
    limit_band_opacity=0.6,
    centerline_color="#1f77b4",
    target_color="#333333",
    label_centerline_color="#1f77b4",
    label_target_color="#333333",
    note_color="#333333",
    title_color="#333333",
    font_family="sans-serif",
)

THEMES = {theme.name: theme for theme in (BFH_THEME, PLAIN_THEME)}
