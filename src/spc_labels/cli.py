"""Command-line interface for spc-labels."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import click
import yaml

from spc_labels import __version__
from spc_labels.config import DEFAULT_CONFIG
from spc_labels.layout.cache import MeasurementCache
from spc_labels.layout.metrics import (
    FixedMetricsMeasurer,
    MatplotlibMeasurer,
    TextMetricsProvider,
)
from spc_labels.layout.placement import place_labels
from spc_labels.loader import ChartFileError, load_chart
from spc_labels.logging_config import VALID_LOG_LEVELS, configure_logging
from spc_labels.model import LabelRequest, LabelRole, MeasuredLabel
from spc_labels.render.chart import assemble_chart
from spc_labels.render.export import PngExportUnavailable, write_png, write_svg
from spc_labels.render.style import THEMES
from spc_labels.render.svg import render_svg

_MEASURERS = {
    "fixed": FixedMetricsMeasurer,
    "matplotlib": MatplotlibMeasurer,
    "none": None,
}


@click.group()
@click.version_option(__version__, prog_name="spc-labels")
@click.option(
    "--log-level",
    type=click.Choice(VALID_LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level (default: $LOG_LEVEL or WARNING).",
)
def cli(log_level: str | None) -> None:
    """Render SPC charts with collision-free centerline and target labels."""
    configure_logging(log_level)


@cli.command()
@click.argument(
    "chart_file", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="SVG output path.",
)
@click.option(
    "--png",
    "png_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write a PNG (needs cairosvg).",
)
@click.option("--width", type=float, default=None, help="Figure width in inches.")
@click.option("--height", type=float, default=None, help="Figure height in inches.")
@click.option("--theme", type=click.Choice(sorted(THEMES)), default=None)
@click.option(
    "--measure",
    type=click.Choice(sorted(_MEASURERS)),
    default="fixed",
    show_default=True,
    help="Text measurement backend; 'none' uses the fallback label height.",
)
@click.option(
    "--cache/--no-cache",
    default=False,
    show_default=True,
    help="Memoize text measurements.",
)
@click.option("--debug", is_flag=True, help="Outline measured label blocks.")
def render(
    chart_file: Path,
    output: Path,
    png_path: Path | None,
    width: float | None,
    height: float | None,
    theme: str | None,
    measure: str,
    cache: bool,
    debug: bool,
) -> None:
    """Render CHART_FILE (YAML) to SVG."""
    try:
        chart = load_chart(chart_file)
    except ChartFileError as exc:
        raise click.ClickException(str(exc)) from exc

    options = chart.options
    try:
        if width is not None:
            options = replace(options, width=width)
        if height is not None:
            options = replace(options, height=height)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    if theme is not None:
        options = replace(options, theme=theme)
    if options.theme not in THEMES:
        raise click.ClickException(
            f"Unknown theme '{options.theme}' (choose from {', '.join(THEMES)})"
        )

    measurer_cls = _MEASURERS[measure]
    provider = TextMetricsProvider(
        measurer=measurer_cls() if measurer_cls is not None else None,
        cache=MeasurementCache.from_config(chart.config) if cache else None,
        config=chart.config,
    )
    layout = assemble_chart(chart.series, options, provider, chart.config)
    svg = render_svg(layout, THEMES[options.theme], debug=debug)

    write_svg(svg, output)
    click.echo(
        f"Wrote {output} ({len(layout.labels)} label(s), "
        f"{layout.placement.strategy.value})"
    )
    if png_path is not None:
        try:
            write_png(svg, png_path)
        except PngExportUnavailable as exc:
            raise click.ClickException(str(exc)) from exc
        click.echo(f"Wrote {png_path}")


def _measured(role: LabelRole, anchor: float, height: float) -> MeasuredLabel:
    request = LabelRequest(role=role, text=role.value, anchor=anchor)
    return MeasuredLabel(request=request, anchor_npc=anchor, height_npc=height)


@cli.command()
@click.argument("anchor_a", type=float)
@click.argument("anchor_b", type=float, required=False)
@click.option("--height-a", type=float, default=DEFAULT_CONFIG.height_fallback_npc)
@click.option("--height-b", type=float, default=DEFAULT_CONFIG.height_fallback_npc)
@click.option(
    "--range",
    "panel_range",
    type=(float, float),
    default=(0.0, 1.0),
    show_default=True,
    help="Usable panel range in NPC.",
)
def place(
    anchor_a: float,
    anchor_b: float | None,
    height_a: float,
    height_b: float,
    panel_range: tuple[float, float],
) -> None:
    """Place labels anchored at ANCHOR_A [ANCHOR_B] (NPC) and print the result."""
    label_a = _measured(LabelRole.CENTERLINE, anchor_a, height_a)
    label_b = None
    if anchor_b is not None:
        label_b = _measured(LabelRole.TARGET, anchor_b, height_b)
    result = place_labels(label_a, label_b, panel_range=panel_range)

    click.echo(f"strategy: {result.strategy.value}")
    for name, y in (("a", result.y_a), ("b", result.y_b)):
        if y is not None:
            click.echo(f"{name}: {y:.4f}")
    if result.gap_factor is not None:
        click.echo(f"gap_factor: {result.gap_factor}")


@cli.command("config")
def show_config() -> None:
    """Print the default label placement configuration as YAML."""
    click.echo(yaml.safe_dump(DEFAULT_CONFIG.as_dict(), sort_keys=False), nl=False)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
