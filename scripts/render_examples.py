#!/usr/bin/env python3
"""Batch render all example chart files to SVG and PNG.

Outputs go to /tmp/spc_labels_renders/.

Usage:
    python scripts/render_examples.py [--debug] [--measure matplotlib]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from spc_labels.layout.metrics import (  # noqa: E402
    FixedMetricsMeasurer,
    MatplotlibMeasurer,
    TextMetricsProvider,
)
from spc_labels.loader import ChartFileError, load_chart  # noqa: E402
from spc_labels.render.chart import assemble_chart  # noqa: E402
from spc_labels.render.export import (  # noqa: E402
    PngExportUnavailable,
    write_png,
    write_svg,
)
from spc_labels.render.style import THEMES  # noqa: E402
from spc_labels.render.svg import render_svg  # noqa: E402

OUTPUT_DIR = Path("/tmp/spc_labels_renders")
EXAMPLES_DIR = project_root / "examples"


def render_file(
    chart_path: Path,
    output_dir: Path,
    *,
    debug: bool = False,
    measure: str = "fixed",
) -> tuple[str, list[str]]:
    """Load, assemble and render one chart file to SVG (and optionally PNG).

    Returns (name, list_of_issues).
    """
    name = chart_path.stem
    issues: list[str] = []

    try:
        chart = load_chart(chart_path)
    except ChartFileError as e:
        return name, [f"LOAD ERROR: {e}"]

    if measure == "matplotlib":
        measurer = MatplotlibMeasurer()
    else:
        measurer = FixedMetricsMeasurer()
    provider = TextMetricsProvider(measurer, config=chart.config)
    layout = assemble_chart(chart.series, chart.options, provider, chart.config)
    if any(p.measured.degraded for p in layout.labels):
        issues.append("label height measurement degraded (fallback used)")

    theme = THEMES.get(chart.options.theme, THEMES["bfh"])
    svg_str = render_svg(layout, theme, debug=debug)
    write_svg(svg_str, output_dir / f"{name}.svg")

    try:
        write_png(svg_str, output_dir / f"{name}.png")
    except PngExportUnavailable:
        issues.append("cairosvg not available, skipping PNG")

    issues.append(f"strategy: {layout.placement.strategy.value}")
    return name, issues


def main():
    parser = argparse.ArgumentParser(description="Batch render the example charts")
    parser.add_argument(
        "--debug", action="store_true", help="Outline measured label blocks"
    )
    parser.add_argument(
        "--measure", choices=["fixed", "matplotlib"], default="fixed",
        help="Text measurement backend",
    )
    args = parser.parse_args()

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    chart_files = sorted(EXAMPLES_DIR.glob("*.yaml"))
    print(f"Rendering {len(chart_files)} files to {OUTPUT_DIR}/")

    any_errors = False
    for chart_path in chart_files:
        name, issues = render_file(
            chart_path, OUTPUT_DIR, debug=args.debug, measure=args.measure
        )
        errors = [i for i in issues if "ERROR" in i]
        any_errors = any_errors or bool(errors)
        print(f"  {name}: {'; '.join(issues) if issues else 'ok'}")

    sys.exit(1 if any_errors else 0)


if __name__ == "__main__":
    main()
