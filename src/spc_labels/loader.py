"""Load chart definitions from YAML files.

A chart file holds presentation options at the top level, an optional
``placement`` mapping of LabelPlacementConfig overrides and a ``data``
list with one mapping per observation::

    title: Ventetid til operation
    y_axis_unit: count
    target_text: "<"
    placement:
      relative_gap_labels: 0.25
    data:
      - {x: 2024-01-01, y: 12, cl: 10, ucl: 16, lcl: 4, target: 8}
"""

from __future__ import annotations

__all__ = ["ChartDefinition", "ChartFileError", "load_chart", "parse_chart"]

import math
from dataclasses import dataclass, fields
from datetime import date, datetime
from pathlib import Path
from typing import Any

import yaml

from spc_labels.config import DEFAULT_CONFIG, LabelPlacementConfig
from spc_labels.model import ChartSeries, Observation
from spc_labels.render.chart import ChartOptions

_NUMERIC_FIELDS = ("y", "cl", "ucl", "lcl", "target")
_OPTION_ALIASES = {"freeze": "has_freeze", "shift": "has_shift"}


class ChartFileError(ValueError):
    """A chart file is unreadable or malformed."""


@dataclass
class ChartDefinition:
    series: ChartSeries
    options: ChartOptions
    config: LabelPlacementConfig


def _number(value: Any, field_name: str, row: int) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ChartFileError(f"data[{row}].{field_name}: expected a number")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ChartFileError(
            f"data[{row}].{field_name}: expected a number, got {value!r}"
        ) from exc
    return None if math.isnan(number) else number


def _x_value(value: Any, row: int) -> float | date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    x = _number(value, "x", row)
    if x is None:
        raise ChartFileError(f"data[{row}].x is required")
    return x


def _observations(rows: Any) -> list[Observation]:
    if not isinstance(rows, list) or not rows:
        raise ChartFileError("'data' must be a non-empty list of observations")
    observations = []
    for i, row in enumerate(rows):
        if not isinstance(row, dict):
            raise ChartFileError(f"data[{i}] must be a mapping")
        if "x" not in row:
            raise ChartFileError(f"data[{i}].x is required")
        values = {name: _number(row.get(name), name, i) for name in _NUMERIC_FIELDS}
        note = str(row.get("note") or "")
        observations.append(Observation(x=_x_value(row["x"], i), note=note, **values))
    return observations


def _options(raw: dict[str, Any]) -> ChartOptions:
    known = {f.name for f in fields(ChartOptions)}
    kwargs: dict[str, Any] = {}
    for key, value in raw.items():
        if key in ("data", "placement"):
            continue
        name = _OPTION_ALIASES.get(key, key)
        if name not in known:
            raise ChartFileError(f"Unknown chart option '{key}'")
        kwargs[name] = value
    if kwargs.get("target_text") is not None:
        kwargs["target_text"] = str(kwargs["target_text"])
    return ChartOptions(**kwargs)


def parse_chart(
    text: str, base_config: LabelPlacementConfig = DEFAULT_CONFIG
) -> ChartDefinition:
    """Parse a YAML chart definition."""
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ChartFileError(f"Invalid YAML: {exc}") from exc
    if not isinstance(raw, dict):
        raise ChartFileError("Chart file must contain a mapping")

    try:
        series = ChartSeries(_observations(raw.get("data")))
        options = _options(raw)
        overrides = raw.get("placement") or {}
        if not isinstance(overrides, dict):
            raise ChartFileError("'placement' must be a mapping")
        config = base_config.override(**overrides)
    except ChartFileError:
        raise
    except (KeyError, TypeError, ValueError) as exc:
        raise ChartFileError(str(exc)) from exc
    return ChartDefinition(series=series, options=options, config=config)


def load_chart(
    path: str | Path, base_config: LabelPlacementConfig = DEFAULT_CONFIG
) -> ChartDefinition:
    """Read and parse a chart file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ChartFileError(f"Cannot read {path}: {exc}") from exc
    return parse_chart(text, base_config)
