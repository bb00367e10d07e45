"""Shared test fixtures and helpers for the spc-labels test suite."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from spc_labels.layout.metrics import FixedMetricsMeasurer, TextMetricsProvider
from spc_labels.model import (
    ChartSeries,
    LabelRequest,
    LabelRole,
    MeasuredLabel,
    Observation,
)

# --- Chart text constants ---

SIMPLE_CHART_TEXT = (
    "title: Genindlæggelser\n"
    "y_axis_unit: count\n"
    "data:\n"
    "  - {x: 1, y: 10, cl: 12, ucl: 20, lcl: 4, target: 8}\n"
    "  - {x: 2, y: 14, cl: 12, ucl: 20, lcl: 4, target: 8}\n"
    "  - {x: 3, y: 11, cl: 12, ucl: 20, lcl: 4, target: 8}\n"
)


# --- Model helpers ---


def make_label(
    anchor: float,
    height: float = 0.08,
    role: LabelRole = LabelRole.CENTERLINE,
    text: str | None = None,
) -> MeasuredLabel:
    """A measured label with *anchor* and *height* already in NPC."""
    request = LabelRequest(role=role, text=text or role.value, anchor=anchor)
    return MeasuredLabel(request=request, anchor_npc=anchor, height_npc=height)


def make_series(
    values: list[float | None],
    cl: float | None = 12.0,
    target: float | None = None,
    ucl: float | None = None,
    lcl: float | None = None,
) -> ChartSeries:
    """Daily series starting 2024-01-01 with constant cl/limits/target."""
    start = date(2024, 1, 1)
    return ChartSeries(
        [
            Observation(
                x=start + timedelta(days=i),
                y=y,
                cl=cl,
                ucl=ucl,
                lcl=lcl,
                target=target,
            )
            for i, y in enumerate(values)
        ]
    )


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# --- Pytest fixtures ---


@pytest.fixture
def series() -> ChartSeries:
    """Ten points around a centerline of 12 with a target of 8."""
    return make_series(
        [10, 14, 11, 13, 12, 9, 15, 12, 11, 13], cl=12.0, target=8.0, ucl=20, lcl=4
    )


@pytest.fixture
def provider() -> TextMetricsProvider:
    """Deterministic provider without a cache."""
    return TextMetricsProvider(FixedMetricsMeasurer())


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
