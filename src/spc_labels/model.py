"""Data model for SPC series, label requests and placement results."""

from __future__ import annotations

__all__ = [
    "ChartSeries",
    "LabelRequest",
    "LabelRole",
    "LayoutStrategy",
    "MeasuredLabel",
    "Observation",
    "PlacementResult",
]

import math
from dataclasses import dataclass, field
from datetime import date
from enum import Enum


def _is_missing(value: float | None) -> bool:
    return value is None or not math.isfinite(value)


@dataclass(frozen=True)
class Observation:
    """One point of an SPC series.

    ``y`` may be missing (None or NaN); such points are kept for rendering
    gaps but ignored by geometry calculations.
    """

    x: float | date
    y: float | None = None
    cl: float | None = None
    ucl: float | None = None
    lcl: float | None = None
    target: float | None = None
    note: str = ""


@dataclass
class ChartSeries:
    """Ordered SPC observations produced by the statistics layer."""

    observations: list[Observation] = field(default_factory=list)

    def __post_init__(self) -> None:
        for prev, cur in zip(self.observations, self.observations[1:]):
            if cur.x < prev.x:
                raise ValueError(
                    f"Observation x values must be non-decreasing "
                    f"({prev.x!r} followed by {cur.x!r})"
                )

    def __len__(self) -> int:
        return len(self.observations)

    def finite_values(self, attr: str) -> list[float]:
        values = [getattr(o, attr) for o in self.observations]
        return [v for v in values if not _is_missing(v)]

    def latest_centerline(self) -> float | None:
        """Centerline of the most recent observation that has one."""
        values = self.finite_values("cl")
        return values[-1] if values else None

    def target_value(self) -> float | None:
        """First non-missing target value."""
        values = self.finite_values("target")
        return values[0] if values else None

    def y_extent(self) -> tuple[float, float] | None:
        values = self.finite_values("y")
        if not values:
            return None
        return min(values), max(values)

    def value_extent(self) -> tuple[float, float] | None:
        """Extent over all plotted quantities (data, limits, target)."""
        values: list[float] = []
        for attr in ("y", "cl", "ucl", "lcl", "target"):
            values.extend(self.finite_values(attr))
        if not values:
            return None
        return min(values), max(values)


class LabelRole(str, Enum):
    CENTERLINE = "centerline"
    TARGET = "target"


@dataclass(frozen=True)
class LabelRequest:
    """A label to draw next to a horizontal chart line.

    ``anchor`` is in data units; ``side`` is the horizontal side of the
    chart the label is drawn on.
    """

    role: LabelRole
    text: str
    anchor: float
    side: str = "right"


@dataclass(frozen=True)
class MeasuredLabel:
    """A label request with its anchor and height in panel units (NPC)."""

    request: LabelRequest
    anchor_npc: float
    height_npc: float
    height_absolute: float | None = None
    degraded: bool = False

    @property
    def text(self) -> str:
        return self.request.text

    @property
    def role(self) -> LabelRole:
        return self.request.role

    def is_finite(self) -> bool:
        return (
            math.isfinite(self.anchor_npc)
            and math.isfinite(self.height_npc)
            and self.height_npc >= 0
        )


class LayoutStrategy(str, Enum):
    """Which placement rule produced a PlacementResult."""

    EMPTY = "empty"
    SINGLE = "single"
    MERGED_COINCIDENT = "merged-coincident"
    SHELVED_CENTER = "shelved-center"
    STACKED_NORMAL = "stacked-normal"
    STACKED_COMPRESSED = "stacked-compressed"


@dataclass(frozen=True)
class PlacementResult:
    """Final label centers in NPC.

    ``y_a``/``y_b`` follow the order of the labels passed to the engine;
    either is None when that label was absent or dropped. For a merged
    placement both hold the center of the combined block.
    """

    strategy: LayoutStrategy
    y_a: float | None = None
    y_b: float | None = None
    gap_factor: float | None = None
    min_gap_npc: float = 0.0
    merged_height_npc: float | None = None
    clamped: bool = False

    @property
    def merged(self) -> bool:
        return self.strategy is LayoutStrategy.MERGED_COINCIDENT

    @property
    def positions(self) -> list[float]:
        if self.merged:
            return [self.y_a] if self.y_a is not None else []
        return [y for y in (self.y_a, self.y_b) if y is not None]
