"""Immutable label placement configuration.

``DEFAULT_CONFIG`` is the canonical set of tuning values. It cannot be
changed at runtime: assigning to a field raises
``dataclasses.FrozenInstanceError``. Use :meth:`LabelPlacementConfig.override`
to derive a new configuration with some values replaced.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_CONFIG",
    "LabelPlacementConfig",
    "calculate_base_size",
    "get_label_placement_config",
    "get_label_placement_param",
    "override_label_placement_config",
]

import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from spc_labels.layout.constants import (
    CACHE_CLEANUP_INTERVAL,
    CACHE_MAX_ENTRIES,
    CACHE_TTL_SECONDS,
    COINCIDENT_THRESHOLD_FACTOR,
    FONT_SCALING_DIVISOR,
    FONT_SCALING_FALLBACK,
    FONT_SCALING_MAX_SIZE,
    FONT_SCALING_MIN_SIZE,
    GAP_REDUCTION_FACTORS,
    HEIGHT_FALLBACK_NPC,
    HEIGHT_SAFETY_MARGIN,
    LABEL_LINEHEIGHT,
    PAD_BOT,
    PAD_TOP,
    RELATIVE_GAP_LABELS,
    RELATIVE_GAP_LINE,
    SHELF_CENTER_THRESHOLD,
)

_MISSING = object()


@dataclass(frozen=True)
class LabelPlacementConfig:
    """Tuning values for label measurement, placement and caching."""

    relative_gap_line: float = RELATIVE_GAP_LINE
    relative_gap_labels: float = RELATIVE_GAP_LABELS
    pad_top: float = PAD_TOP
    pad_bot: float = PAD_BOT
    coincident_threshold_factor: float = COINCIDENT_THRESHOLD_FACTOR
    gap_reduction_factors: tuple[float, ...] = GAP_REDUCTION_FACTORS
    shelf_center_threshold: float = SHELF_CENTER_THRESHOLD
    label_lineheight: float = LABEL_LINEHEIGHT
    height_safety_margin: float = HEIGHT_SAFETY_MARGIN
    height_fallback_npc: float = HEIGHT_FALLBACK_NPC
    cache_ttl_seconds: float = CACHE_TTL_SECONDS
    cache_max_entries: int = CACHE_MAX_ENTRIES
    cache_cleanup_interval: int = CACHE_CLEANUP_INTERVAL

    def __post_init__(self) -> None:
        # Lists from YAML/kwargs become tuples so the object stays hashable.
        object.__setattr__(
            self, "gap_reduction_factors", tuple(self.gap_reduction_factors)
        )
        self._validate()

    def _validate(self) -> None:
        if self.relative_gap_line < 0 or self.relative_gap_labels < 0:
            raise ValueError("relative gaps must be non-negative")
        for name in ("pad_top", "pad_bot"):
            value = getattr(self, name)
            if not 0 <= value < 0.5:
                raise ValueError(f"{name} must be in [0, 0.5), got {value}")
        if self.coincident_threshold_factor < 0:
            raise ValueError("coincident_threshold_factor must be non-negative")
        if not 0 <= self.shelf_center_threshold <= 1:
            raise ValueError("shelf_center_threshold must be in [0, 1]")
        factors = self.gap_reduction_factors
        if not factors:
            raise ValueError("gap_reduction_factors must not be empty")
        if any(not 0 < f < 1 for f in factors):
            raise ValueError("gap_reduction_factors must lie in (0, 1)")
        if any(b >= a for a, b in zip(factors, factors[1:])):
            raise ValueError("gap_reduction_factors must be strictly decreasing")
        if not 0 < self.label_lineheight <= 2:
            raise ValueError("label_lineheight must be in (0, 2]")
        if self.height_safety_margin < 0:
            raise ValueError("height_safety_margin must be non-negative")
        if not 0 < self.height_fallback_npc < 1:
            raise ValueError("height_fallback_npc must be in (0, 1)")
        if self.cache_ttl_seconds <= 0:
            raise ValueError("cache_ttl_seconds must be positive")
        if self.cache_max_entries < 1 or self.cache_cleanup_interval < 1:
            raise ValueError("cache limits must be at least 1")

    @classmethod
    def keys(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    def get(self, name: str, default: Any = _MISSING) -> Any:
        """Return a field by name, or *default* when the name is unknown.

        Raises KeyError for an unknown name when no default is given.
        """
        if name in self.keys():
            return getattr(self, name)
        if default is _MISSING:
            raise KeyError(
                f"Label placement parameter '{name}' not found. "
                f"Available keys: {', '.join(self.keys())}"
            )
        return default

    def override(self, **changes: Any) -> LabelPlacementConfig:
        """Return a new configuration with *changes* applied."""
        unknown = sorted(set(changes) - set(self.keys()))
        if unknown:
            raise KeyError(
                f"Unknown label placement parameter(s): {', '.join(unknown)}"
            )
        return replace(self, **changes)

    def as_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["gap_reduction_factors"] = list(self.gap_reduction_factors)
        return data


DEFAULT_CONFIG = LabelPlacementConfig()


def get_label_placement_param(
    name: str,
    default: Any = _MISSING,
    config: LabelPlacementConfig = DEFAULT_CONFIG,
) -> Any:
    """Look up one placement parameter (see LabelPlacementConfig.get)."""
    return config.get(name, default)


def get_label_placement_config(
    config: LabelPlacementConfig = DEFAULT_CONFIG,
) -> dict[str, Any]:
    """Return a mutable copy of the configuration as a plain dict."""
    return config.as_dict()


def override_label_placement_config(
    config: LabelPlacementConfig = DEFAULT_CONFIG, **changes: Any
) -> LabelPlacementConfig:
    """Derive a new configuration; *config* itself is left untouched."""
    return config.override(**changes)


def calculate_base_size(
    width: float | None,
    height: float | None,
    divisor: float = FONT_SCALING_DIVISOR,
    min_size: float = FONT_SCALING_MIN_SIZE,
    max_size: float = FONT_SCALING_MAX_SIZE,
) -> float:
    """Base font size in points from viewport size in inches.

    Uses the geometric mean of the two dimensions so fonts follow the
    overall plot area: ``clamp(sqrt(w * h) / divisor, min_size, max_size)``.
    """
    if width is None or height is None:
        return FONT_SCALING_FALLBACK
    if not (math.isfinite(width) and math.isfinite(height)):
        return FONT_SCALING_FALLBACK
    if width <= 0 or height <= 0:
        return FONT_SCALING_FALLBACK
    diagonal = math.sqrt(width * height)
    return max(min_size, min(max_size, diagonal / divisor))
