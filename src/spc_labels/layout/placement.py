"""Vertical placement of the centerline and target labels.

Labels sit in the right-hand gutter next to the horizontal lines they
annotate. Positions are label-block centers in normalized panel
coordinates (NPC, 0 = bottom, 1 = top), so the same inputs give the same
layout at any resolution.

Strategy, first match wins:
1. Single label: clamp the anchor into the padded panel.
2. Coincident anchors: merge both texts into one block at their midpoint.
3. Shelved: anchors near the panel center where neither inward nor
   outward stacking fits; center the pair on the panel.
4. Stacked-normal: upper label just below its line, lower label just
   above its line, separated by the full label gap.
5. Stacked-compressed: retry with the label gap scaled by each reduction
   factor in turn; as a last resort pin the labels to the panel pads.
"""

from __future__ import annotations

__all__ = ["place_labels"]

import logging
import math
import warnings
from dataclasses import dataclass

from spc_labels.config import DEFAULT_CONFIG, LabelPlacementConfig
from spc_labels.model import LayoutStrategy, MeasuredLabel, PlacementResult

logger = logging.getLogger(__name__)

_EPS = 1e-9


@dataclass(frozen=True)
class _Bounds:
    """Usable vertical extent for label blocks."""

    lo: float
    hi: float
    center: float


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _resolve_bounds(
    panel_range: tuple[float, float], config: LabelPlacementConfig
) -> _Bounds:
    r0, r1 = panel_range
    if not (math.isfinite(r0) and math.isfinite(r1) and 0.0 <= r0 < r1 <= 1.0):
        warnings.warn(
            f"Invalid panel range {panel_range!r}; using (0, 1)", stacklevel=3
        )
        r0, r1 = 0.0, 1.0
    center = (r0 + r1) / 2
    lo = r0 + config.pad_bot
    hi = r1 - config.pad_top
    if lo > hi:
        lo = hi = center
    return _Bounds(lo=lo, hi=hi, center=center)


def _validated(label: MeasuredLabel | None, name: str) -> MeasuredLabel | None:
    if label is None:
        return None
    if label.is_finite():
        return label
    msg = (
        f"Dropping {name} label ({label.role.value}): non-finite anchor "
        f"{label.anchor_npc!r} or height {label.height_npc!r}"
    )
    logger.warning(msg)
    warnings.warn(msg, stacklevel=3)
    return None


def _block_clamp(y: float, height: float, bounds: _Bounds) -> float:
    """Clamp a block center so the whole block stays inside *bounds*."""
    lo = bounds.lo + height / 2
    hi = bounds.hi - height / 2
    if lo > hi:
        return bounds.center
    return _clamp(y, lo, hi)


def _fits(
    y_up: float,
    y_low: float,
    upper: MeasuredLabel,
    lower: MeasuredLabel,
    gap: float,
    bounds: _Bounds,
) -> bool:
    """True when the blocks keep *gap* between them and stay in bounds."""
    space = (y_up - upper.height_npc / 2) - (y_low + lower.height_npc / 2)
    return (
        space >= gap - _EPS
        and y_low - lower.height_npc / 2 >= bounds.lo - _EPS
        and y_up + upper.height_npc / 2 <= bounds.hi + _EPS
    )


def _separation(upper: MeasuredLabel, lower: MeasuredLabel, gap: float) -> float:
    """Minimum distance between the two centers for a given block gap."""
    return (upper.height_npc + lower.height_npc) / 2 + gap


def _inward(
    upper: MeasuredLabel, lower: MeasuredLabel, gap_line: float, bounds: _Bounds
) -> tuple[float, float]:
    """Upper label under its line, lower label over its line."""
    y_up = upper.anchor_npc - upper.height_npc / 2 - gap_line
    y_low = lower.anchor_npc + lower.height_npc / 2 + gap_line
    return (
        _block_clamp(y_up, upper.height_npc, bounds),
        _block_clamp(y_low, lower.height_npc, bounds),
    )


def _outward_in_bounds(
    upper: MeasuredLabel, lower: MeasuredLabel, gap_line: float, bounds: _Bounds
) -> bool:
    """Whether labels placed outside the pair of lines fit the panel."""
    top = upper.anchor_npc + upper.height_npc + gap_line
    bottom = lower.anchor_npc - lower.height_npc - gap_line
    return top <= bounds.hi + _EPS and bottom >= bounds.lo - _EPS


def _near_center(
    upper: MeasuredLabel,
    lower: MeasuredLabel,
    bounds: _Bounds,
    config: LabelPlacementConfig,
) -> bool:
    limit = config.shelf_center_threshold + _EPS
    return (
        abs(upper.anchor_npc - bounds.center) <= limit
        and abs(lower.anchor_npc - bounds.center) <= limit
    )


def _compress(
    ideal: tuple[float, float],
    upper: MeasuredLabel,
    lower: MeasuredLabel,
    gap: float,
    bounds: _Bounds,
) -> tuple[float, float]:
    """Push overlapping blocks apart to *gap*, then shift them into bounds."""
    y_up, y_low = ideal
    sep = _separation(upper, lower, gap)
    if y_up - y_low < sep:
        mid = (y_up + y_low) / 2
        y_up = mid + sep / 2
        y_low = mid - sep / 2

    overshoot = y_up + upper.height_npc / 2 - bounds.hi
    if overshoot > 0:
        y_up -= overshoot
        y_low -= overshoot
    undershoot = bounds.lo - (y_low - lower.height_npc / 2)
    if undershoot > 0:
        y_up += undershoot
        y_low += undershoot
    return y_up, y_low


def _log_gaps(
    strategy: LayoutStrategy,
    gap: float,
    panel_height_absolute: float | None,
) -> None:
    if panel_height_absolute is not None and math.isfinite(panel_height_absolute):
        logger.debug(
            "Placed labels with %s (gap %.4f npc = %.4f in)",
            strategy.value,
            gap,
            gap * panel_height_absolute,
        )
    else:
        logger.debug("Placed labels with %s (gap %.4f npc)", strategy.value, gap)


def _pair_result(
    strategy: LayoutStrategy,
    a_is_upper: bool,
    y_up: float,
    y_low: float,
    gap_factor: float | None,
    min_gap: float,
    clamped: bool = False,
) -> PlacementResult:
    y_up = _clamp(y_up, 0.0, 1.0)
    y_low = _clamp(y_low, 0.0, 1.0)
    y_a, y_b = (y_up, y_low) if a_is_upper else (y_low, y_up)
    return PlacementResult(
        strategy=strategy,
        y_a=y_a,
        y_b=y_b,
        gap_factor=gap_factor,
        min_gap_npc=min_gap,
        clamped=clamped,
    )


def place_labels(
    label_a: MeasuredLabel | None,
    label_b: MeasuredLabel | None = None,
    panel_range: tuple[float, float] = (0.0, 1.0),
    config: LabelPlacementConfig = DEFAULT_CONFIG,
    panel_height_absolute: float | None = None,
) -> PlacementResult:
    """Place one or two labels without overlap.

    Never raises for numeric input: labels with non-finite anchor or height
    are dropped with a warning and the remaining label is placed alone.
    *panel_height_absolute* (inches) is only used for debug logging.
    """
    bounds = _resolve_bounds(panel_range, config)
    a = _validated(label_a, "first")
    b = _validated(label_b, "second")

    if a is None and b is None:
        return PlacementResult(strategy=LayoutStrategy.EMPTY)

    if a is None or b is None:
        only = a if a is not None else b
        y = _clamp(_clamp(only.anchor_npc, bounds.lo, bounds.hi), 0.0, 1.0)
        return PlacementResult(
            strategy=LayoutStrategy.SINGLE,
            y_a=y if a is not None else None,
            y_b=y if b is not None else None,
            clamped=y != only.anchor_npc,
        )

    h_ref = max(a.height_npc, b.height_npc)
    distance = abs(a.anchor_npc - b.anchor_npc)

    # Equal anchors always merge, even with zero-height labels.
    if distance == 0 or distance < config.coincident_threshold_factor * h_ref:
        merged_h = a.height_npc + b.height_npc
        mid = (a.anchor_npc + b.anchor_npc) / 2
        y = _clamp(_block_clamp(mid, merged_h, bounds), 0.0, 1.0)
        logger.debug("Merged coincident labels at %.4f npc", y)
        return PlacementResult(
            strategy=LayoutStrategy.MERGED_COINCIDENT,
            y_a=y,
            y_b=y,
            merged_height_npc=merged_h,
            clamped=y != mid,
        )

    a_is_upper = a.anchor_npc > b.anchor_npc
    upper, lower = (a, b) if a_is_upper else (b, a)
    gap_line = config.relative_gap_line * h_ref
    gap_labels = config.relative_gap_labels * h_ref

    ideal = _inward(upper, lower, gap_line, bounds)
    normal_ok = _fits(*ideal, upper, lower, gap_labels, bounds)

    if (
        not normal_ok
        and _near_center(upper, lower, bounds, config)
        and not _outward_in_bounds(upper, lower, gap_line, bounds)
    ):
        half = _separation(upper, lower, gap_labels) / 2
        shelved = (bounds.center + half, bounds.center - half)
        if _fits(*shelved, upper, lower, gap_labels, bounds):
            _log_gaps(LayoutStrategy.SHELVED_CENTER, gap_labels, panel_height_absolute)
            return _pair_result(
                LayoutStrategy.SHELVED_CENTER, a_is_upper, *shelved, 1.0, gap_labels
            )

    if normal_ok:
        _log_gaps(LayoutStrategy.STACKED_NORMAL, gap_labels, panel_height_absolute)
        return _pair_result(
            LayoutStrategy.STACKED_NORMAL, a_is_upper, *ideal, 1.0, gap_labels
        )

    for factor in config.gap_reduction_factors:
        gap = gap_labels * factor
        candidate = _compress(ideal, upper, lower, gap, bounds)
        if _fits(*candidate, upper, lower, gap, bounds):
            _log_gaps(LayoutStrategy.STACKED_COMPRESSED, gap, panel_height_absolute)
            return _pair_result(
                LayoutStrategy.STACKED_COMPRESSED, a_is_upper, *candidate, factor, gap
            )

    # Panel too short for any gap: hold the labels against the pads.
    logger.info(
        "Labels do not fit the panel (heights %.3f + %.3f npc); pinning to pads",
        upper.height_npc,
        lower.height_npc,
    )
    h_up, h_low = upper.height_npc, lower.height_npc
    space = bounds.hi - bounds.lo
    if h_up + h_low > space:
        # Shrink both blocks to their share of the range to keep the order.
        scale = space / (h_up + h_low)
        h_up, h_low = h_up * scale, h_low * scale
    y_up = bounds.hi - h_up / 2
    y_low = bounds.lo + h_low / 2
    return _pair_result(
        LayoutStrategy.STACKED_COMPRESSED,
        a_is_upper,
        y_up,
        y_low,
        config.gap_reduction_factors[-1],
        0.0,
        clamped=True,
    )
