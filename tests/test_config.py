"""Tests for the immutable label placement configuration."""

import dataclasses

import pytest

from spc_labels.config import (
    DEFAULT_CONFIG,
    LabelPlacementConfig,
    calculate_base_size,
    get_label_placement_config,
    get_label_placement_param,
    override_label_placement_config,
)

EXPECTED_KEYS = {
    "relative_gap_line",
    "relative_gap_labels",
    "pad_top",
    "pad_bot",
    "coincident_threshold_factor",
    "gap_reduction_factors",
    "shelf_center_threshold",
    "label_lineheight",
    "height_safety_margin",
    "height_fallback_npc",
    "cache_ttl_seconds",
    "cache_max_entries",
    "cache_cleanup_interval",
}


class TestDefaults:
    def test_all_keys_present(self):
        assert set(LabelPlacementConfig.keys()) == EXPECTED_KEYS

    def test_default_values(self):
        assert DEFAULT_CONFIG.relative_gap_line == 0.05
        assert DEFAULT_CONFIG.relative_gap_labels == 0.30
        assert DEFAULT_CONFIG.pad_top == DEFAULT_CONFIG.pad_bot == 0.01
        assert DEFAULT_CONFIG.coincident_threshold_factor == 0.3
        assert DEFAULT_CONFIG.gap_reduction_factors == (0.75, 0.5, 0.25, 0.1)
        assert DEFAULT_CONFIG.shelf_center_threshold == 0.10
        assert DEFAULT_CONFIG.height_fallback_npc == 0.08

    def test_gap_between_labels_exceeds_gap_to_line(self):
        assert DEFAULT_CONFIG.relative_gap_labels > DEFAULT_CONFIG.relative_gap_line

    def test_reduction_factors_strictly_decreasing(self):
        factors = DEFAULT_CONFIG.gap_reduction_factors
        assert all(b < a for a, b in zip(factors, factors[1:]))
        assert all(0 < f < 1 for f in factors)


class TestImmutability:
    """The canonical configuration cannot change at runtime."""

    def test_assignment_raises(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            DEFAULT_CONFIG.relative_gap_line = 0.5

    def test_override_returns_new_object(self):
        custom = DEFAULT_CONFIG.override(relative_gap_line=0.1)
        assert custom is not DEFAULT_CONFIG
        assert custom.relative_gap_line == 0.1
        assert DEFAULT_CONFIG.relative_gap_line == 0.05

    def test_override_function_leaves_default_untouched(self):
        custom = override_label_placement_config(pad_top=0.05)
        assert custom.pad_top == 0.05
        assert DEFAULT_CONFIG.pad_top == 0.01

    def test_override_unknown_key(self):
        with pytest.raises(KeyError, match="no_such_key"):
            DEFAULT_CONFIG.override(no_such_key=1)

    def test_dict_copy_is_detached(self):
        data = get_label_placement_config()
        data["pad_top"] = 0.4
        data["gap_reduction_factors"].append(0.01)
        assert DEFAULT_CONFIG.pad_top == 0.01
        assert len(DEFAULT_CONFIG.gap_reduction_factors) == 4

    def test_list_factors_become_tuple(self):
        config = DEFAULT_CONFIG.override(gap_reduction_factors=[0.6, 0.3])
        assert config.gap_reduction_factors == (0.6, 0.3)
        hash(config)


class TestLookup:
    def test_known_key(self):
        assert get_label_placement_param("relative_gap_line") == 0.05

    def test_unknown_key_with_default(self):
        assert get_label_placement_param("missing", default=42) == 42

    def test_unknown_key_lists_available(self):
        with pytest.raises(KeyError, match="Available keys: relative_gap_line"):
            get_label_placement_param("missing")

    def test_lookup_in_custom_config(self):
        custom = DEFAULT_CONFIG.override(shelf_center_threshold=0.2)
        assert get_label_placement_param("shelf_center_threshold", config=custom) == 0.2


class TestValidation:
    @pytest.mark.parametrize(
        "changes",
        [
            {"relative_gap_line": -0.1},
            {"pad_top": 0.5},
            {"pad_bot": -0.01},
            {"gap_reduction_factors": ()},
            {"gap_reduction_factors": (0.5, 0.75)},
            {"gap_reduction_factors": (1.0, 0.5)},
            {"label_lineheight": 0},
            {"height_fallback_npc": 1.0},
            {"cache_ttl_seconds": 0},
            {"cache_max_entries": 0},
        ],
    )
    def test_invalid_values_rejected(self, changes):
        with pytest.raises(ValueError):
            DEFAULT_CONFIG.override(**changes)

    def test_zero_gap_allowed(self):
        config = DEFAULT_CONFIG.override(relative_gap_labels=0.0)
        assert config.relative_gap_labels == 0.0


class TestCalculateBaseSize:
    def test_geometric_mean_scaling(self):
        assert calculate_base_size(7, 7) == pytest.approx(8.0)
        assert calculate_base_size(35, 35) == pytest.approx(10.0)
        assert calculate_base_size(70, 70) == pytest.approx(20.0)

    def test_clamped_to_range(self):
        assert calculate_base_size(1, 1) == 8.0
        assert calculate_base_size(1000, 1000) == 48.0

    @pytest.mark.parametrize(
        "width, height",
        [(None, 5), (5, None), (0, 5), (-1, 5), (float("nan"), 5), (5, float("inf"))],
    )
    def test_invalid_dimensions_use_fallback(self, width, height):
        assert calculate_base_size(width, height) == 14.0

    def test_custom_divisor(self):
        assert calculate_base_size(100, 100, divisor=5) == pytest.approx(20.0)
