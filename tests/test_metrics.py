"""Tests for text measurement and the metrics provider."""

import logging

import pytest
from conftest import FakeClock

from spc_labels.config import DEFAULT_CONFIG
from spc_labels.layout.cache import MeasurementCache
from spc_labels.layout.metrics import (
    FixedMetricsMeasurer,
    MatplotlibMeasurer,
    TextMetricsProvider,
    count_text_lines,
)


class FailingMeasurer:
    def text_height(self, text, font_size, line_height, panel_width, panel_height):
        raise RuntimeError("device closed")


class BrokenCache:
    """A cache whose storage is unavailable."""

    def get_or_compute(self, key, compute):
        raise OSError("cache storage unavailable")


class CountingMeasurer(FixedMetricsMeasurer):
    def __init__(self):
        super().__init__()
        self.calls = 0

    def text_height(self, *args):
        self.calls += 1
        return super().text_height(*args)


class TestCountTextLines:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("", (0, 0)),
            ("A", (1, 0)),
            ("NUV. NIVEAU\n12", (2, 0)),
            ("A\nB\n\nC", (3, 1)),
            ("A\n\nB\n\nC", (3, 2)),
            ("\nA\n", (1, 0)),
        ],
    )
    def test_counts(self, text, expected):
        assert count_text_lines(text) == expected


class TestFixedMetricsMeasurer:
    def test_two_line_label(self):
        # 2 lines x 12pt x 0.9 = 21.6pt
        height = FixedMetricsMeasurer().text_height("A\nB", 12, 0.9, 2.0, 4.0)
        assert height == pytest.approx(21.6 / 72)

    def test_paragraph_break_adds_half_line(self):
        measurer = FixedMetricsMeasurer()
        plain = measurer.text_height("A\nB", 12, 1.0, 2.0, 4.0)
        spaced = measurer.text_height("A\n\nB", 12, 1.0, 2.0, 4.0)
        assert spaced - plain == pytest.approx(6 / 72)

    def test_long_line_wraps(self):
        # 0.6em x 10pt = 6pt per glyph; 0.51in fits 6 glyphs per line
        height = FixedMetricsMeasurer().text_height("x" * 13, 10, 1.0, 0.51, 4.0)
        assert height == pytest.approx(3 * 10 / 72)

    def test_taller_with_more_lines(self):
        measurer = FixedMetricsMeasurer()
        one = measurer.text_height("A", 10, 0.9, 2.0, 4.0)
        three = measurer.text_height("A\nB\nC", 10, 0.9, 2.0, 4.0)
        assert three == pytest.approx(3 * one)


class TestTextMetricsProvider:
    def test_empty_text_has_zero_height(self, provider):
        metrics = provider.measure("", 12, 0.9, 2.0, 4.0)
        assert metrics.height_npc == 0.0
        assert metrics.height_absolute == 0.0
        assert not metrics.degraded

    def test_npc_is_fraction_of_panel(self, provider):
        metrics = provider.measure("A\nB", 12, 0.9, 2.0, 3.0)
        assert metrics.height_absolute == pytest.approx(0.3)
        assert metrics.height_npc == pytest.approx(0.1)
        assert not metrics.degraded

    def test_line_height_defaults_to_config(self, provider):
        explicit = provider.measure("A\nB", 12, DEFAULT_CONFIG.label_lineheight, 2, 3)
        assert provider.measure("A\nB", 12, None, 2, 3) == explicit

    def test_safety_margin_applied(self):
        config = DEFAULT_CONFIG.override(height_safety_margin=1.5)
        provider = TextMetricsProvider(FixedMetricsMeasurer(), config=config)
        metrics = provider.measure("A\nB", 12, 0.9, 2.0, 3.0)
        assert metrics.height_absolute == pytest.approx(0.45)

    def test_no_surface_uses_fallback(self):
        provider = TextMetricsProvider(measurer=None)
        metrics = provider.measure("A\nB", 12, 0.9, 2.0, 4.0)
        assert metrics.degraded
        assert metrics.height_npc == 0.08
        assert metrics.height_absolute == pytest.approx(0.32)

    def test_measurer_error_uses_fallback(self, caplog):
        provider = TextMetricsProvider(FailingMeasurer())
        with caplog.at_level(logging.WARNING, logger="spc_labels"):
            metrics = provider.measure("A", 12, 0.9, 2.0, 4.0)
        assert metrics.degraded
        assert metrics.height_npc == DEFAULT_CONFIG.height_fallback_npc
        assert "device closed" in caplog.text

    @pytest.mark.parametrize("panel_height", [None, 0.0, -1.0, float("nan")])
    def test_unusable_panel_uses_fallback(self, provider, panel_height):
        metrics = provider.measure("A", 12, 0.9, 2.0, panel_height)
        assert metrics.degraded
        assert metrics.height_absolute is None

    def test_invalid_font_size_uses_fallback(self, provider):
        assert provider.measure("A", 0, 0.9, 2.0, 4.0).degraded
        assert provider.measure("A", float("inf"), 0.9, 2.0, 4.0).degraded

    def test_fallback_follows_config(self):
        config = DEFAULT_CONFIG.override(height_fallback_npc=0.12)
        provider = TextMetricsProvider(config=config)
        assert provider.measure("A", 12, 0.9, 2.0, 4.0).height_npc == 0.12


class TestProviderCache:
    def test_repeated_measurement_hits_cache(self):
        measurer = CountingMeasurer()
        cache = MeasurementCache(clock=FakeClock())
        provider = TextMetricsProvider(measurer, cache=cache)
        first = provider.measure("A\nB", 12, 0.9, 2.0, 4.0)
        second = provider.measure("A\nB", 12, 0.9, 2.0, 4.0)
        assert first == second
        assert measurer.calls == 1
        assert cache.hits == 1

    def test_cached_and_uncached_agree(self):
        cached = TextMetricsProvider(FixedMetricsMeasurer(), cache=MeasurementCache())
        plain = TextMetricsProvider(FixedMetricsMeasurer())
        for text in ("A", "A\nB", "A\n\nB\nC"):
            assert cached.measure(text, 11, 0.9, 1.5, 3.0) == plain.measure(
                text, 11, 0.9, 1.5, 3.0
            )

    def test_failures_not_cached(self):
        cache = MeasurementCache(clock=FakeClock())
        provider = TextMetricsProvider(FailingMeasurer(), cache=cache)
        assert provider.measure("A", 12, 0.9, 2.0, 4.0).degraded
        assert len(cache) == 0


class TestMatplotlibMeasurer:
    """Real text extents from an off-screen Agg figure."""

    def test_positive_height(self):
        height = MatplotlibMeasurer().text_height("NUV. NIVEAU", 12, 0.9, 2.0, 4.0)
        # one 12pt line is roughly a sixth of an inch
        assert 0.05 < height < 0.5

    def test_more_lines_are_taller(self):
        measurer = MatplotlibMeasurer()
        one = measurer.text_height("A", 12, 0.9, 2.0, 4.0)
        three = measurer.text_height("A\nB\nC", 12, 0.9, 2.0, 4.0)
        assert three > 2 * one

    def test_through_provider(self):
        provider = TextMetricsProvider(MatplotlibMeasurer())
        metrics = provider.measure("UDVIKLINGSMÅL\n2%", 12, 0.9, 2.0, 4.0)
        assert not metrics.degraded
        assert metrics.height_npc == pytest.approx(metrics.height_absolute / 4.0)


class TestCacheBypass:
    """A failing cache never changes the measured height."""

    def test_broken_cache_is_bypassed(self):
        plain = TextMetricsProvider(FixedMetricsMeasurer())
        cached = TextMetricsProvider(FixedMetricsMeasurer(), cache=BrokenCache())
        expected = plain.measure("A\nB", 12, 0.9, 2.0, 4.0)
        result = cached.measure("A\nB", 12, 0.9, 2.0, 4.0)
        assert result == expected
        assert not result.degraded

    def test_measurer_error_still_falls_back_with_cache(self):
        provider = TextMetricsProvider(FailingMeasurer(), cache=BrokenCache())
        assert provider.measure("A", 12, 0.9, 2.0, 4.0).degraded

    def test_non_numeric_height_falls_back(self):
        class NoneMeasurer:
            def text_height(self, *args):
                return None

        provider = TextMetricsProvider(NoneMeasurer())
        assert provider.measure("A", 12, 0.9, 2.0, 4.0).degraded
