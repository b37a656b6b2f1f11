"""
Tests for visualization/responsive.py - breakpoints and the resize debouncer.

Tests cover:
- Width, height, margin and font scale per breakpoint
- Debouncer collapsing bursts into one call with the latest arguments
- flush() and cancel()
- ChartPipeline.resize() rendering once per burst
"""

import threading
import time

import pytest

from config import DashboardConfig, GeographyConfig, RenderConfig
from core.config import PathConfig
from core.context import DashboardContext
from visualization.catalogue import get_chart_config
from visualization.pipeline import ChartPipeline
from visualization.responsive import (
    DEFAULT_MARGIN,
    Debouncer,
    font_scale,
    responsive_dimensions,
    responsive_height,
    responsive_margin,
    responsive_width,
)


class TestBreakpoints:
    """Test sizing per breakpoint."""

    @pytest.mark.parametrize("screen,scale", [(375, 0.75), (480, 0.75), (700, 0.85), (1440, 1.0)])
    def test_font_scale(self, screen, scale):
        assert font_scale(screen) == scale

    def test_width_on_mobile_has_a_floor(self):
        assert responsive_width(375, 300) == 320

    def test_width_on_desktop_is_capped(self):
        assert responsive_width(1920, 1800, default_width=1200) == 1200
        assert responsive_width(1920, 1000, default_width=1200) == 960

    def test_height(self):
        assert responsive_height(375) == 300
        assert responsive_height(700) == 375
        assert responsive_height(1440) == 500

    def test_margin_shrinks_on_mobile(self):
        margin = responsive_margin(375)
        assert margin["r"] == 40
        assert responsive_margin(1440) == DEFAULT_MARGIN

    def test_dimensions_default_container(self):
        dims = responsive_dimensions(1440)
        assert dims.width == 1200
        assert dims.height == 500
        assert not dims.is_mobile


class TestDebouncer:
    """Test burst coalescing."""

    def test_burst_gives_one_call_with_last_args(self):
        calls = []
        done = threading.Event()

        def callback(width, height):
            calls.append((width, height))
            done.set()

        debouncer = Debouncer(callback, delay_ms=50)
        for i in range(10):
            debouncer(800 + i, 400)

        assert done.wait(timeout=2)
        # Give a stray timer the chance to fire if cancellation failed
        time.sleep(0.15)
        assert calls == [(809, 400)]
        assert not debouncer.pending

    def test_separate_bursts_each_fire(self):
        calls = []
        debouncer = Debouncer(calls.append, delay_ms=20)
        debouncer(1)
        time.sleep(0.2)
        debouncer(2)
        time.sleep(0.2)
        assert calls == [1, 2]

    def test_flush_runs_pending_call_now(self):
        calls = []
        debouncer = Debouncer(calls.append, delay_ms=10_000)
        debouncer("a")
        debouncer("b")
        assert debouncer.pending
        assert debouncer.flush() is True
        assert calls == ["b"]
        assert debouncer.flush() is False

    def test_cancel_drops_pending_call(self):
        calls = []
        debouncer = Debouncer(calls.append, delay_ms=20)
        debouncer("a")
        debouncer.cancel()
        time.sleep(0.1)
        assert calls == []
        assert not debouncer.pending

    def test_kwargs_are_forwarded(self):
        received = {}
        debouncer = Debouncer(lambda **kw: received.update(kw), delay_ms=10_000)
        debouncer(width=320, height=200)
        debouncer.flush()
        assert received == {"width": 320, "height": 200}


@pytest.fixture
def slow_context(temp_dir, dataset_files):
    """Context whose resize debounce never elapses during a test."""
    ctx = DashboardContext(
        config=DashboardConfig(
            geography=GeographyConfig(enabled=False),
            render=RenderConfig(resize_debounce_ms=10_000),
        ),
        paths=PathConfig(base_dir=temp_dir),
        sources=dataset_files,
    )
    yield ctx
    ctx.close()


class TestPipelineResize:
    """A burst of resizes redraws the chart once."""

    def test_burst_renders_once(self, slow_context):
        pipeline = ChartPipeline(get_chart_config("testing-total"), slow_context)
        pipeline.load()
        pipeline.render()
        before = pipeline.render_count

        for width in range(600, 1000, 40):
            pipeline.resize(width, 400)
        assert pipeline.flush_resize() is True

        assert pipeline.render_count == before + 1
        assert pipeline.dimensions.width == 960
        assert pipeline.figure.layout.width == 960
        pipeline.close()

    def test_resize_before_load_only_records_size(self, slow_context):
        pipeline = ChartPipeline(get_chart_config("testing-total"), slow_context)
        pipeline.resize(375, 300)
        pipeline.flush_resize()
        assert pipeline.render_count == 0
        assert pipeline.dimensions.font_scale == 0.75
