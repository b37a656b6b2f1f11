"""
Responsive sizing and resize debouncing for charts.

Breakpoints follow the dashboard's CSS: phones up to 480px, tablets up to
768px, small desktops up to 1024px.
"""

import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

MOBILE_MAX = 480
TABLET_MAX = 768
SMALL_DESKTOP_MAX = 1024

DEFAULT_MARGIN = {"t": 60, "r": 150, "b": 80, "l": 80}

# Horizontal padding of the chart card
CONTAINER_PADDING = 40


@dataclass(frozen=True)
class ChartDimensions:
    """Pixel size, margins and font scale for one render."""
    width: int
    height: int
    margin: dict = field(default_factory=lambda: dict(DEFAULT_MARGIN))
    font_scale: float = 1.0

    @property
    def is_mobile(self) -> bool:
        return self.font_scale < 1.0


def font_scale(screen_width: int) -> float:
    if screen_width <= MOBILE_MAX:
        return 0.75
    if screen_width <= TABLET_MAX:
        return 0.85
    return 1.0


def responsive_width(screen_width: int, container_width: int, default_width: int = 1200) -> int:
    available = container_width - CONTAINER_PADDING
    if screen_width <= MOBILE_MAX:
        return max(available, 320)
    if screen_width <= TABLET_MAX:
        return max(available, 500)
    if screen_width <= SMALL_DESKTOP_MAX:
        return max(available, 700)
    return min(default_width, available)


def responsive_height(screen_width: int, default_height: int = 500) -> int:
    if screen_width <= MOBILE_MAX:
        return int(min(default_height * 0.6, 350))
    if screen_width <= TABLET_MAX:
        return int(min(default_height * 0.75, 450))
    return default_height


def responsive_margin(screen_width: int, default_margin: Optional[dict] = None) -> dict:
    margin = dict(default_margin or DEFAULT_MARGIN)
    if screen_width <= MOBILE_MAX:
        return {
            "t": min(margin["t"] * 0.6, 40),
            "r": min(margin["r"] * 0.3, 40),
            "b": min(margin["b"] * 0.6, 50),
            "l": min(margin["l"] * 0.5, 40),
        }
    if screen_width <= TABLET_MAX:
        return {
            "t": min(margin["t"] * 0.75, 50),
            "r": min(margin["r"] * 0.5, 80),
            "b": min(margin["b"] * 0.75, 60),
            "l": min(margin["l"] * 0.7, 60),
        }
    return margin


def responsive_dimensions(
    screen_width: int,
    container_width: Optional[int] = None,
    default_width: int = 1200,
    default_height: int = 500,
    default_margin: Optional[dict] = None,
) -> ChartDimensions:
    """Dimensions for a chart given the viewport and its container width."""
    if container_width is None:
        container_width = screen_width
    return ChartDimensions(
        width=responsive_width(screen_width, container_width, default_width),
        height=responsive_height(screen_width, default_height),
        margin=responsive_margin(screen_width, default_margin),
        font_scale=font_scale(screen_width),
    )


class Debouncer:
    """
    Coalesces bursts of calls into one delayed call with the latest arguments.

    Each call cancels the pending timer and starts a new one, so N calls
    inside the delay window produce exactly one invocation.

    Args:
        callback: Function to invoke once the burst settles
        delay_ms: Quiet period before invoking
    """

    def __init__(self, callback: Callable, delay_ms: int = 250):
        self.callback = callback
        self.delay_ms = delay_ms
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0
        self._pending_args: tuple = ()
        self._pending_kwargs: dict = {}

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def __call__(self, *args, **kwargs) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._generation += 1
            self._pending_args = args
            self._pending_kwargs = kwargs
            self._timer = threading.Timer(
                self.delay_ms / 1000, self._fire, args=(self._generation,)
            )
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A newer call replaced this timer after it had already started
            if generation != self._generation or self._timer is None:
                return
            self._timer = None
            args, kwargs = self._pending_args, self._pending_kwargs
        self.callback(*args, **kwargs)

    def flush(self) -> bool:
        """Run the pending call now. Returns False if nothing was pending."""
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
            self._generation += 1
            args, kwargs = self._pending_args, self._pending_kwargs
        self.callback(*args, **kwargs)
        return True

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            self._generation += 1
