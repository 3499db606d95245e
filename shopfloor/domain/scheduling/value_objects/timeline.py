"""
Timeline Value Objects

Pure geometry for a Gantt-style schedule: a visible window, a pixel density
and tick instants. Nothing here knows how the timeline is drawn.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from ...shared.base import as_utc
from .enums import ZoomLevel


@dataclass(frozen=True)
class ZoomSpec:
    """Window length, tick spacing and pixel density of one zoom level."""

    window: timedelta
    tick_interval: timedelta
    pixels_per_minute: float

    @property
    def window_minutes(self) -> float:
        return self.window.total_seconds() / 60


@dataclass(frozen=True)
class BarGeometry:
    """Horizontal placement of an assignment bar."""

    left: float
    width: float

    @property
    def right(self) -> float:
        return self.left + self.width


@dataclass(frozen=True)
class TimelineProjection:
    """
    A zoom level applied to a concrete window start.

    Window bounds are UTC. Instants passed in are normalised the same way, so
    naive values are read as UTC.
    """

    zoom: ZoomLevel
    window_start: datetime
    window_end: datetime
    pixels_per_minute: float
    ticks: tuple[datetime, ...]

    @property
    def window_minutes(self) -> float:
        return (self.window_end - self.window_start).total_seconds() / 60

    @property
    def width(self) -> float:
        """Total timeline width in pixels."""
        return self.window_minutes * self.pixels_per_minute

    def offset(self, instant: datetime) -> float:
        """Horizontal pixel offset of ``instant`` from the window start."""
        minutes = (as_utc(instant) - self.window_start).total_seconds() / 60
        return minutes * self.pixels_per_minute

    def contains(self, instant: datetime) -> bool:
        return self.window_start <= as_utc(instant) <= self.window_end

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """True when ``[start, end)`` intersects the visible window."""
        return as_utc(start) < self.window_end and as_utc(end) > self.window_start

    def bar(self, start: datetime, end: datetime) -> BarGeometry:
        """Left offset and width for a bar running from ``start`` to ``end``."""
        left = self.offset(start)
        return BarGeometry(left=left, width=self.offset(end) - left)
