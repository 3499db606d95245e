"""
Timeline Projector

Maps absolute time onto the horizontal pixel space of a Gantt-style view.
Pure arithmetic; nothing here depends on how the view is drawn.
"""

from datetime import date, datetime, time, timedelta, timezone

from ...shared.base import as_utc
from ...shared.exceptions import InvalidInputError
from ..value_objects.enums import ZoomLevel
from ..value_objects.timeline import TimelineProjection, ZoomSpec

# One screen width covers each window at these densities
ZOOM_SPECS: dict[ZoomLevel, ZoomSpec] = {
    ZoomLevel.HOUR: ZoomSpec(
        window=timedelta(days=1),
        tick_interval=timedelta(hours=1),
        pixels_per_minute=3.0,
    ),
    ZoomLevel.DAY: ZoomSpec(
        window=timedelta(days=7),
        tick_interval=timedelta(days=1),
        pixels_per_minute=0.7,
    ),
    ZoomLevel.WEEK: ZoomSpec(
        window=timedelta(days=28),
        tick_interval=timedelta(days=7),
        pixels_per_minute=0.175,
    ),
}


def _zoom_level(zoom: ZoomLevel | str) -> ZoomLevel:
    try:
        return ZoomLevel(zoom)
    except ValueError as e:
        raise InvalidInputError("zoom", str(zoom), "Zoom must be hour, day or week") from e


def pixels_per_minute(zoom: ZoomLevel | str) -> float:
    return ZOOM_SPECS[_zoom_level(zoom)].pixels_per_minute


def project(timeline_start: datetime, zoom: ZoomLevel | str) -> TimelineProjection:
    """
    Project a zoom level onto a window starting at ``timeline_start``.

    Ticks run from the window start to the window end inclusive.

    Raises:
        InvalidInputError: If the zoom level is unknown
    """
    level = _zoom_level(zoom)
    spec = ZOOM_SPECS[level]
    start = as_utc(timeline_start)
    end = start + spec.window

    ticks: list[datetime] = []
    current = start
    while current <= end:
        ticks.append(current)
        current += spec.tick_interval

    return TimelineProjection(
        zoom=level,
        window_start=start,
        window_end=end,
        pixels_per_minute=spec.pixels_per_minute,
        ticks=tuple(ticks),
    )


def timeline_start_for(day: date | datetime) -> datetime:
    """Midnight UTC of the day containing ``day``; views are anchored there."""
    if isinstance(day, datetime):
        day = as_utc(day).date()
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def shift(timeline_start: datetime, days: int) -> datetime:
    """Move the view by whole days (previous/next navigation)."""
    return as_utc(timeline_start) + timedelta(days=days)


def tick_label(tick: datetime, zoom: ZoomLevel | str) -> str:
    """Primary axis label: clock time at hour zoom, weekday otherwise."""
    if _zoom_level(zoom) is ZoomLevel.HOUR:
        return tick.strftime("%H:%M")
    return tick.strftime("%a")


def tick_date_label(tick: datetime) -> str:
    """Secondary axis label, e.g. ``05 Jan``."""
    return tick.strftime("%d %b")


def is_weekend(tick: datetime) -> bool:
    """Saturday or Sunday; weekend columns are shaded."""
    return tick.weekday() >= 5
