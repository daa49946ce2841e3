"""
Business Time
=============

Counted-elapsed-time calculation for SLA timers.

Instants are integer milliseconds since the Unix epoch. Weekday and
hour-of-day are always read in an explicit business timezone, never in the
host's local zone.

Two policies exist:
- continuous: the raw wall-clock difference ``end - start``
- business-windowed: only time between Monday 08:00 and Friday 17:00 counts;
  the span from Friday 17:00 to Monday 08:00 (the whole weekend) is skipped

The windowed sweep jumps from boundary to boundary (window open, window close
or the target end), so a call performs a handful of iterations per weekend
crossed regardless of how many milliseconds the span covers.
"""

import math
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from src.core import ConfigurationException, ValidationException

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
ONE_MS = timedelta(milliseconds=1)

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

MONDAY = 0
FRIDAY = 4
SATURDAY = 5
SUNDAY = 6

DEFAULT_TIMEZONE = "America/Mexico_City"

TimezoneLike = Union[str, tzinfo]


@dataclass(frozen=True)
class BusinessWindow:
    """
    Weekly active-counting window.

    Counting opens on Monday at ``open_hour`` and closes on Friday at
    ``close_hour``; everything in between (nights included) is counted.
    """
    open_hour: int = 8
    close_hour: int = 17

    def __post_init__(self):
        for name in ("open_hour", "close_hour"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 23:
                raise ValidationException(
                    f"{name} must be an hour between 0 and 23",
                    {name: value}
                )

    def is_paused(self, local: datetime) -> bool:
        """True when ``local`` falls in the Friday-close to Monday-open pause."""
        weekday = local.weekday()
        if weekday in (SATURDAY, SUNDAY):
            return True
        if weekday == MONDAY and local.hour < self.open_hour:
            return True
        if weekday == FRIDAY and local.hour >= self.close_hour:
            return True
        return False

    def next_open(self, local: datetime) -> datetime:
        """Monday ``open_hour`` that ends the pause ``local`` is in."""
        weekday = local.weekday()
        if weekday == MONDAY:
            days_ahead = 0
        else:
            days_ahead = 7 - weekday
        opening_day = local.date() + timedelta(days=days_ahead)
        return datetime.combine(opening_day, time(self.open_hour), tzinfo=local.tzinfo)

    def week_close(self, local: datetime) -> datetime:
        """Friday ``close_hour`` of the week ``local`` belongs to."""
        closing_day = local.date() + timedelta(days=FRIDAY - local.weekday())
        return datetime.combine(closing_day, time(self.close_hour), tzinfo=local.tzinfo)


DEFAULT_BUSINESS_WINDOW = BusinessWindow()


def resolve_timezone(tz: Optional[TimezoneLike]) -> tzinfo:
    """Turn a timezone name (or tzinfo) into a tzinfo instance."""
    if tz is None:
        tz = DEFAULT_TIMEZONE
    if isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigurationException(f"Unknown timezone: {tz}", {"timezone": tz}) from exc


def coerce_instant(value, name: str = "instant") -> int:
    """
    Validate an instant and return it as integer milliseconds.

    Finite floats are truncated toward zero. Booleans, non-numbers and
    non-finite floats are rejected.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationException(
            f"{name} must be a number of milliseconds",
            {name: repr(value)}
        )
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationException(f"{name} must be finite", {name: repr(value)})
        return int(value)
    return value


def to_epoch_ms(moment: datetime, tz: Optional[TimezoneLike] = None) -> int:
    """Milliseconds since the epoch; naive datetimes are read in ``tz``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=resolve_timezone(tz))
    return (moment - EPOCH) // ONE_MS


def from_epoch_ms(instant: int, tz: Optional[TimezoneLike] = None) -> datetime:
    """Aware datetime in ``tz`` for an instant in milliseconds."""
    try:
        return (EPOCH + timedelta(milliseconds=instant)).astimezone(resolve_timezone(tz))
    except OverflowError as exc:
        raise ValidationException(
            "instant is outside the supported calendar range",
            {"instant": instant}
        ) from exc


def _instant_after(local: datetime, cursor: int) -> int:
    """
    Instant of a local boundary, preferring the occurrence after ``cursor``.

    When clocks are set back the same wall time happens twice; a cursor in
    the repeated stretch has already passed the first occurrence.
    """
    instant = to_epoch_ms(local)
    if instant <= cursor:
        instant = to_epoch_ms(local.replace(fold=1))
    return instant


def compute_counted_elapsed(
    start,
    end,
    use_business_window: bool,
    *,
    tz: Optional[TimezoneLike] = None,
    window: BusinessWindow = DEFAULT_BUSINESS_WINDOW
) -> int:
    """
    Counted time between two instants, in milliseconds.

    Args:
        start: Start instant (ms since epoch)
        end: End instant (ms since epoch)
        use_business_window: Count only business-window time when True,
            otherwise return the wall-clock difference
        tz: Business timezone used to read weekday and hour
        window: Weekly business window

    Returns:
        Non-negative counted duration. A start after the end counts as zero.

    Raises:
        ValidationException: Non-numeric, boolean or non-finite instants
        ConfigurationException: Unknown timezone name
    """
    start = coerce_instant(start, "start")
    end = coerce_instant(end, "end")

    if end <= start:
        return 0

    if not use_business_window:
        return end - start

    zone = resolve_timezone(tz)
    total = 0
    cursor = start

    while cursor < end:
        local = from_epoch_ms(cursor, zone)

        if window.is_paused(local):
            try:
                resume = _instant_after(window.next_open(local), cursor)
            except OverflowError:
                # The pause runs past the last representable date
                break
            cursor = max(resume, cursor + 1)
            continue

        boundary = min(_instant_after(window.week_close(local), cursor), end)
        if boundary <= cursor:
            boundary = min(cursor + 1, end)
        total += boundary - cursor
        cursor = boundary

    return total


def counted_elapsed_between(
    start: datetime,
    end: datetime,
    use_business_window: bool,
    *,
    tz: Optional[TimezoneLike] = None,
    window: BusinessWindow = DEFAULT_BUSINESS_WINDOW
) -> timedelta:
    """Datetime flavour of :func:`compute_counted_elapsed`."""
    zone = resolve_timezone(tz)
    elapsed_ms = compute_counted_elapsed(
        to_epoch_ms(start, zone),
        to_epoch_ms(end, zone),
        use_business_window,
        tz=zone,
        window=window
    )
    return timedelta(milliseconds=elapsed_ms)
