"""
Display formatting for SLA durations and instants.

All inputs are integer milliseconds; rounding happens only here.
"""

from typing import Optional

from src.sla.domain.business_time import (
    MS_PER_HOUR, TimezoneLike, from_epoch_ms
)

OVERDUE_LABEL = "Overdue"


def format_countdown(ms: int) -> str:
    """``H:MM:SS`` when at least an hour is left, otherwise ``M:SS``."""
    total_seconds = max(0, ms) // 1000
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def format_duration_label(ms: int) -> str:
    """Largest whole unit of a duration, e.g. ``3 days`` or ``1 hour``."""
    seconds = max(0, ms) // 1000
    minutes = seconds // 60
    hours = minutes // 60
    days = hours // 24

    for amount, unit in ((days, "day"), (hours, "hour"), (minutes, "minute")):
        if amount > 0:
            return f"{amount} {unit}" if amount == 1 else f"{amount} {unit}s"
    return f"{seconds} second" if seconds == 1 else f"{seconds} seconds"


def format_timestamp(instant: int, tz: Optional[TimezoneLike] = None) -> str:
    """``dd/mm/YYYY HH:MM`` in the business timezone."""
    return from_epoch_ms(instant, tz).strftime("%d/%m/%Y %H:%M")


def remaining_label(remaining_ms: int) -> str:
    """Short list label: whole hours left, ``<1h``, or the overdue marker."""
    if remaining_ms < 0:
        return OVERDUE_LABEL
    hours = remaining_ms // MS_PER_HOUR
    if hours > 0:
        return f"{hours}h"
    return "<1h"
