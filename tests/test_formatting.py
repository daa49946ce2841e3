from __future__ import annotations

import pytest

from src.sla.domain.formatting import (
    OVERDUE_LABEL,
    format_countdown,
    format_duration_label,
    format_timestamp,
    remaining_label,
)


@pytest.mark.parametrize(
    ("ms", "expected"),
    [
        (0, "0:00"),
        (59_999, "0:59"),
        (61_000, "1:01"),
        (3_600_000, "1:00:00"),
        (7_384_000, "2:03:04"),
        (90 * 3_600_000, "90:00:00"),
        (-5_000, "0:00"),
    ],
)
def test_format_countdown(ms: int, expected: str) -> None:
    assert format_countdown(ms) == expected


@pytest.mark.parametrize(
    ("ms", "expected"),
    [
        (86_400_000, "1 day"),
        (3 * 86_400_000, "3 days"),
        (3_600_000, "1 hour"),
        (48 * 3_600_000, "2 days"),
        (2 * 3_600_000, "2 hours"),
        (5 * 60_000, "5 minutes"),
        (30_000, "30 seconds"),
        (1_000, "1 second"),
    ],
)
def test_format_duration_label(ms: int, expected: str) -> None:
    assert format_duration_label(ms) == expected


def test_format_timestamp_uses_business_timezone() -> None:
    instant = 1705327200000  # 2024-01-15 14:00 UTC
    assert format_timestamp(instant, "UTC") == "15/01/2024 14:00"
    assert format_timestamp(instant, "America/Mexico_City") == "15/01/2024 08:00"


@pytest.mark.parametrize(
    ("remaining", "expected"),
    [(5 * 3_600_000 + 1, "5h"), (3_599_999, "<1h"), (0, "<1h"), (-1, OVERDUE_LABEL)],
)
def test_remaining_label(remaining: int, expected: str) -> None:
    assert remaining_label(remaining) == expected
