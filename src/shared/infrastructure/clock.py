"""
Wall clock
==========

Current-time source for SLA timers, in epoch milliseconds.

Services take the clock as a plain callable so tests can inject a fixed or
stepping clock instead of patching ``time``.
"""

import time
from typing import Callable

Clock = Callable[[], int]


def system_clock_ms() -> int:
    """Return current wall-clock time in milliseconds since epoch."""
    return time.time_ns() // 1_000_000

