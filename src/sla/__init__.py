"""
SLA Tracking Module
===================

Bounded Context for SOP service level agreement timers.

Responsibilities:
- Count elapsed SLA time, optionally within the Monday-Friday business window
- Start, rename, adjust, complete and delete SLA records
- Serve the SOP / SLA type catalog with hot reload via watchdog
- Report per-SOP and global compliance
"""

__version__ = "1.0.0"
