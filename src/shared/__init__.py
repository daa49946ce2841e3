"""
Shared Kernel Module
====================

Generic infrastructure used by the SLA tracking context: structured
logging, the clock abstraction and HTTP middleware.

DO NOT add SLA business logic to shared kernel.
"""

__version__ = "1.0.0"
