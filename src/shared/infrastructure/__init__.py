"""
Infrastructure Layer
=====================

Low-level technical concerns:
- Logging setup
- Clock abstraction
"""
