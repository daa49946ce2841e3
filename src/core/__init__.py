"""
Core Module
============

Exception hierarchy shared by the SLA tracker layers.

Services and repositories raise these; the HTTP layer maps them to status
codes in one place.
"""

from src.core.exceptions import (
    ApplicationException,
    DomainException,
    RepositoryException,
    ValidationException,
    ResourceNotFoundException,
    ConfigurationException,
    UnknownSLATypeException,
)

__all__ = [
    "ApplicationException",
    "DomainException",
    "RepositoryException",
    "ValidationException",
    "ResourceNotFoundException",
    "ConfigurationException",
    "UnknownSLATypeException",
]
