"""
Data factories for creating test objects.

This module provides factory classes for generating rows and payloads shaped
like the store's tables and inputs.
"""

from .record_factory import RecordFactory

__all__ = [
    "RecordFactory",
]
