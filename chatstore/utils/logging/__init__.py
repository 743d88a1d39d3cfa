"""
Logging infrastructure for chatstore.

One decorator for operation tracking plus structured events for everything
else.
"""

from .context import get_correlation_id, set_correlation_id, set_operation_context
from .smart_logger import track
from .structured import StructuredLogger, create_development_formatter, log_event

__all__ = [
    "track",
    "log_event",
    "get_correlation_id",
    "set_correlation_id",
    "set_operation_context",
    "create_development_formatter",
    "StructuredLogger",
]
