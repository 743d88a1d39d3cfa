"""
Correlation IDs for tying store log events to the request that caused them.

A request layer calls ``set_correlation_id`` once per request; every event the
store emits while serving that request carries the same ID.
"""

import contextvars
import uuid
from typing import Any, Dict, Optional

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)
_operation_context: contextvars.ContextVar[Optional[Dict[str, Any]]] = (
    contextvars.ContextVar("operation_context", default=None)
)


def get_correlation_id() -> str:
    """
    Get the current correlation ID, generating one if none exists.

    Returns:
        Correlation ID string for the current task context
    """
    correlation_id = _correlation_id.get()
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
        _correlation_id.set(correlation_id)
    return correlation_id


def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current context."""
    _correlation_id.set(correlation_id)


def get_operation_context() -> Dict[str, Any]:
    """Get a copy of the operation-scoped context dictionary."""
    context = _operation_context.get()
    return context.copy() if context is not None else {}


def set_operation_context(**values: Any) -> None:
    """Merge values into the operation-scoped context for the current task."""
    context = get_operation_context()
    context.update(values)
    _operation_context.set(context)
