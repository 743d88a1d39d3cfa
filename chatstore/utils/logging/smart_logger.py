"""
Operation tracking decorator for store methods.

``@track`` wraps a store method and emits ``operation_started`` /
``operation_completed`` / ``operation_failed`` events with timing, sanitised
arguments and the shape of the returned value. Read paths can be sampled;
mutations are always logged.
"""

import functools
import logging
import random
import time
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union, cast

from ..result import Failure, Success
from .context import get_correlation_id
from .structured import log_event

F = TypeVar("F", bound=Callable[..., Any])


class LogConfig:
    """Global configuration for operation tracking."""

    SAMPLE_RATES = {
        "high_frequency": 0.1,
        "medium_frequency": 0.5,
        "low_frequency": 1.0,
    }

    SENSITIVE_KEYS = {"password", "token", "secret", "api_key", "dsn", "database_url"}
    LARGE_CONTENT_KEYS = {"content", "thinking", "message", "body"}
    MAX_ARG_LENGTH = 100

    # Operations containing any of these are never sampled away
    CRITICAL_OPS = {"create", "update", "delete", "add", "initialize", "shutdown"}


def track(
    operation: Optional[str] = None,
    level: int = logging.INFO,
    frequency: str = "low_frequency",
    include_args: Union[bool, List[str]] = True,
    include_result: bool = True,
    track_performance: bool = True,
):
    """
    Decorator that logs the lifecycle of an async store operation.

    Args:
        operation: Operation name (derived from the function if None)
        level: Log level for start/completion events
        frequency: Sampling category (high_frequency, medium_frequency,
            low_frequency)
        include_args: True for all keyword args, a list for specific names,
            False for none
        include_result: Whether to log the shape of the return value
        track_performance: Whether to record duration

    Examples:
        @track(operation="conversation_get", include_args=["conversation_id"],
               frequency="high_frequency")
        @track(operation="message_add", include_args=["conversation_id"])
    """

    def decorator(func: F) -> F:
        op_name = operation or _get_operation_name(func)

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            if not _should_log(op_name, frequency):
                return await func(*args, **kwargs)

            tracker = OperationTracker(
                operation=op_name,
                level=level,
                include_args=include_args,
                include_result=include_result,
                track_performance=track_performance,
                kwargs=kwargs,
            )

            tracker.on_enter()
            try:
                result = await func(*args, **kwargs)
                tracker.set_result(result)
                tracker.on_exit(None, None)
                return result
            except Exception as e:
                tracker.on_exit(type(e), e)
                raise

        return cast(F, async_wrapper)

    return decorator


class OperationTracker:
    """Collects timing and context for one tracked call and emits its events."""

    def __init__(
        self,
        operation: str,
        level: int,
        include_args: Union[bool, List[str]],
        include_result: bool,
        track_performance: bool,
        kwargs: dict,
    ):
        self.operation = operation
        self.level = level
        self.include_args = include_args
        self.include_result = include_result
        self.track_performance = track_performance
        self.kwargs = kwargs

        self.start_time: Optional[float] = None
        self.correlation_id: Optional[str] = None
        self.result: Any = None
        self.metrics: Dict[str, Any] = {}

    def on_enter(self) -> None:
        if self.track_performance:
            self.start_time = time.perf_counter()

        self.correlation_id = get_correlation_id()

        if self.level <= logging.INFO:
            log_event("operation_started", self._build_start_context(), self.level)

    def on_exit(self, exc_type: Optional[type], exc_val: Optional[Exception]) -> None:
        if self.track_performance and self.start_time:
            self.metrics["duration_ms"] = int(
                (time.perf_counter() - self.start_time) * 1000
            )

        context = self._build_exit_context(exc_type, exc_val)
        if exc_type is None:
            log_event("operation_completed", context, self.level)
        else:
            log_event("operation_failed", context, logging.ERROR)

    def set_result(self, result: Any) -> None:
        self.result = result

    def _build_start_context(self) -> Dict[str, Any]:
        context = {
            "operation": self.operation,
            "correlation_id": self.correlation_id,
        }
        if self.include_args:
            context.update(_extract_safe_args(self.kwargs, self.include_args))
        return context

    def _build_exit_context(
        self, exc_type: Optional[type], exc_val: Optional[Exception]
    ) -> Dict[str, Any]:
        context = {
            "operation": self.operation,
            "correlation_id": self.correlation_id,
            "success": exc_type is None,
            **self.metrics,
        }

        if self.include_result and exc_type is None and self.result is not None:
            context.update(_extract_result_info(self.result))

        if exc_type is not None:
            context.update(
                {
                    "error_type": exc_type.__name__,
                    "error_message": str(exc_val) if exc_val else "",
                }
            )

        return context


def _get_operation_name(func: Callable) -> str:
    if hasattr(func, "__qualname__"):
        return func.__qualname__.replace(".", "_").lower()
    return func.__name__.lower()


def _should_log(operation: str, frequency: str) -> bool:
    """Decide whether to log this call given its sampling category."""
    if any(critical in operation.lower() for critical in LogConfig.CRITICAL_OPS):
        return True

    sample_rate = LogConfig.SAMPLE_RATES.get(frequency, 1.0)
    return random.random() < sample_rate


def _extract_safe_args(
    kwargs: dict, include_spec: Union[bool, List[str]]
) -> Dict[str, Any]:
    # Positional args are not logged, only keywords
    if include_spec is True:
        include_keys = set(kwargs.keys())
    elif isinstance(include_spec, list):
        include_keys = set(include_spec)
    else:
        return {}

    return {
        f"arg_{key}": _sanitize_value(key, value)
        for key, value in kwargs.items()
        if key in include_keys
    }


def _sanitize_value(key: str, value: Any) -> Any:
    if any(sensitive in key.lower() for sensitive in LogConfig.SENSITIVE_KEYS):
        return "[REDACTED]"

    if key.lower() in LogConfig.LARGE_CONTENT_KEYS and isinstance(value, str):
        return f"<{len(value)} chars>"

    if isinstance(value, (str, int, float, bool, type(None))):
        if isinstance(value, str) and len(value) > LogConfig.MAX_ARG_LENGTH:
            return f"{value[:LogConfig.MAX_ARG_LENGTH]}..."
        return value
    return f"<{type(value).__name__}>"


def _extract_result_info(result: Any) -> Dict[str, Any]:
    """Describe a return value without logging its contents."""
    result_info: Dict[str, Any] = {"result_type": type(result).__name__}

    if isinstance(result, Failure):
        result_info["operation_success"] = False
        result_info["failure_type"] = result.error_type
        return result_info

    if isinstance(result, Success):
        result = result.value
        result_info["operation_success"] = True

    if isinstance(result, (list, tuple)):
        result_info["result_length"] = len(result)
    elif isinstance(result, dict):
        result_info["result_keys_count"] = len(result.keys())
        if "messages" in result:
            result_info["message_count"] = len(result["messages"])
    elif isinstance(result, bool):
        result_info["result_value"] = result

    return result_info
