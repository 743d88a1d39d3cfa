"""
Structured event logging for the conversation store.

Events are ordinary ``logging`` records on the ``chatstore`` logger with a
``structured_data`` attribute attached, so any handler can pick them up. The
development formatter below renders them as one readable line each.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from .context import get_correlation_id, get_operation_context


class StructuredLogger:
    """
    Logger that emits named events with a structured payload.

    The payload always carries the event name and the current correlation ID,
    plus anything in the operation context and the caller's data.
    """

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def event(
        self,
        event_name: str,
        data: Optional[Dict[str, Any]] = None,
        level: int = logging.INFO,
    ):
        """
        Log a structured event with optional data.

        Args:
            event_name: Name of the event (e.g. 'conversation_created')
            data: Structured data to include
            level: Log level (defaults to INFO)
        """
        if not self.logger.isEnabledFor(level):
            return

        structured_data = {
            "event": event_name,
            "correlation_id": get_correlation_id(),
        }

        operation_context = get_operation_context()
        if operation_context:
            structured_data.update(operation_context)

        if data:
            structured_data.update(data)

        record = self.logger.makeRecord(
            self.logger.name, level, "(structured)", 0, event_name, (), None
        )
        record.structured_data = structured_data

        self.logger.handle(record)


_global_logger: Optional[StructuredLogger] = None


def get_structured_logger(name: str = "chatstore") -> StructuredLogger:
    """Get or create the shared structured logger."""
    global _global_logger
    if _global_logger is None:
        _global_logger = StructuredLogger(name)
    return _global_logger


def log_event(
    event_name: str, data: Optional[Dict[str, Any]] = None, level: int = logging.INFO
):
    """
    Convenience function for logging structured events.

    Example::

        log_event("message_added", {
            "message_id": "0b6f...",
            "conversation_id": "8c1d...",
            "attachment_count": 2,
        })
    """
    get_structured_logger().event(event_name, data, level)


def _short_id(value: Any) -> str:
    text = str(value) if value is not None else "unknown"
    return f"{text[:8]}..." if len(text) > 8 else text


def create_development_formatter() -> logging.Formatter:
    """
    Create a human-readable formatter for development.

    Operation events from ``@track`` get timing and outcome; store events get
    the identifiers that matter for each one.
    """

    class DevelopmentFormatter(logging.Formatter):
        def format(self, record: logging.LogRecord) -> str:
            timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S.%f")[
                :-3
            ]

            data: Optional[dict] = getattr(record, "structured_data", None)

            if not data:
                return f"{timestamp} | {record.levelname:5} | {record.getMessage()}"

            event = data.get("event", "")
            operation = data.get("operation", "")

            if event == "operation_started":
                message_content = f"🚀 {operation or 'operation'} started"
            elif event == "operation_completed":
                message_content = self._format_operation_success(data, operation)
            elif event == "operation_failed":
                message_content = self._format_operation_error(data, operation)
            elif event.startswith("database_"):
                message_content = self._format_database_event(data, event)
            else:
                message_content = self._format_store_event(data, event)

            return f"{timestamp} | {record.levelname:5} | {message_content}"

        def _format_duration(self, duration_ms: int) -> str:
            if duration_ms >= 1000:
                return f"{duration_ms/1000:.1f}s"
            return f"{duration_ms}ms"

        def _format_operation_success(self, data: dict, operation: str) -> str:
            duration_ms = data.get("duration_ms", 0)
            emoji = "⚡" if duration_ms < 50 else "⏱️"

            context = []
            if "result_length" in data:
                context.append(f"{data['result_length']} rows")
            if data.get("operation_success") is False:
                context.append(data.get("failure_type", "failed"))

            base = f"{emoji} {self._format_duration(duration_ms)} {operation}"
            return f"{base} ({', '.join(context)})" if context else base

        def _format_operation_error(self, data: dict, operation: str) -> str:
            error_type = data.get("error_type", "Error")
            error_message = data.get("error_message", "")
            if len(error_message) > 60:
                error_message = error_message[:57] + "..."

            duration_ms = data.get("duration_ms", 0)
            duration_part = f" {self._format_duration(duration_ms)}" if duration_ms else ""
            return f"❌{duration_part} {operation} failed ({error_type}: {error_message})"

        def _format_database_event(self, data: dict, event: str) -> str:
            if event == "database_initialized":
                version = data.get("postgres_version", "unknown")
                size = data.get("pool_current_size", "?")
                return f"✅ database ready ({version}, pool={size})"
            elif event == "database_connection_failed":
                return f"❌ database connection failed ({data.get('error_type', 'Error')})"
            elif event == "database_schema_ensured":
                return "⚙️ schema ensured"
            elif event == "database_closed":
                return "⚙️ database pool closed"
            return f"⚙️ {event}"

        def _format_store_event(self, data: dict, event: str) -> str:
            if not event:
                return "📝 log_event"

            conversation = _short_id(data.get("conversation_id"))

            if event == "conversation_created":
                return f"💬 {event} (id={conversation}, model={data.get('model')})"
            elif event == "conversation_updated":
                fields = ", ".join(data.get("updated_fields", [])) or "timestamp"
                return f"💬 {event} (id={conversation}, {fields})"
            elif event in ("conversation_deleted", "conversation_delete_noop"):
                return f"🗑️ {event} (id={conversation})"
            elif event == "message_added":
                attachments = data.get("attachment_count", 0)
                return (
                    f"✉️ {event} (conversation={conversation}, "
                    f"role={data.get('role')}, {attachments} attachments)"
                )
            elif event == "message_deleted":
                message = _short_id(data.get("message_id"))
                return f"🗑️ {event} (id={message}, conversation={conversation})"
            elif event.endswith("_error") or event.endswith("_failed"):
                return f"❌ {event}: {data.get('error', data.get('error_message', ''))}"
            return f"📝 {event}"

    return DevelopmentFormatter()
