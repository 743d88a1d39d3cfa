"""
PostgreSQL-backed storage for conversations, messages and attachments.

The schema is three tables joined by cascading foreign keys:
conversations -> messages -> attachments. Each query service owns one slice of
it and returns Result types.
"""

from .conversation_service import ConversationService
from .message_service import MessageService
from .schema import SCHEMA_SQL
from .utils import (
    DatabaseError,
    StoreConnectionError,
    build_insert_query,
    build_update_query,
    parse_uuid,
    record_to_dict,
    records_to_list,
)

__all__ = [
    "ConversationService",
    "MessageService",
    "SCHEMA_SQL",
    "DatabaseError",
    "StoreConnectionError",
    "build_insert_query",
    "build_update_query",
    "parse_uuid",
    "record_to_dict",
    "records_to_list",
]
