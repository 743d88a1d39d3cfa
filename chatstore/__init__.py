"""
chatstore - persistence for chat conversations, messages and attachments.

An asyncpg-backed store that a request layer calls to create, read, update
and delete conversations and to append or remove their messages.
"""

__version__ = "0.1.0"

from .config import Settings, configure_logging, get_settings
from .models import AttachmentCreate, MessageCreate
from .storage import ConversationStore
from .storage.database import DatabaseError, StoreConnectionError
from .utils.result import Failure, Result, Success

__all__ = [
    "AttachmentCreate",
    "ConversationStore",
    "DatabaseError",
    "Failure",
    "MessageCreate",
    "Result",
    "Settings",
    "StoreConnectionError",
    "Success",
    "configure_logging",
    "get_settings",
]
