"""
Storage layer for chatstore.
"""

from .conversation_store import ConversationStore

__all__ = ["ConversationStore"]
