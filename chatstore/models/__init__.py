"""
Pydantic models for chatstore.
"""

from .core import AttachmentCreate, MessageCreate

__all__ = [
    "AttachmentCreate",
    "MessageCreate",
]
