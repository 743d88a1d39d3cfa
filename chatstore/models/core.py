"""
Input models for the conversation store.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class AttachmentCreate(BaseModel):
    """File reference to store alongside a new message.

    ``original_name`` also accepts the camelCase ``originalName`` key used by
    upload clients.
    """

    model_config = ConfigDict(populate_by_name=True)

    filename: str = Field(description="Stored file name")
    original_name: str = Field(
        alias="originalName", description="File name as uploaded"
    )
    mimetype: str = Field(description="MIME type of the file")
    size: int = Field(ge=0, description="File size in bytes")
    path: Optional[str] = Field(default=None, description="Storage location")
    url: Optional[str] = Field(
        default=None, description="URL reference, used when no path is given"
    )

    @property
    def storage_path(self) -> str:
        """Path to persist: path, else url, else an empty string."""
        return self.path or self.url or ""


class MessageCreate(BaseModel):
    """A message to append to a conversation."""

    role: str = Field(description="Sender role, e.g. user/assistant/system")
    content: str = Field(description="Message body")
    thinking: Optional[str] = Field(default=None, description="Reasoning trace")
    thinking_duration: Optional[float] = Field(
        default=None, description="Time spent producing the reasoning trace"
    )
    attachments: List[AttachmentCreate] = Field(
        default_factory=list, description="Files attached to the message"
    )
