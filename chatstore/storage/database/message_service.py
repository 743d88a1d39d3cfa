"""
Message service for conversation messages and their attachments.

Provides operations for:
- Appending a message together with its attachment rows
- Loading a conversation's messages in chronological order
- Deleting a single message scoped to its conversation
"""

import logging
from typing import Any, Dict, List

import asyncpg

from ...models import MessageCreate
from ...utils.logging import log_event, track
from ...utils.result import Result, Success, internal_error, not_found_error
from .utils import build_insert_query, parse_uuid, record_to_dict, records_to_list


class MessageService:
    """
    Service for message and attachment rows.

    Messages are never updated in place. Attachments are only written as part
    of the message insert and go away with the message through the cascade.
    All methods return Result types.
    """

    def __init__(self, db_pool: asyncpg.Pool):
        """
        Initialize message service.

        Args:
            db_pool: PostgreSQL connection pool
        """
        self.db_pool = db_pool

    @track(
        operation="message_add",
        include_args=["conversation_id"],
        include_result=True,
        track_performance=True,
        frequency="high_frequency",
    )
    async def add_message(
        self,
        conversation_id: str,
        message: MessageCreate,
    ) -> Result[Dict[str, Any], str]:
        """
        Insert a message and its attachments in one transaction.

        Does not touch the parent conversation; that is the caller's second
        step.

        Args:
            conversation_id: Conversation UUID
            message: Validated message payload

        Returns:
            Success with the message dict including ``attachments``, or
            Failure(NotFoundError) if the conversation does not exist
        """
        try:
            conv_uuid = parse_uuid(conversation_id)
        except ValueError:
            return self._conversation_not_found(conversation_id)

        try:
            data = {
                "conversation_id": conv_uuid,
                "role": message.role,
                "content": message.content,
                "thinking": message.thinking or None,
                "thinking_duration": message.thinking_duration or None,
            }

            async with self.db_pool.acquire() as conn:
                async with conn.transaction():
                    query, values = build_insert_query("messages", data)
                    record = await conn.fetchrow(query, *values)

                    if not record:
                        return internal_error(
                            "Failed to create message",
                            context={"conversation_id": conversation_id},
                        )

                    attachment_records = []
                    for attachment in message.attachments:
                        query, values = build_insert_query(
                            "attachments",
                            {
                                "message_id": record["id"],
                                "filename": attachment.filename,
                                "original_name": attachment.original_name,
                                "mimetype": attachment.mimetype,
                                "size": attachment.size,
                                "path": attachment.storage_path,
                            },
                        )
                        attachment_records.append(await conn.fetchrow(query, *values))

            created = record_to_dict(record)
            created["attachments"] = records_to_list(attachment_records)

            log_event(
                "message_added",
                {
                    "message_id": created["id"],
                    "conversation_id": conversation_id,
                    "role": message.role,
                    "attachment_count": len(attachment_records),
                },
            )

            return Success(created)

        except asyncpg.ForeignKeyViolationError:
            return self._conversation_not_found(conversation_id)
        except Exception as e:
            log_event(
                "message_add_error",
                {"conversation_id": conversation_id, "error": str(e)},
                level=logging.ERROR,
            )
            return internal_error(
                f"Failed to add message: {str(e)}",
                context={"conversation_id": conversation_id},
            )

    @track(
        operation="messages_get",
        include_args=["conversation_id"],
        track_performance=True,
        frequency="high_frequency",
    )
    async def get_messages(
        self, conversation_id: str
    ) -> Result[List[Dict[str, Any]], str]:
        """
        Get all messages of a conversation, oldest first, with attachments.

        Args:
            conversation_id: Conversation UUID

        Returns:
            Success with a list of message dicts (empty for unknown ids)
        """
        try:
            conv_uuid = parse_uuid(conversation_id)
        except ValueError:
            return Success([])

        try:
            async with self.db_pool.acquire() as conn:
                records = await conn.fetch(
                    """
                    SELECT * FROM messages
                    WHERE conversation_id = $1
                    ORDER BY created_at ASC
                    """,
                    conv_uuid,
                )
                messages = records_to_list(records)

                attachments_by_message: Dict[str, List[Dict[str, Any]]] = {}
                if messages:
                    attachment_records = await conn.fetch(
                        "SELECT * FROM attachments WHERE message_id = ANY($1::uuid[])",
                        [record["id"] for record in records],
                    )
                    for attachment in records_to_list(attachment_records):
                        attachments_by_message.setdefault(
                            attachment["message_id"], []
                        ).append(attachment)

            for message in messages:
                message["attachments"] = attachments_by_message.get(message["id"], [])

            return Success(messages)

        except Exception as e:
            log_event(
                "messages_get_error",
                {"conversation_id": conversation_id, "error": str(e)},
                level=logging.ERROR,
            )
            return internal_error(
                f"Failed to get messages: {str(e)}",
                context={"conversation_id": conversation_id},
            )

    @track(
        operation="message_delete",
        include_args=["conversation_id", "message_id"],
        track_performance=True,
        frequency="low_frequency",
    )
    async def delete_message(
        self, conversation_id: str, message_id: str
    ) -> Result[Dict[str, Any], str]:
        """
        Delete one message, matched by both its ID and its conversation.

        A message ID that belongs to another conversation is treated as
        missing. Attachments are cascade deleted.

        Args:
            conversation_id: Conversation UUID the message must belong to
            message_id: Message UUID

        Returns:
            Success with deletion info, or Failure(NotFoundError)
        """
        try:
            msg_uuid = parse_uuid(message_id)
            conv_uuid = parse_uuid(conversation_id)
        except ValueError:
            return self._message_not_found(conversation_id, message_id)

        try:
            async with self.db_pool.acquire() as conn:
                record = await conn.fetchrow(
                    """
                    DELETE FROM messages
                    WHERE id = $1 AND conversation_id = $2
                    RETURNING id, conversation_id
                    """,
                    msg_uuid,
                    conv_uuid,
                )

            if not record:
                return self._message_not_found(conversation_id, message_id)

            log_event(
                "message_deleted",
                {"message_id": message_id, "conversation_id": conversation_id},
                level=logging.WARNING,
            )

            return Success(
                {
                    "success": True,
                    "message_id": message_id,
                    "conversation_id": conversation_id,
                }
            )

        except Exception as e:
            log_event(
                "message_delete_error",
                {"message_id": message_id, "error": str(e)},
                level=logging.ERROR,
            )
            return internal_error(
                f"Failed to delete message: {str(e)}",
                context={"message_id": message_id},
            )

    @staticmethod
    def _conversation_not_found(conversation_id: str):
        return not_found_error(
            f"Conversation '{conversation_id}' not found",
            context={"conversation_id": conversation_id},
        )

    @staticmethod
    def _message_not_found(conversation_id: str, message_id: str):
        return not_found_error(
            f"Message '{message_id}' not found in conversation '{conversation_id}'",
            context={"conversation_id": conversation_id, "message_id": message_id},
        )
