"""
Conversation service for the conversations table.

Provides:
- Create conversations with default title and model
- List conversation summaries, most recently active first
- Fetch, update and touch a single conversation row
- Idempotent hard delete (messages and attachments cascade)
"""

import logging
from typing import Any, Dict, List, Optional

import asyncpg

from ...config import Settings, get_settings
from ...utils.logging import log_event, track
from ...utils.result import Result, Success, internal_error, not_found_error
from .schema import CONVERSATION_SUMMARY_COLUMNS
from .utils import (
    build_insert_query,
    build_update_query,
    parse_uuid,
    record_to_dict,
    records_to_list,
)


class ConversationService:
    """
    Service for conversation rows.

    Message loading lives in ``MessageService``; this service only touches the
    ``conversations`` table. All methods return Result types.
    """

    def __init__(self, db_pool: asyncpg.Pool, settings: Optional[Settings] = None):
        """
        Initialize conversation service.

        Args:
            db_pool: PostgreSQL connection pool
            settings: Source of the default title and model
        """
        self.db_pool = db_pool
        self.settings = settings or get_settings()

    @track(
        operation="conversation_create",
        include_args=["model"],
        track_performance=True,
        frequency="low_frequency",
    )
    async def create_conversation(
        self,
        title: Optional[str] = None,
        model: Optional[str] = None,
    ) -> Result[Dict[str, Any], str]:
        """
        Create a new conversation.

        Args:
            title: Conversation title; empty or None uses the default title
            model: Model identifier; empty or None uses the default model

        Returns:
            Success with the conversation dict and an empty ``messages`` list
        """
        try:
            data = {
                "title": title or self.settings.default_title,
                "model": model or self.settings.default_model,
            }

            query, values = build_insert_query("conversations", data)

            async with self.db_pool.acquire() as conn:
                record = await conn.fetchrow(query, *values)

            if not record:
                return internal_error("Failed to create conversation")

            conversation = record_to_dict(record)
            conversation["messages"] = []

            log_event(
                "conversation_created",
                {
                    "conversation_id": conversation["id"],
                    "model": conversation["model"],
                },
            )

            return Success(conversation)

        except Exception as e:
            log_event(
                "conversation_create_error",
                {"error": str(e), "error_type": type(e).__name__},
                level=logging.ERROR,
            )
            return internal_error(
                f"Failed to create conversation: {str(e)}",
                context={"error_type": type(e).__name__},
            )

    @track(
        operation="conversation_get",
        include_args=["conversation_id"],
        track_performance=True,
        frequency="high_frequency",
    )
    async def get_conversation(
        self, conversation_id: str
    ) -> Result[Optional[Dict[str, Any]], str]:
        """
        Get a conversation row by ID.

        Args:
            conversation_id: Conversation UUID

        Returns:
            Success with the conversation dict, or Success(None) when no such
            conversation exists
        """
        try:
            conv_uuid = parse_uuid(conversation_id)
        except ValueError:
            return Success(None)

        try:
            async with self.db_pool.acquire() as conn:
                record = await conn.fetchrow(
                    "SELECT * FROM conversations WHERE id = $1", conv_uuid
                )

            return Success(record_to_dict(record) if record else None)

        except Exception as e:
            log_event(
                "conversation_get_error",
                {"conversation_id": conversation_id, "error": str(e)},
                level=logging.ERROR,
            )
            return internal_error(
                f"Failed to get conversation: {str(e)}",
                context={"conversation_id": conversation_id},
            )

    @track(
        operation="conversation_list",
        include_args=False,
        track_performance=True,
        frequency="medium_frequency",
    )
    async def list_conversations(self) -> Result[List[Dict[str, Any]], str]:
        """
        List conversation summaries, most recently updated first.

        Returns:
            Success with a list of dicts holding id, title, model, created_at
            and updated_at only
        """
        try:
            query = f"""
                SELECT {CONVERSATION_SUMMARY_COLUMNS} FROM conversations
                ORDER BY updated_at DESC
            """

            async with self.db_pool.acquire() as conn:
                records = await conn.fetch(query)

            return Success(records_to_list(records))

        except Exception as e:
            log_event(
                "conversation_list_error",
                {"error": str(e)},
                level=logging.ERROR,
            )
            return internal_error(f"Failed to list conversations: {str(e)}")

    @track(
        operation="conversation_update",
        include_args=["conversation_id"],
        track_performance=True,
        frequency="low_frequency",
    )
    async def update_conversation(
        self,
        conversation_id: str,
        title: Optional[str] = None,
        model: Optional[str] = None,
    ) -> Result[Dict[str, Any], str]:
        """
        Update conversation fields and refresh updated_at.

        Fields left as None are not changed. An update with no fields still
        refreshes updated_at.

        Args:
            conversation_id: Conversation UUID
            title: New title
            model: New model

        Returns:
            Success with the updated conversation row, or Failure(NotFoundError)
        """
        try:
            conv_uuid = parse_uuid(conversation_id)
        except ValueError:
            return self._not_found(conversation_id)

        try:
            updates: Dict[str, Any] = {}

            if title is not None:
                updates["title"] = title

            if model is not None:
                updates["model"] = model

            query, values = build_update_query(
                "conversations",
                updates,
                f"id = ${len(updates) + 1}",
                touch_column="updated_at",
            )
            values.append(conv_uuid)

            async with self.db_pool.acquire() as conn:
                record = await conn.fetchrow(query, *values)

            if not record:
                return self._not_found(conversation_id)

            log_event(
                "conversation_updated",
                {
                    "conversation_id": conversation_id,
                    "updated_fields": list(updates.keys()),
                },
            )

            return Success(record_to_dict(record))

        except Exception as e:
            log_event(
                "conversation_update_error",
                {"conversation_id": conversation_id, "error": str(e)},
                level=logging.ERROR,
            )
            return internal_error(
                f"Failed to update conversation: {str(e)}",
                context={"conversation_id": conversation_id},
            )

    @track(
        operation="conversation_touch",
        include_args=["conversation_id"],
        track_performance=True,
        frequency="low_frequency",
    )
    async def touch_conversation(
        self, conversation_id: str
    ) -> Result[Dict[str, Any], str]:
        """
        Set updated_at to now without changing any other field.

        Args:
            conversation_id: Conversation UUID

        Returns:
            Success with the conversation row, or Failure(NotFoundError)
        """
        try:
            conv_uuid = parse_uuid(conversation_id)
        except ValueError:
            return self._not_found(conversation_id)

        try:
            async with self.db_pool.acquire() as conn:
                record = await conn.fetchrow(
                    """
                    UPDATE conversations SET updated_at = NOW()
                    WHERE id = $1
                    RETURNING *
                    """,
                    conv_uuid,
                )

            if not record:
                return self._not_found(conversation_id)

            return Success(record_to_dict(record))

        except Exception as e:
            log_event(
                "conversation_touch_error",
                {"conversation_id": conversation_id, "error": str(e)},
                level=logging.ERROR,
            )
            return internal_error(
                f"Failed to touch conversation: {str(e)}",
                context={"conversation_id": conversation_id},
            )

    async def delete_conversation(
        self, conversation_id: str
    ) -> Result[Dict[str, Any], str]:
        """
        Permanently delete a conversation with its messages and attachments.

        Deleting a conversation that does not exist succeeds; the caller wanted
        it gone and it is gone.

        Args:
            conversation_id: Conversation UUID

        Returns:
            Success with ``deleted`` telling whether this call removed the row
        """
        try:
            conv_uuid = parse_uuid(conversation_id)
        except ValueError:
            conv_uuid = None

        try:
            record = None
            if conv_uuid is not None:
                async with self.db_pool.acquire() as conn:
                    record = await conn.fetchrow(
                        "DELETE FROM conversations WHERE id = $1 RETURNING id",
                        conv_uuid,
                    )

            if record:
                log_event(
                    "conversation_deleted",
                    {"conversation_id": conversation_id},
                    level=logging.WARNING,
                )
            else:
                log_event(
                    "conversation_delete_noop",
                    {"conversation_id": conversation_id},
                    level=logging.DEBUG,
                )

            return Success(
                {
                    "success": True,
                    "conversation_id": conversation_id,
                    "deleted": record is not None,
                }
            )

        except Exception as e:
            log_event(
                "conversation_delete_error",
                {"conversation_id": conversation_id, "error": str(e)},
                level=logging.ERROR,
            )
            return internal_error(
                f"Failed to delete conversation: {str(e)}",
                context={"conversation_id": conversation_id},
            )

    @staticmethod
    def _not_found(conversation_id: str):
        return not_found_error(
            f"Conversation '{conversation_id}' not found",
            context={"conversation_id": conversation_id},
        )
