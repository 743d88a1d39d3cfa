from contextlib import asynccontextmanager
from typing import Any, Optional
from unittest.mock import AsyncMock


class MockConnection:
    """Stand-in for an asyncpg connection; every query method is an AsyncMock."""

    def __init__(self):
        self.fetchrow = AsyncMock(return_value=None)
        self.fetch = AsyncMock(return_value=[])
        self.fetchval = AsyncMock(return_value=None)
        self.execute = AsyncMock(return_value="OK")
        self.transactions_opened = 0

    @asynccontextmanager
    async def transaction(self):
        self.transactions_opened += 1
        yield

    def queries(self, method: str = "fetchrow") -> list[str]:
        """SQL text passed to ``method``, in call order."""
        return [call.args[0] for call in getattr(self, method).await_args_list]


class MockPool:
    """Stand-in for an asyncpg pool that always hands out the same connection."""

    def __init__(self, conn: Optional[MockConnection] = None):
        self.conn = conn or MockConnection()
        self.close = AsyncMock()
        self.acquire_count = 0

    @asynccontextmanager
    async def acquire(self):
        self.acquire_count += 1
        yield self.conn

    def get_size(self) -> int:
        return 1


def route_fetchrow(conn: MockConnection, **routes: Any) -> None:
    """
    Answer ``conn.fetchrow`` based on the statement it receives.

    Keyword names map to statement prefixes: ``insert_messages`` matches
    "INSERT INTO messages", ``update_conversations`` matches
    "UPDATE conversations" and so on. A value may be a row, None, an
    exception instance, or a callable taking ``(query, *values)``.
    """

    def _key(query: str) -> str:
        words = query.split()
        verb = words[0].lower()
        if verb == "insert":
            return f"insert_{words[2]}"
        if verb == "update":
            return f"update_{words[1]}"
        if verb == "delete":
            return f"delete_{words[2]}"
        return f"select_{words[words.index('FROM') + 1]}"

    async def _fetchrow(query: str, *values: Any):
        answer = routes.get(_key(query))
        if isinstance(answer, BaseException):
            raise answer
        if callable(answer):
            return answer(query, *values)
        return answer

    conn.fetchrow.side_effect = _fetchrow
