"""
Database utility functions for the store's query services.

Provides reusable helpers for:
- Query building
- Result mapping
- Identifier parsing
- Typed storage errors
"""

from typing import Any, Dict, List, Mapping, Optional
from uuid import UUID


class DatabaseError(Exception):
    """Base exception for database errors."""

    pass


class StoreConnectionError(DatabaseError, ConnectionError):
    """Raised when the backing store cannot be reached or is not initialized."""

    pass


def record_to_dict(record: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Convert an asyncpg Record to a dictionary.

    UUID columns are rendered as strings so payloads can be handed straight to
    a JSON encoder.

    Args:
        record: Database record

    Returns:
        Dictionary with column names as keys
    """
    return {
        key: str(value) if isinstance(value, UUID) else value
        for key, value in dict(record).items()
    }


def records_to_list(records: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Convert a list of asyncpg Records to a list of dictionaries."""
    return [record_to_dict(record) for record in records]


def build_update_query(
    table: str,
    updates: Dict[str, Any],
    where_clause: str,
    returning: str = "*",
    touch_column: Optional[str] = None,
) -> tuple[str, List[Any]]:
    """
    Build UPDATE query with parameterized values.

    Args:
        table: Table name
        updates: Dictionary of column: value pairs
        where_clause: WHERE clause; its placeholders must start after the
            update values (e.g. "id = $2" for one update)
        returning: RETURNING clause (default: "*")
        touch_column: Column to set to NOW() in the same statement

    Returns:
        Tuple of (query, values)

    Example:
        query, values = build_update_query(
            "conversations",
            {"title": "New Title"},
            "id = $2",
            touch_column="updated_at",
        )
    """
    if not updates and not touch_column:
        raise ValueError("No updates provided")

    set_clauses = []
    values = []

    for param_num, (column, value) in enumerate(updates.items(), start=1):
        set_clauses.append(f"{column} = ${param_num}")
        values.append(value)

    if touch_column:
        set_clauses.append(f"{touch_column} = NOW()")

    query = f"""
        UPDATE {table}
        SET {', '.join(set_clauses)}
        WHERE {where_clause}
        RETURNING {returning}
    """

    return query, values


def build_insert_query(
    table: str,
    data: Dict[str, Any],
    returning: str = "*",
) -> tuple[str, List[Any]]:
    """
    Build INSERT query with parameterized values.

    Args:
        table: Table name
        data: Dictionary of column: value pairs
        returning: RETURNING clause (default: "*")

    Returns:
        Tuple of (query, values)

    Example:
        query, values = build_insert_query(
            "conversations",
            {"title": "New Conversation", "model": "glm-4.7-flash"}
        )
    """
    if not data:
        raise ValueError("No data provided")

    columns = list(data.keys())
    values = list(data.values())
    placeholders = [f"${i+1}" for i in range(len(values))]

    query = f"""
        INSERT INTO {table} ({', '.join(columns)})
        VALUES ({', '.join(placeholders)})
        RETURNING {returning}
    """

    return query, values


def parse_uuid(value: Any) -> UUID:
    """
    Parse a row identifier from a string or UUID.

    Args:
        value: UUID string or UUID object

    Returns:
        UUID object

    Raises:
        ValueError: If value is missing or not a valid UUID
    """
    if value is None:
        raise ValueError("Missing UUID")

    if isinstance(value, UUID):
        return value

    if isinstance(value, str):
        try:
            return UUID(value)
        except ValueError:
            raise ValueError(f"Invalid UUID: {value}") from None

    raise ValueError(f"Cannot parse UUID from type {type(value)}")
