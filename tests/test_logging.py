import logging
import uuid

import pytest

from chatstore.utils.logging import (
    create_development_formatter,
    get_correlation_id,
    log_event,
    set_correlation_id,
    set_operation_context,
    track,
)
from chatstore.utils.logging.smart_logger import _extract_result_info, _sanitize_value
from chatstore.utils.result import Success, not_found_error
from tests.factories import RecordFactory
from tests.mocks import route_fetchrow


def _events(caplog):
    return [
        record.structured_data
        for record in caplog.records
        if hasattr(record, "structured_data")
    ]


@pytest.fixture
def chatstore_caplog(caplog):
    caplog.set_level(logging.DEBUG, logger="chatstore")
    return caplog


def test_log_event_carries_structured_data(chatstore_caplog):
    set_correlation_id("req-123")

    log_event("conversation_created", {"conversation_id": "c1", "model": "m"})

    (event,) = _events(chatstore_caplog)
    assert event["event"] == "conversation_created"
    assert event["correlation_id"] == "req-123"
    assert event["conversation_id"] == "c1"
    assert get_correlation_id() == "req-123"


def test_log_event_skips_disabled_levels(caplog):
    caplog.set_level(logging.WARNING, logger="chatstore")

    log_event("conversation_delete_noop", {"conversation_id": "c1"}, logging.DEBUG)

    assert _events(caplog) == []


@pytest.mark.asyncio
async def test_track_emits_start_and_completion(chatstore_caplog):
    @track(operation="message_add", include_args=["conversation_id", "content"])
    async def add(conversation_id, content):
        return Success({"id": "m1", "attachments": []})

    await add(conversation_id="c1", content="secret text")

    started, completed = [
        e for e in _events(chatstore_caplog) if e["event"].startswith("operation_")
    ]
    assert started["event"] == "operation_started"
    assert started["arg_conversation_id"] == "c1"
    assert started["arg_content"] == "<11 chars>"
    assert completed["event"] == "operation_completed"
    assert completed["operation_success"] is True
    assert "duration_ms" in completed


@pytest.mark.asyncio
async def test_track_logs_and_reraises_exceptions(chatstore_caplog):
    @track(operation="store_initialize")
    async def initialize():
        raise ConnectionError("refused")

    with pytest.raises(ConnectionError):
        await initialize()

    failed = [e for e in _events(chatstore_caplog) if e["event"] == "operation_failed"]
    assert failed[0]["error_type"] == "ConnectionError"
    assert failed[0]["error_message"] == "refused"


@pytest.mark.asyncio
async def test_service_events(chatstore_caplog, conversation_service, mock_conn):
    route_fetchrow(mock_conn, insert_conversations=RecordFactory.conversation())

    await conversation_service.create_conversation()

    names = [e["event"] for e in _events(chatstore_caplog)]
    assert "conversation_created" in names
    completed = [e for e in _events(chatstore_caplog) if e["event"] == "operation_completed"]
    assert completed[0]["operation"] == "conversation_create"


@pytest.mark.asyncio
async def test_failed_result_is_reported(chatstore_caplog, conversation_service):
    await conversation_service.update_conversation(str(uuid.uuid4()), title="x")

    completed = [
        e for e in _events(chatstore_caplog) if e["event"] == "operation_completed"
    ]
    assert completed[0]["operation_success"] is False
    assert completed[0]["failure_type"] == "NotFoundError"


def test_sanitize_value():
    assert _sanitize_value("database_url", "postgresql://u:p@h/db") == "[REDACTED]"
    assert _sanitize_value("thinking", "abc") == "<3 chars>"
    assert _sanitize_value("conversation_id", "c1") == "c1"
    assert _sanitize_value("message", object()) == "<object>"


def test_extract_result_info():
    assert _extract_result_info(not_found_error("gone")) == {
        "result_type": "Failure",
        "operation_success": False,
        "failure_type": "NotFoundError",
    }
    info = _extract_result_info(Success({"id": "c1", "messages": [{}, {}]}))
    assert info["message_count"] == 2
    assert _extract_result_info(Success([1, 2, 3]))["result_length"] == 3


def test_development_formatter_renders_events(chatstore_caplog):
    log_event("message_added", {"conversation_id": "0123456789ab", "role": "user"})

    record = chatstore_caplog.records[-1]
    line = create_development_formatter().format(record)

    assert "message_added" in line
    assert "conversation=01234567..." in line
    assert "role=user" in line


def test_development_formatter_plain_record():
    record = logging.LogRecord("chatstore", logging.INFO, __file__, 1, "plain", (), None)

    assert create_development_formatter().format(record).endswith("plain")


@pytest.mark.asyncio
async def test_add_message_touch_is_its_own_operation(chatstore_caplog, store, mock_conn):
    conversation = RecordFactory.conversation()
    route_fetchrow(
        mock_conn,
        insert_messages=RecordFactory.message(conversation_id=conversation["id"]),
        update_conversations=conversation,
    )
    chatstore_caplog.clear()

    await store.add_message(str(conversation["id"]), RecordFactory.message_payload())

    events = _events(chatstore_caplog)
    assert "conversation_updated" not in [e["event"] for e in events]
    touch_started = [
        e
        for e in events
        if e["event"] == "operation_started" and e["operation"] == "conversation_touch"
    ]
    assert touch_started[0]["arg_conversation_id"] == str(conversation["id"])
    assert not any(e.get("operation") == "conversation_update" for e in events)


@pytest.mark.asyncio
async def test_operation_context_is_merged_into_events(chatstore_caplog):
    set_operation_context(request_path="/api/conversations")

    log_event("conversation_created", {"conversation_id": "c1"})

    (event,) = _events(chatstore_caplog)
    assert event["request_path"] == "/api/conversations"
