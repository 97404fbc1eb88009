"""Tests for the object store client and the operator notifiers."""

import asyncio
import json

import httpx
import pytest

from ett_sdk.models.errors import ErrorCode, PersistenceError
from ett_sdk.services.notifier import TelegramNotifier, notify_in_background
from ett_sdk.services.object_store import ObjectStoreClient, persist_token
from ett_sdk.utils.http import HttpExecutor


async def test_update_object_puts_data_to_table():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"status": "OK"})

    client = ObjectStoreClient("https://store.example.com/", "app-id", HttpExecutor(httpx.MockTransport(handler)))
    result = await client.update_object("suppliers", {"guid": "g-1", "token": "t"})

    assert result == {"status": "OK"}
    request = seen[0]
    assert request.method == "PUT"
    assert str(request.url) == "https://store.example.com/v1/object/suppliers?from-ofs=true&block_builder=true"
    assert json.loads(request.content) == {"data": {"guid": "g-1", "token": "t"}}
    assert request.headers["X-API-KEY"] == "app-id"


async def test_persist_token_writes_guid_token_and_expiry(object_store):
    await persist_token(object_store, "authorization_services", "g-1", "tok", "2024-05-10T12:00:00Z")

    assert object_store.updates == [
        ("authorization_services", {"guid": "g-1", "token": "tok", "token_expire_at": "2024-05-10T12:00:00Z"})
    ]


async def test_persist_token_failure_raises_persistence_error(object_store):
    object_store.fail = True

    with pytest.raises(PersistenceError) as excinfo:
        await persist_token(object_store, "suppliers", "g-1", "tok", "2024-05-10T12:00:00Z", status_code=422)

    assert excinfo.value.status_code == 422
    assert excinfo.value.code == ErrorCode.PERSISTENCE_ERROR
    assert "object store down" in excinfo.value.description


async def test_persist_token_rejects_non_json_answer():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    client = ObjectStoreClient("https://store.example.com", "app-id", HttpExecutor(transport))

    with pytest.raises(PersistenceError, match="Failed to decode object store response"):
        await persist_token(client, "suppliers", "g-1", "tok", "2024-05-10T12:00:00Z")


async def test_telegram_notifier_messages_every_chat():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    notifier = TelegramNotifier("bot-token", ["111", "222"], "agent-api", HttpExecutor(httpx.MockTransport(handler)))
    await notifier.notify("[Create Order] [🔴 Down]")

    assert [r.url.params["chat_id"] for r in seen] == ["111", "222"]
    assert seen[0].url.path == "/botbot-token/sendMessage"
    text = seen[0].url.params["text"]
    assert text.startswith("agent-api >>> ")
    assert text.endswith(" >>>>> [Create Order] [🔴 Down]")


async def test_failed_background_notification_is_logged_not_raised():
    transport = httpx.MockTransport(lambda request: httpx.Response(403, text="forbidden"))
    notifier = TelegramNotifier("bot-token", ["111"], "agent-api", HttpExecutor(transport))

    task = notify_in_background(notifier, "hello")
    assert task is not None
    await asyncio.wait_for(task, timeout=5)

    assert task.exception() is None


def test_notify_without_event_loop_is_dropped(notifier):
    assert notify_in_background(notifier, "hello") is None
    assert notifier.messages == []
