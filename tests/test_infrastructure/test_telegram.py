"""Telegram transport over httpx.MockTransport: update parsing, polling offsets, sendMessage payloads."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from factkeeper.domain.replies import EventKind, KeyboardHint, Reply
from factkeeper.infrastructure.telegram import (
    TelegramError,
    TelegramTransport,
    reply_markup,
    update_to_event,
)
from factkeeper.infrastructure.transport import EventSource, ReplySink, parse_command


def _message(update_id: int, user_id: int, text: str | None) -> dict[str, Any]:
    msg: dict[str, Any] = {"message_id": update_id, "from": {"id": user_id}, "chat": {"id": user_id}}
    if text is not None:
        msg["text"] = text
    return {"update_id": update_id, "message": msg}


def _transport(handler: Any) -> TelegramTransport:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return TelegramTransport("TOKEN", poll_timeout=0, client=client, retry_delay=0)


@pytest.mark.parametrize(
    "text,kind",
    [
        ("/start", EventKind.START),
        ("/start@factkeeper_bot", EventKind.START),
        ("/show_data", EventKind.SHOW_DATA),
        ("/help", EventKind.TEXT),
        ("Name", EventKind.TEXT),
    ],
)
def test_parse_command(text: str, kind: EventKind) -> None:
    assert parse_command(text) == kind


def test_update_to_event() -> None:
    event = update_to_event(_message(1, 42, "Ivan"))
    assert event is not None
    assert (event.user_id, event.kind, event.text) == (42, EventKind.TEXT, "Ivan")
    assert update_to_event(_message(2, 42, None)) is None
    assert update_to_event({"update_id": 3, "edited_message": {}}) is None


def test_reply_markup() -> None:
    menu = reply_markup(KeyboardHint.SHOW_FIELD_MENU)
    assert menu == {
        "keyboard": [
            [{"text": "Name"}, {"text": "Age"}],
            [{"text": "Bio"}, {"text": "Children"}],
            [{"text": "Done"}],
        ],
        "resize_keyboard": True,
    }
    assert reply_markup(KeyboardHint.REMOVE_MENU) == {"remove_keyboard": True}
    assert reply_markup(KeyboardHint.NONE) is None


def test_transport_implements_protocols() -> None:
    t = _transport(lambda request: httpx.Response(200, json={"ok": True, "result": []}))
    assert isinstance(t, EventSource)
    assert isinstance(t, ReplySink)


def test_send_posts_message_with_markup() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})

    async def run() -> None:
        t = _transport(handler)
        await t.send(Reply(user_id=42, text="Hi", keyboard=KeyboardHint.REMOVE_MENU))
        await t.send(Reply(user_id=42, text="Plain"))
        await t.aclose()

    asyncio.run(run())
    assert requests[0].url.path == "/botTOKEN/sendMessage"
    assert json.loads(requests[0].content) == {
        "chat_id": 42,
        "text": "Hi",
        "reply_markup": {"remove_keyboard": True},
    }
    assert "reply_markup" not in json.loads(requests[1].content)


def test_events_advance_offset_and_skip_non_text() -> None:
    payloads: list[dict[str, Any]] = []
    batches = [
        [_message(10, 1, "/start"), _message(11, 2, None)],
        [_message(12, 1, "Name")],
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        payloads.append(json.loads(request.content))
        result = batches.pop(0) if batches else []
        return httpx.Response(200, json={"ok": True, "result": result})

    async def run() -> list[Any]:
        t = _transport(handler)
        events = t.events()
        first = await events.__anext__()
        second = await events.__anext__()
        await events.aclose()
        await t.aclose()
        return [first, second]

    first, second = asyncio.run(run())
    assert (first.user_id, first.kind) == (1, EventKind.START)
    assert (second.user_id, second.kind, second.text) == (1, EventKind.TEXT, "Name")
    assert "offset" not in payloads[0]
    assert payloads[1]["offset"] == 12


def test_events_retry_after_api_error() -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 1:
            return httpx.Response(502, json={"ok": False, "description": "Bad Gateway"})
        return httpx.Response(200, json={"ok": True, "result": [_message(1, 9, "Age")]})

    async def run() -> Any:
        t = _transport(handler)
        events = t.events()
        event = await events.__anext__()
        await events.aclose()
        await t.aclose()
        return event

    event = asyncio.run(run())
    assert event.user_id == 9
    assert calls["n"] == 2


def test_check_raises_on_bad_token() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"ok": False, "error_code": 401, "description": "Unauthorized"})

    async def run() -> None:
        t = _transport(handler)
        try:
            with pytest.raises(TelegramError, match="Unauthorized"):
                await t.check()
        finally:
            await t.aclose()

    asyncio.run(run())


def test_stop_ends_polling() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"ok": True, "result": []})

    async def run() -> list[Any]:
        t = _transport(handler)
        t.stop()
        collected = [e async for e in t.events()]
        await t.aclose()
        return collected

    assert asyncio.run(run()) == []


def test_non_object_body_raises_telegram_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[])

    async def run() -> None:
        t = _transport(handler)
        try:
            with pytest.raises(TelegramError, match="unexpected body list"):
                await t.check()
        finally:
            await t.aclose()

    asyncio.run(run())


def test_events_retry_after_non_object_body() -> None:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] == 1:
            return httpx.Response(200, json=[])
        return httpx.Response(200, json={"ok": True, "result": [_message(1, 3, "Bio")]})

    async def run() -> Any:
        t = _transport(handler)
        events = t.events()
        event = await events.__anext__()
        await events.aclose()
        await t.aclose()
        return event

    event = asyncio.run(run())
    assert (event.user_id, event.text) == (3, "Bio")
    assert calls["n"] == 2
