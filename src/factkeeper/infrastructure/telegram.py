"""Telegram Bot API transport over httpx: long-polling event source + reply sink."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator

import httpx

from factkeeper.domain.replies import MENU_LAYOUT, InboundEvent, KeyboardHint, Reply
from factkeeper.infrastructure.transport import parse_command

logger = logging.getLogger(__name__)


class TelegramError(RuntimeError):
    """Bot API call answered with ok=false or an HTTP error status."""

    def __init__(self, method: str, description: str) -> None:
        super().__init__(f"Telegram {method} failed: {description}")
        self.method = method
        self.description = description


def update_to_event(update: dict[str, Any]) -> InboundEvent | None:
    """Convert one getUpdates item to an InboundEvent. Non-text updates give None."""
    message = update.get("message") or {}
    text = message.get("text")
    sender = message.get("from") or {}
    if not text or "id" not in sender:
        return None
    return InboundEvent(user_id=int(sender["id"]), kind=parse_command(text), text=text)


def reply_markup(hint: KeyboardHint) -> dict[str, Any] | None:
    """reply_markup payload for a keyboard hint."""
    if hint == KeyboardHint.SHOW_FIELD_MENU:
        return {
            "keyboard": [[{"text": label} for label in row] for row in MENU_LAYOUT],
            "resize_keyboard": True,
        }
    if hint == KeyboardHint.REMOVE_MENU:
        return {"remove_keyboard": True}
    return None


class TelegramTransport:
    """
    Implements EventSource and ReplySink against the Bot API.

    Private chats only: the chat id used for replies is the sender's user id.
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.telegram.org",
        poll_timeout: int = 10,
        client: httpx.AsyncClient | None = None,
        retry_delay: float = 3.0,
    ) -> None:
        self._api = f"{base_url.rstrip('/')}/bot{token}"
        self._poll_timeout = poll_timeout
        self._client = client or httpx.AsyncClient(timeout=poll_timeout + 10.0)
        self._retry_delay = retry_delay
        self._offset: int | None = None
        self._stopped = False

    async def _call(self, method: str, payload: dict[str, Any] | None = None) -> Any:
        r = await self._client.post(f"{self._api}/{method}", json=payload or {})
        try:
            data = r.json()
        except ValueError:
            raise TelegramError(method, f"HTTP {r.status_code}, non-JSON body") from None
        if not isinstance(data, dict):
            raise TelegramError(method, f"HTTP {r.status_code}, unexpected body {type(data).__name__}")
        if r.is_error or not data.get("ok"):
            raise TelegramError(method, data.get("description") or f"HTTP {r.status_code}")
        return data.get("result")

    async def check(self) -> dict[str, Any]:
        """getMe: verifies the token. Raises TelegramError or httpx.HTTPError."""
        return await self._call("getMe")

    async def events(self) -> AsyncIterator[InboundEvent]:
        while not self._stopped:
            payload: dict[str, Any] = {"timeout": self._poll_timeout, "allowed_updates": ["message"]}
            if self._offset is not None:
                payload["offset"] = self._offset
            try:
                updates = await self._call("getUpdates", payload)
            except (httpx.HTTPError, TelegramError) as e:
                logger.warning("getUpdates failed, retrying in %.1fs: %s", self._retry_delay, e)
                await asyncio.sleep(self._retry_delay)
                continue
            for update in updates or []:
                self._offset = int(update["update_id"]) + 1
                event = update_to_event(update)
                if event is not None:
                    yield event

    async def send(self, reply: Reply) -> None:
        payload: dict[str, Any] = {"chat_id": reply.user_id, "text": reply.text}
        markup = reply_markup(reply.keyboard)
        if markup is not None:
            payload["reply_markup"] = markup
        await self._call("sendMessage", payload)

    def stop(self) -> None:
        """Stop polling after the current getUpdates returns."""
        self._stopped = True

    async def aclose(self) -> None:
        await self._client.aclose()
