"""Transport boundary: event source + reply sink Protocols, and doubles for tests."""

from __future__ import annotations

from typing import AsyncIterator, Iterable, Protocol, runtime_checkable

from factkeeper.domain.replies import EventKind, InboundEvent, Reply


@runtime_checkable
class EventSource(Protocol):
    """Yields inbound user events until the transport stops."""

    def events(self) -> AsyncIterator[InboundEvent]:
        ...


@runtime_checkable
class ReplySink(Protocol):
    """Delivers one reply to a user."""

    async def send(self, reply: Reply) -> None:
        ...


def parse_command(text: str) -> EventKind:
    """Map "/start", "/show_data" (optionally "@botname"-suffixed) to a kind; anything else is TEXT."""
    if not text.startswith("/"):
        return EventKind.TEXT
    command = text.split()[0].split("@", 1)[0]
    if command == "/start":
        return EventKind.START
    if command == "/show_data":
        return EventKind.SHOW_DATA
    return EventKind.TEXT


class ScriptedEventSource:
    """Implements EventSource over a fixed list of events. No network."""

    def __init__(self, events: Iterable[InboundEvent] | None = None) -> None:
        self._events = list(events) if events else []

    async def events(self) -> AsyncIterator[InboundEvent]:
        for event in self._events:
            yield event


class RecordingReplySink:
    """Implements ReplySink by keeping every reply. Optionally fails on send."""

    def __init__(self, fail_with: Exception | None = None) -> None:
        self.replies: list[Reply] = []
        self.fail_with = fail_with

    async def send(self, reply: Reply) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.replies.append(reply)

    def for_user(self, user_id: int) -> list[Reply]:
        return [r for r in self.replies if r.user_id == user_id]

    @property
    def last(self) -> Reply:
        return self.replies[-1]
