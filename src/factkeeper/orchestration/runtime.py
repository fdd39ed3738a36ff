"""Bot runtime: dispatches inbound events, one asyncio task per event."""

from __future__ import annotations

import asyncio
import logging

from factkeeper.config.models import BotConfig
from factkeeper.domain.replies import EventKind, InboundEvent, Reply
from factkeeper.infrastructure.state_store import StateStore
from factkeeper.infrastructure.transport import EventSource, ReplySink
from factkeeper.orchestration.engine import DialogueEngine

logger = logging.getLogger(__name__)


class BotRuntime:
    """Holds config + store + reply sink; creates one DialogueEngine; routes events by kind."""

    def __init__(
        self,
        config: BotConfig,
        store: StateStore,
        sink: ReplySink,
    ) -> None:
        self.config = config
        self.store = store
        self._engine = DialogueEngine(store, sink, config.messages)
        self._tasks: set[asyncio.Task[Reply | None]] = set()

    async def dispatch(self, event: InboundEvent) -> Reply | None:
        """
        Handle one event. Failures are logged and swallowed: state already
        committed stays committed, and the process keeps serving.
        """
        try:
            if event.kind == EventKind.START:
                return await self._engine.handle_start(event.user_id)
            if event.kind == EventKind.SHOW_DATA:
                return await self._engine.handle_show_data(event.user_id)
            return await self._engine.handle_text(event.user_id, event.text)
        except Exception:
            logger.exception("Failed to handle %s event for user %s", event.kind.value, event.user_id)
            return None

    async def serve(self, source: EventSource) -> None:
        """Consume events until the source ends; users are handled in parallel."""
        logger.info("%s is serving", self.config.name)
        try:
            async for event in source.events():
                task = asyncio.create_task(self.dispatch(event))
                self._tasks.add(task)
                task.add_done_callback(self._tasks.discard)
        finally:
            if self._tasks:
                await asyncio.gather(*self._tasks)
            logger.info("%s stopped", self.config.name)
