"""Dialogue engine: one event in, store mutations applied, one reply out."""

from __future__ import annotations

import logging

from factkeeper.config.models import MessagesConfig
from factkeeper.domain.phases import ConversationPhase, ReplyKind, Transition, next_transition
from factkeeper.domain.replies import KeyboardHint, Reply
from factkeeper.domain.validators import KNOWN_FIELDS
from factkeeper.infrastructure.state_store import StateStore
from factkeeper.infrastructure.transport import ReplySink

logger = logging.getLogger(__name__)


class DialogueEngine:
    """Holds no per-user state. Reads and writes only through the store, replies only through the sink."""

    def __init__(
        self,
        store: StateStore,
        sink: ReplySink,
        messages: MessagesConfig | None = None,
    ) -> None:
        self._store = store
        self._sink = sink
        self.messages = messages or MessagesConfig()

    async def handle_start(self, user_id: int) -> Reply:
        """/start: back to CHOOSING and show the menu."""
        await self._store.set_state(user_id, ConversationPhase.CHOOSING)
        return await self._reply(user_id, self.messages.greeting, KeyboardHint.SHOW_FIELD_MENU)

    async def handle_show_data(self, user_id: int) -> Reply:
        """/show_data: summary only, phase unchanged."""
        summary = await self._store.render_summary(user_id)
        return await self._reply(user_id, self.messages.show_data.format(summary=summary), KeyboardHint.NONE)

    async def handle_text(self, user_id: int, text: str) -> Reply:
        """Run one text message through the state machine."""
        phase = await self._store.get_state(user_id)
        active_field = await self._store.get_context(user_id)
        transition = next_transition(phase, active_field, text, KNOWN_FIELDS)
        logger.debug(
            "user=%s phase=%s text=%r -> %s/%s",
            user_id,
            phase.name,
            text,
            transition.next_phase.name,
            transition.reply.value,
        )
        await self._apply(user_id, phase, transition)
        return await self._reply_for(user_id, transition, active_field)

    async def _apply(self, user_id: int, phase: ConversationPhase, transition: Transition) -> None:
        if transition.set_context is not None:
            await self._store.set_context(user_id, transition.set_context)
        if transition.write_field is not None:
            await self._store.update_field(user_id, transition.write_field, transition.write_value or "")
        if transition.next_phase != phase:
            await self._store.set_state(user_id, transition.next_phase)

    async def _reply_for(self, user_id: int, transition: Transition, active_field: str) -> Reply:
        m = self.messages
        kind = transition.reply
        if kind == ReplyKind.PROMPT_FIELD:
            return await self._reply(user_id, m.prompt_field.format(field=transition.set_context), KeyboardHint.NONE)
        if kind == ReplyKind.RECORDED:
            return await self._reply(user_id, m.recorded.format(field=active_field), KeyboardHint.SHOW_FIELD_MENU)
        if kind == ReplyKind.SUMMARY:
            summary = await self._store.render_summary(user_id)
            return await self._reply(user_id, m.summary.format(summary=summary), KeyboardHint.REMOVE_MENU)
        if kind == ReplyKind.USE_MENU:
            return await self._reply(user_id, m.use_menu, KeyboardHint.SHOW_FIELD_MENU)
        return await self._reply(user_id, m.restart, KeyboardHint.NONE)

    async def _reply(self, user_id: int, text: str, keyboard: KeyboardHint) -> Reply:
        reply = Reply(user_id=user_id, text=text, keyboard=keyboard)
        await self._sink.send(reply)
        return reply
