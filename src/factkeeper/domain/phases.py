"""Conversation FSM: phase enum and pure transition function."""

from __future__ import annotations

from enum import Enum, IntEnum

from pydantic import BaseModel


class ConversationPhase(IntEnum):
    """Dialogue step per user. Integer codes are what the state file stores."""

    CHOOSING = 0
    TYPING_CHOICE = 1  # never entered; kept so older files stay readable
    TYPING_REPLY = 2


class ReplyKind(str, Enum):
    """Which reply the engine should build for a transition."""

    PROMPT_FIELD = "prompt_field"
    RECORDED = "recorded"
    SUMMARY = "summary"
    USE_MENU = "use_menu"
    RESTART = "restart"


DONE = "Done"


class Transition(BaseModel):
    """Outcome of one text event. Store mutations are applied in field order."""

    next_phase: ConversationPhase
    reply: ReplyKind
    set_context: str | None = None
    write_field: str | None = None
    write_value: str | None = None


def next_transition(
    phase: ConversationPhase,
    active_field: str,
    text: str,
    known_fields: tuple[str, ...],
) -> Transition:
    """
    Pure transition: given the user's phase, active field and incoming text,
    return what to store and what to reply. Testable without I/O.
    """
    if phase == ConversationPhase.CHOOSING:
        if text in known_fields:
            return Transition(
                next_phase=ConversationPhase.TYPING_REPLY,
                reply=ReplyKind.PROMPT_FIELD,
                set_context=text,
            )
        if text == DONE:
            return Transition(next_phase=ConversationPhase.CHOOSING, reply=ReplyKind.SUMMARY)
        return Transition(next_phase=ConversationPhase.CHOOSING, reply=ReplyKind.USE_MENU)

    if phase == ConversationPhase.TYPING_REPLY:
        if active_field not in known_fields:
            return Transition(next_phase=ConversationPhase.CHOOSING, reply=ReplyKind.USE_MENU)
        # Any text is accepted as the value; context stays set but is inert.
        return Transition(
            next_phase=ConversationPhase.CHOOSING,
            reply=ReplyKind.RECORDED,
            write_field=active_field,
            write_value=text,
        )

    return Transition(next_phase=phase, reply=ReplyKind.RESTART)
