"""Inbound events and outbound replies exchanged with the transport."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from factkeeper.domain.phases import DONE
from factkeeper.domain.state import FieldName


class KeyboardHint(str, Enum):
    """What the transport should do with the reply keyboard."""

    SHOW_FIELD_MENU = "show_field_menu"
    REMOVE_MENU = "remove_menu"
    NONE = "none"


class EventKind(str, Enum):
    START = "start"
    SHOW_DATA = "show_data"
    TEXT = "text"


class InboundEvent(BaseModel):
    """One message from a user: a command or free text."""

    user_id: int
    kind: EventKind = EventKind.TEXT
    text: str = ""


class Reply(BaseModel):
    """One message to a user."""

    user_id: int
    text: str
    keyboard: KeyboardHint = Field(default=KeyboardHint.NONE)


# Button rows of the field menu
MENU_LAYOUT: list[list[str]] = [
    [FieldName.NAME.value, FieldName.AGE.value],
    [FieldName.BIO.value, FieldName.CHILDREN.value],
    [DONE],
]
