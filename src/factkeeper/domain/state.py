"""Per-user record and persisted store document models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from factkeeper.domain.phases import ConversationPhase


class FieldName(str, Enum):
    """The four collectible facts, in summary order."""

    NAME = "Name"
    AGE = "Age"
    BIO = "Bio"
    CHILDREN = "Children"


class UserFields(BaseModel):
    """Collected values for one user. Unset fields are empty strings."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", alias="Name")
    age: str = Field(default="", alias="Age")
    bio: str = Field(default="", alias="Bio")
    children: str = Field(default="", alias="Children")

    def get(self, field: FieldName) -> str:
        return getattr(self, _ATTRS[field])

    def set(self, field: FieldName, value: str) -> None:
        setattr(self, _ATTRS[field], value)

    def render(self) -> str:
        """Fixed four-line rendering: Name, Age, Bio, Children."""
        return "\n".join(f"{f.value}: {self.get(f)}" for f in FieldName)


_ATTRS: dict[FieldName, str] = {
    FieldName.NAME: "name",
    FieldName.AGE: "age",
    FieldName.BIO: "bio",
    FieldName.CHILDREN: "children",
}


class StoreSnapshot(BaseModel):
    """Whole-store document: the three tables written to the state file."""

    states: dict[int, ConversationPhase] = Field(default_factory=dict, description="user_id -> phase code")
    data: dict[int, UserFields] = Field(default_factory=dict, description="user_id -> collected fields")
    context: dict[int, str] = Field(default_factory=dict, description="user_id -> field being edited")
