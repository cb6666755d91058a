"""Chat message and conversation session models."""

import uuid
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from fluent_tutor.models.clock import epoch_ms
from fluent_tutor.models.scenario import ChatMode, Scenario

ANNOTATION_FIELDS = (
    "correction",
    "explanation",
    "translation",
    "reference_translation",
    "guided_task",
)


class Role(StrEnum):
    """Message author."""

    USER = "user"
    AI = "ai"


class SuggestedVocab(BaseModel):
    """A word the tutor suggests the learner save."""

    model_config = ConfigDict(frozen=True)

    word: str
    definition: str = ""


class ChatMessage(BaseModel):
    """A single immutable chat message.

    Annotation fields are only valid on AI messages. A correction on
    message N critiques the user message at N-1.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Role
    text: str
    correction: str | None = None
    explanation: str | None = None
    translation: str | None = None
    reference_translation: str | None = None
    suggested_vocab: tuple[SuggestedVocab, ...] = ()
    guided_task: str | None = None

    @field_validator(*ANNOTATION_FIELDS, mode="before")
    @classmethod
    def _blank_as_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _annotations_only_on_ai(self) -> "ChatMessage":
        if self.role == Role.USER:
            present = [name for name in ANNOTATION_FIELDS if getattr(self, name) is not None]
            if present or self.suggested_vocab:
                raise ValueError(f"user messages cannot carry annotations: {present}")
        return self

    @classmethod
    def from_user(cls, text: str) -> "ChatMessage":
        return cls(role=Role.USER, text=text)


class ConversationSession(BaseModel):
    """One conversation thread, unique per (scenario.id, mode) for a user."""

    id: str
    scenario: Scenario
    mode: ChatMode
    messages: tuple[ChatMessage, ...] = ()
    start_time: int = Field(default_factory=epoch_ms)
    last_updated: int = Field(default_factory=epoch_ms)

    def matches(self, scenario_id: str, mode: ChatMode) -> bool:
        return self.scenario.id == scenario_id and self.mode == mode
