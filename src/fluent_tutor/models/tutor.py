"""Tutor collaborator response models.

Responses are validated per mode at the client boundary: a guided turn
without a ``guided_task`` is a failed turn, not a free turn.
"""

from pydantic import BaseModel, Field, field_validator

from fluent_tutor.models.chat import ChatMessage, Role, SuggestedVocab
from fluent_tutor.models.scenario import ChatMode


def _blank_as_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TutorTurnBase(BaseModel):
    """Fields shared by every tutor reply."""

    roleplay_response: str = Field(min_length=1)
    translation: str = Field(min_length=1)
    correction: str | None = None
    explanation: str | None = None
    suggested_vocab: list[SuggestedVocab] = Field(default_factory=list)

    @field_validator("correction", "explanation", mode="before")
    @classmethod
    def _normalize_annotations(cls, value):
        return _blank_as_none(value)

    @field_validator("suggested_vocab", mode="before")
    @classmethod
    def _null_vocab_as_empty(cls, value):
        return [] if value is None else value

    def to_message(self) -> ChatMessage:
        return ChatMessage(
            role=Role.AI,
            text=self.roleplay_response,
            correction=self.correction,
            explanation=self.explanation,
            translation=self.translation,
            suggested_vocab=tuple(self.suggested_vocab),
        )


class FreeTurnResult(TutorTurnBase):
    """Open-conversation reply. Never carries a guided task."""


class GuidedTurnResult(TutorTurnBase):
    """Translation-challenge reply with the next task."""

    reference_translation: str | None = None
    guided_task: str = Field(min_length=1)

    @field_validator("reference_translation", mode="before")
    @classmethod
    def _normalize_reference(cls, value):
        return _blank_as_none(value)

    def to_message(self) -> ChatMessage:
        return super().to_message().model_copy(
            update={
                "reference_translation": self.reference_translation,
                "guided_task": self.guided_task,
            }
        )


class GuidedIntro(BaseModel):
    """Opening line and first task of a guided session."""

    roleplay_response: str = Field(min_length=1)
    translation: str = Field(min_length=1)
    guided_task: str = Field(min_length=1)

    def to_message(self) -> ChatMessage:
        return ChatMessage(
            role=Role.AI,
            text=self.roleplay_response,
            translation=self.translation,
            guided_task=self.guided_task,
        )


TutorTurn = FreeTurnResult | GuidedTurnResult

TURN_MODELS: dict[ChatMode, type[TutorTurnBase]] = {
    ChatMode.FREE: FreeTurnResult,
    ChatMode.GUIDED: GuidedTurnResult,
}
