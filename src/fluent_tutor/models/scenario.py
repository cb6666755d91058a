"""Roleplay scenario models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict

CUSTOM_SCENARIO_PREFIX = "custom-"


class Difficulty(StrEnum):
    """Scenario difficulty levels."""

    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class ChatMode(StrEnum):
    """Conversation modes."""

    FREE = "free"
    GUIDED = "guided"


class Scenario(BaseModel):
    """Immutable roleplay template."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str
    emoji: str
    ai_role: str
    user_role: str
    difficulty: Difficulty
    initial_message: str

    @property
    def is_custom(self) -> bool:
        """Whether the scenario was generated from a user topic."""
        return self.id.startswith(CUSTOM_SCENARIO_PREFIX)
