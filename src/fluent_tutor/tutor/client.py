"""OpenAI-backed tutor collaborator.

Every call asks for a JSON object and validates it against the model for
the requested shape. Transport, parse and validation problems surface as
``TutorServiceError``, except for word lookups, which degrade to an empty
enrichment so that saving a word never fails.
"""

import json
from collections.abc import Sequence
from typing import Any, Protocol

import structlog
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from fluent_tutor.conversation.prompts import (
    build_guided_intro_prompt,
    build_lookup_prompt,
    build_scenario_prompt,
    build_turn_system_prompt,
    build_turn_user_prompt,
)
from fluent_tutor.models.chat import ChatMessage
from fluent_tutor.models.clock import epoch_ms
from fluent_tutor.models.scenario import CUSTOM_SCENARIO_PREFIX, ChatMode, Scenario
from fluent_tutor.models.tutor import TURN_MODELS, GuidedIntro, TutorTurn
from fluent_tutor.models.vocabulary import WordEnrichment

logger = structlog.get_logger()


class TutorServiceError(Exception):
    """The tutor collaborator failed to produce a usable response."""


class TutorService(Protocol):
    async def get_tutor_turn(
        self,
        history: Sequence[ChatMessage],
        user_text: str,
        scenario: Scenario,
        mode: ChatMode,
    ) -> TutorTurn: ...

    async def start_guided_intro(self, scenario: Scenario) -> GuidedIntro: ...

    async def enrich_word(self, word: str, context: str) -> WordEnrichment: ...

    async def propose_scenario(self, topic: str) -> Scenario: ...


class _ScenarioDraft(BaseModel):
    title: str
    description: str
    emoji: str
    ai_role: str
    user_role: str
    difficulty: str
    initial_message: str


class TutorClient:
    """Generates tutor turns, guided intros, dictionary entries and scenarios.

    Args:
        api_key: OpenAI API key.
        model: Model for roleplay turns and scenario generation.
        lookup_model: Model for dictionary lookups.
        native_language: Learner's native language (translations, tasks).
        target_language: Language being practiced.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        lookup_model: str = "gpt-4o-mini",
        native_language: str = "Chinese",
        target_language: str = "English",
    ):
        self.api_key = api_key.strip().strip("'\"")
        self.model = model
        self.lookup_model = lookup_model
        self.native_language = native_language
        self.target_language = target_language
        self._client: AsyncOpenAI | None = None

    @property
    def client(self) -> AsyncOpenAI:
        if not self.api_key:
            raise TutorServiceError("OpenAI API key is missing")
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self.api_key)
        return self._client

    async def _complete_json(
        self,
        messages: list[dict[str, str]],
        model: str,
        temperature: float = 0.7,
    ) -> dict[str, Any]:
        try:
            response = await self.client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=temperature,
                response_format={"type": "json_object"},
            )
        except TutorServiceError:
            raise
        except Exception as e:
            raise TutorServiceError(f"tutor request failed: {e}") from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise TutorServiceError("empty response from tutor model")
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise TutorServiceError("tutor response was not valid JSON") from e
        if not isinstance(data, dict):
            raise TutorServiceError("tutor response was not a JSON object")
        return data

    async def get_tutor_turn(
        self,
        history: Sequence[ChatMessage],
        user_text: str,
        scenario: Scenario,
        mode: ChatMode,
    ) -> TutorTurn:
        """Correct the user's line and reply in character.

        Raises:
            TutorServiceError: On transport failure or a reply missing the
                fields required for ``mode``.
        """
        system = build_turn_system_prompt(
            scenario, mode, self.native_language, self.target_language
        )
        data = await self._complete_json(
            [
                {"role": "system", "content": system},
                {"role": "user", "content": build_turn_user_prompt(history, user_text, scenario)},
            ],
            model=self.model,
        )
        try:
            turn = TURN_MODELS[mode].model_validate(data)
        except ValidationError as e:
            logger.warning("tutor_turn_invalid", mode=mode.value, errors=e.error_count())
            raise TutorServiceError(f"invalid {mode.value} turn") from e
        logger.info("tutor_turn_generated", mode=mode.value, corrected=turn.correction is not None)
        return turn

    async def start_guided_intro(self, scenario: Scenario) -> GuidedIntro:
        """Introduce a guided session and issue its first task.

        Raises:
            TutorServiceError: There is no fallback opening for guided mode.
        """
        prompt = build_guided_intro_prompt(scenario, self.native_language, self.target_language)
        data = await self._complete_json([{"role": "user", "content": prompt}], model=self.model)
        try:
            intro = GuidedIntro.model_validate(data)
        except ValidationError as e:
            raise TutorServiceError("invalid guided intro") from e
        logger.info("guided_intro_generated", scenario_id=scenario.id)
        return intro

    async def enrich_word(self, word: str, context: str) -> WordEnrichment:
        """Look up dictionary detail for a word. Returns an empty bundle on failure."""
        prompt = build_lookup_prompt(word, context, self.native_language, self.target_language)
        try:
            data = await self._complete_json(
                [{"role": "user", "content": prompt}],
                model=self.lookup_model,
                temperature=0.3,
            )
            enrichment = WordEnrichment.model_validate(data)
        except (TutorServiceError, ValidationError):
            logger.exception("vocab_lookup_failed", word=word)
            return WordEnrichment()
        logger.info("vocab_lookup_complete", word=word)
        return enrichment

    async def propose_scenario(self, topic: str) -> Scenario:
        """Generate a custom scenario for a free-text topic.

        Raises:
            TutorServiceError: Generation failed; shown to the user.
        """
        prompt = build_scenario_prompt(topic, self.target_language)
        data = await self._complete_json([{"role": "user", "content": prompt}], model=self.model)
        try:
            draft = _ScenarioDraft.model_validate(data)
            scenario = Scenario(id=f"{CUSTOM_SCENARIO_PREFIX}{epoch_ms()}", **draft.model_dump())
        except ValidationError as e:
            raise TutorServiceError("invalid scenario") from e
        logger.info("scenario_generated", scenario_id=scenario.id, topic=topic)
        return scenario
