"""Shared fixtures: in-memory store, user context and a mocked tutor."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from fluent_tutor.conversation.scenarios import get_scenario
from fluent_tutor.models.scenario import Difficulty, Scenario
from fluent_tutor.models.tutor import FreeTurnResult, GuidedIntro, GuidedTurnResult
from fluent_tutor.models.user_profile import UserIdentity
from fluent_tutor.models.vocabulary import WordEnrichment
from fluent_tutor.storage.blob_store import MemoryBlobStore
from fluent_tutor.storage.context import UserContext


@pytest.fixture
def store():
    return MemoryBlobStore()


@pytest.fixture
def identity():
    return UserIdentity(user_id="alice-chen", display_name="Alice Chen")


@pytest.fixture
def context(identity, store):
    return UserContext(identity, store)


@pytest.fixture
def coffee_shop():
    return get_scenario("coffee-shop")


@pytest.fixture
def free_turn():
    return FreeTurnResult(
        roleplay_response="Sure! One latte coming up. Any size preference?",
        translation="好的！一杯拿铁马上来。您要什么尺寸？",
        correction="I want a latte.",
        explanation="Use the article 'a' before a countable noun.",
        suggested_vocab=[{"word": "preference", "definition": "a liking for one option"}],
    )


@pytest.fixture
def guided_turn():
    return GuidedTurnResult(
        roleplay_response="Of course. Would you like it hot or iced?",
        translation="当然。您要热的还是冰的？",
        correction="Could I have a latte without sugar?",
        explanation="You forgot to say 'without sugar'.",
        reference_translation="Could I have a latte without sugar, please?",
        guided_task="请告诉店员你想要冰的",
    )


@pytest.fixture
def guided_intro():
    return GuidedIntro(
        roleplay_response="Welcome to Bean & Brew! You are a customer ordering coffee.",
        translation="欢迎来到Bean & Brew！你是一位点咖啡的顾客。",
        guided_task="请问候店员并点一杯不加糖的拿铁",
    )


@pytest.fixture
def enrichment():
    return WordEnrichment(
        phonetic="/ˈpref.ər.əns/",
        part_of_speech="n.",
        native_definition="偏好",
        example_sentence="Do you have a preference for tea or coffee?",
        example_translation="你更喜欢茶还是咖啡？",
        synonyms=["choice", "liking", "inclination"],
    )


@pytest.fixture
def tutor(free_turn, guided_intro, enrichment):
    mock = MagicMock()
    mock.get_tutor_turn = AsyncMock(return_value=free_turn)
    mock.start_guided_intro = AsyncMock(return_value=guided_intro)
    mock.enrich_word = AsyncMock(return_value=enrichment)
    mock.propose_scenario = AsyncMock(
        return_value=Scenario(
            id="custom-1760000000000",
            title="Booking a Yoga Class",
            description="Sign up for a beginner yoga class.",
            emoji="🧘",
            ai_role="Studio Receptionist",
            user_role="New Member",
            difficulty=Difficulty.BEGINNER,
            initial_message="Hi there! Are you interested in one of our classes?",
        )
    )
    return mock
