"""Smoke tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from fluent_tutor.models.chat import ChatMessage, ConversationSession, Role
from fluent_tutor.models.scenario import ChatMode, Difficulty
from fluent_tutor.models.tutor import FreeTurnResult, GuidedIntro, GuidedTurnResult
from fluent_tutor.models.user_profile import UserProfile, user_id_from_name
from fluent_tutor.models.vocabulary import VocabularyWord, WordEnrichment, seed_vocabulary


class TestUserIdFromName:
    def test_lowercases_and_hyphenates(self):
        assert user_id_from_name("Alice Chen") == "alice-chen"

    def test_collapses_whitespace_runs(self):
        assert user_id_from_name("  Mary \t Ann   Lee ") == "mary-ann-lee"

    def test_same_name_same_id(self):
        assert user_id_from_name("BOB") == user_id_from_name("bob")

    def test_blank_rejected(self):
        with pytest.raises(ValueError):
            user_id_from_name("   ")


class TestChatMessage:
    def test_user_message_has_no_annotations(self):
        msg = ChatMessage.from_user("I want latte")
        assert msg.role == Role.USER
        assert msg.correction is None
        assert msg.suggested_vocab == ()

    def test_annotations_rejected_on_user_message(self):
        with pytest.raises(ValidationError):
            ChatMessage(role=Role.USER, text="hello", correction="Hello.")

    def test_blank_annotation_normalized(self):
        msg = ChatMessage(role=Role.AI, text="Hi!", correction="  ", translation="你好！")
        assert msg.correction is None
        assert msg.translation == "你好！"

    def test_messages_are_immutable(self):
        msg = ChatMessage(role=Role.AI, text="Hi!")
        with pytest.raises(ValidationError):
            msg.text = "changed"

    def test_ids_are_unique(self):
        assert ChatMessage.from_user("a").id != ChatMessage.from_user("a").id


class TestScenario:
    def test_custom_provenance(self, coffee_shop, tutor):
        assert coffee_shop.is_custom is False
        assert tutor.propose_scenario.return_value.is_custom is True

    def test_difficulty_values(self):
        assert [d.value for d in Difficulty] == ["Beginner", "Intermediate", "Advanced"]

    def test_frozen(self, coffee_shop):
        with pytest.raises(ValidationError):
            coffee_shop.title = "Other"


class TestConversationSession:
    def test_matches_scenario_and_mode(self, coffee_shop):
        ai = ChatMessage(role=Role.AI, text="Hi!")
        session = ConversationSession(
            id="1", scenario=coffee_shop, mode=ChatMode.FREE,
            messages=(ai, ChatMessage.from_user("Hello")),
        )
        assert session.matches("coffee-shop", ChatMode.FREE)
        assert not session.matches("coffee-shop", ChatMode.GUIDED)


class TestTutorTurns:
    def test_free_turn_to_message(self, free_turn):
        msg = free_turn.to_message()
        assert msg.role == Role.AI
        assert msg.translation
        assert msg.guided_task is None
        assert msg.suggested_vocab[0].word == "preference"

    def test_guided_turn_requires_task(self):
        with pytest.raises(ValidationError):
            GuidedTurnResult(roleplay_response="Hi", translation="你好")

    def test_guided_turn_to_message(self, guided_turn):
        msg = guided_turn.to_message()
        assert msg.guided_task == "请告诉店员你想要冰的"
        assert msg.reference_translation.startswith("Could I have")

    def test_free_turn_requires_translation(self):
        with pytest.raises(ValidationError):
            FreeTurnResult(roleplay_response="Hi")

    def test_null_vocab_and_empty_correction(self):
        turn = FreeTurnResult.model_validate(
            {"roleplay_response": "Hi", "translation": "你好", "correction": "", "suggested_vocab": None}
        )
        assert turn.correction is None
        assert turn.suggested_vocab == []

    def test_guided_intro_message(self, guided_intro):
        msg = guided_intro.to_message()
        assert msg.guided_task
        assert msg.correction is None

    def test_guided_intro_requires_task(self):
        with pytest.raises(ValidationError):
            GuidedIntro(roleplay_response="Hi", translation="你好", guided_task="")


class TestVocabularyModels:
    def test_new_word_is_loading(self):
        word = VocabularyWord(word="Espresso")
        assert word.is_loading
        assert word.key == "espresso"

    def test_seed_is_enriched(self):
        seed = seed_vocabulary()
        assert len(seed) == 1
        assert seed[0].word == "Latte"
        assert not seed[0].is_loading

    def test_enrichment_empty(self):
        assert WordEnrichment().is_empty()
        assert not WordEnrichment(synonyms=["brew"]).is_empty()


def test_profile_defaults():
    profile = UserProfile()
    assert profile.level == "Intermediate"
    assert profile.avatar == "😎"
