"""Vocabulary book models."""

import uuid

from pydantic import BaseModel, Field, field_validator

from fluent_tutor.models.clock import epoch_ms


class WordEnrichment(BaseModel):
    """Dictionary-grade detail fetched after a word is saved."""

    phonetic: str | None = None
    part_of_speech: str | None = None
    native_definition: str | None = None
    example_sentence: str | None = None
    example_translation: str | None = None
    roots: str | None = None
    synonyms: list[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True, exclude_defaults=True)


class VocabularyWord(BaseModel):
    """A saved word. ``enrichment`` stays None until the lookup completes."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    word: str = Field(min_length=1)
    definition: str = ""
    context: str = ""
    added_at: int = Field(default_factory=epoch_ms)
    enrichment: WordEnrichment | None = None

    @field_validator("word")
    @classmethod
    def _strip_word(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("word must not be blank")
        return value

    @property
    def key(self) -> str:
        """Case-insensitive dedup key."""
        return self.word.strip().lower()

    @property
    def is_loading(self) -> bool:
        return self.enrichment is None


def seed_vocabulary() -> list[VocabularyWord]:
    """Word list every new (or reset) user starts with."""
    return [
        VocabularyWord(
            id="1",
            word="Latte",
            definition="A type of coffee made with espresso and hot steamed milk.",
            context="I would like a large latte, please.",
            enrichment=WordEnrichment(
                phonetic="/ˈlɑː.teɪ/",
                part_of_speech="n.",
                native_definition="拿铁咖啡",
                example_sentence="She ordered a skinny latte with no sugar.",
                example_translation="她点了一杯不加糖的脱脂拿铁。",
                synonyms=["coffee", "espresso", "brew"],
                roots='From Italian "caffè latte" (milk coffee).',
            ),
        )
    ]
