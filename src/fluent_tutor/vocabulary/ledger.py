"""Vocabulary book with optimistic insert and background enrichment."""

import asyncio
from typing import Protocol

import structlog
from pydantic import TypeAdapter

from fluent_tutor.models.vocabulary import VocabularyWord, WordEnrichment, seed_vocabulary
from fluent_tutor.storage.context import VOCAB, UserContext

logger = structlog.get_logger()

SYNONYM_PLACEHOLDER_DEFINITION = "Loading definition..."

_ADAPTER = TypeAdapter(list[VocabularyWord])


class WordEnricher(Protocol):
    async def enrich_word(self, word: str, context: str) -> WordEnrichment: ...


class VocabularyLedger:
    """Owns the active user's saved words.

    Saving is a two-phase commit keyed by word id: the entry is inserted at
    the front immediately, then a background lookup merges its enrichment
    into whichever entry still carries that id.

    Args:
        context: Active user namespace.
        enricher: Dictionary lookup collaborator.
    """

    def __init__(self, context: UserContext, enricher: WordEnricher):
        self._context = context
        self._enricher = enricher
        self.words: list[VocabularyWord] = context.load(VOCAB, _ADAPTER, seed_vocabulary)
        self._selected_id: str | None = None
        self._pending: set[asyncio.Task] = set()

    def _persist(self) -> None:
        self._context.persist(VOCAB, _ADAPTER.dump_python(self.words, mode="json"))

    def find(self, word_id: str) -> VocabularyWord | None:
        return next((w for w in self.words if w.id == word_id), None)

    def find_by_text(self, text: str) -> VocabularyWord | None:
        key = text.strip().lower()
        return next((w for w in self.words if w.key == key), None)

    @property
    def selected(self) -> VocabularyWord | None:
        if self._selected_id is None:
            return None
        return self.find(self._selected_id)

    def select(self, word_id: str) -> VocabularyWord:
        word = self.find(word_id)
        if word is None:
            raise KeyError(word_id)
        self._selected_id = word_id
        return word

    def clear_selection(self) -> None:
        self._selected_id = None

    def save(self, word: VocabularyWord) -> str | None:
        """Insert a word and schedule its enrichment.

        Returns:
            The word id, or None when a word with the same text (ignoring
            case) is already saved.
        """
        if self.find_by_text(word.word) is not None:
            logger.info("vocab_duplicate_ignored", word=word.word)
            return None

        self.words.insert(0, word)
        self._persist()
        logger.info("vocab_saved", word=word.word, word_id=word.id)

        task = asyncio.create_task(self._enrich(word.id, word.word, word.context))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return word.id

    def add(self, text: str, definition: str = "", context: str = "") -> str | None:
        """Save a word picked from a chat suggestion.

        Raises:
            ValueError: The word is blank.
        """
        return self.save(VocabularyWord(word=text, definition=definition, context=context))

    def create_from_synonym(self, source_word: str, synonym: str) -> VocabularyWord:
        """Open a synonym as its own entry, creating it when unknown."""
        existing = self.find_by_text(synonym)
        if existing is not None:
            self._selected_id = existing.id
            return existing

        word = VocabularyWord(
            word=synonym,
            definition=SYNONYM_PLACEHOLDER_DEFINITION,
            context=f"Synonym of {source_word or 'unknown'}",
        )
        self.save(word)
        self._selected_id = word.id
        return word

    def delete(self, word_id: str) -> None:
        before = len(self.words)
        self.words = [w for w in self.words if w.id != word_id]
        if self._selected_id == word_id:
            self._selected_id = None
        if len(self.words) != before:
            self._persist()
            logger.info("vocab_deleted", word_id=word_id)

    def reset(self) -> None:
        self.words = seed_vocabulary()
        self._selected_id = None
        self._persist()

    async def join(self) -> None:
        """Wait for all in-flight enrichments."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _enrich(self, word_id: str, text: str, context: str) -> None:
        try:
            enrichment = await self._enricher.enrich_word(text, context)
        except Exception:
            logger.exception("vocab_enrichment_failed", word=text)
            return

        if enrichment.is_empty():
            logger.warning("vocab_enrichment_empty", word=text)
            return
        if not self._context.active:
            logger.info("vocab_enrichment_stale_user", word=text)
            return

        for index, entry in enumerate(self.words):
            if entry.id == word_id:
                break
        else:
            logger.info("vocab_enrichment_target_gone", word_id=word_id)
            return

        merged = (entry.enrichment or WordEnrichment()).model_copy(
            update=enrichment.model_dump(exclude_none=True, exclude_defaults=True)
        )
        self.words[index] = entry.model_copy(update={"enrichment": merged})
        self._persist()
        logger.info("vocab_enriched", word=text, word_id=word_id)
