"""State machines for the word lookup panel and the flashcard editor."""
import logging
from dataclasses import replace
from typing import Any, Callable, Optional

from tonganreader.errors import TonganReaderError, ValidationError
from tonganreader.models.panel_models import (
    Editing,
    Error,
    Idle,
    Loading,
    PanelState,
    Ready,
    Saving,
)
from tonganreader.services.dictionary_service import DictionaryEntry

logger = logging.getLogger(__name__)


class LookupPanel:
    """Panel showing the lookup result for a clicked word.

    Lookups are never cancelled: a result whose word is no longer the
    selected word is ignored.
    """

    def __init__(self, state: Optional[PanelState] = None):
        self.state = state or Idle()

    def _require(self, *state_types):
        if not isinstance(self.state, state_types):
            raise ValidationError(f"Action not allowed while {self.state.tag}")
        return self.state

    def select(self, word: str) -> PanelState:
        word = (word or "").strip()
        if not word:
            raise ValidationError("Word parameter is required")
        self.state = Loading(word=word)
        return self.state

    def resolve(self, word: str, entry: DictionaryEntry) -> bool:
        """Apply a lookup result; returns False if the result is stale."""
        if not isinstance(self.state, Loading) or self.state.word != word:
            logger.debug(f"Ignoring stale lookup result for {word}")
            return False
        self.state = Ready(word=word, entry=entry)
        return True

    def fail(self, word: str, reason: str) -> bool:
        if not isinstance(self.state, Loading) or self.state.word != word:
            logger.debug(f"Ignoring stale lookup failure for {word}")
            return False
        self.state = Error(word=word, reason=reason)
        return True

    def edit(self) -> PanelState:
        state = self._require(Ready)
        self.state = Editing(word=state.word, entry=state.entry, draft=state.entry)
        return self.state

    def update_draft(self, english: str) -> PanelState:
        state = self._require(Editing)
        self.state = replace(state, draft=replace(state.draft, english=english))
        return self.state

    def save_edit(self) -> PanelState:
        state = self._require(Editing)
        english = state.draft.english.strip()
        if not english:
            raise ValidationError("English phrase cannot be empty")
        self.state = Ready(word=state.word, entry=replace(state.entry, english=english))
        return self.state

    def cancel_edit(self) -> PanelState:
        state = self._require(Editing)
        self.state = Ready(word=state.word, entry=state.entry)
        return self.state

    def begin_save(self) -> PanelState:
        state = self._require(Ready)
        self.state = Saving(word=state.word, entry=state.entry)
        return self.state

    def saved(self) -> PanelState:
        self._require(Saving)
        self.state = Idle()
        return self.state

    def save_failed(self, reason: str) -> PanelState:
        state = self._require(Saving)
        self.state = Error(word=state.word, reason=reason)
        return self.state

    def save(self, persist: Callable[[DictionaryEntry], Any]) -> Any:
        """Save the shown entry as a flashcard; the panel closes only on success.

        A failed save leaves the panel in Error and re-raises.
        """
        state = self.begin_save()
        try:
            result = persist(state.entry)
        except TonganReaderError as e:
            logger.error(f"Error saving flashcard for {state.word}: {e.message}")
            self.save_failed(e.message)
            raise
        self.saved()
        return result

    def close(self) -> PanelState:
        self.state = Idle()
        return self.state


class FlashcardEditor:
    """Edit flow for an existing flashcard; local values change only after a successful save."""

    def __init__(self, state: Optional[PanelState] = None):
        self.state = state or Idle()

    def start(self, flashcard_id: str, tongan_phrase: str, english_phrase: str) -> PanelState:
        entry = DictionaryEntry(tongan=tongan_phrase, english=english_phrase)
        self.state = Editing(word=flashcard_id, entry=entry, draft=entry)
        return self.state

    def update_draft(self, tongan: Optional[str] = None, english: Optional[str] = None) -> PanelState:
        if not isinstance(self.state, Editing):
            raise ValidationError("No flashcard is being edited")
        draft = self.state.draft
        if tongan is not None:
            draft = replace(draft, tongan=tongan)
        if english is not None:
            draft = replace(draft, english=english)
        self.state = replace(self.state, draft=draft)
        return self.state

    def cancel(self) -> PanelState:
        self.state = Idle()
        return self.state

    def save(self, persist: Callable[[str, str, str], Any]) -> Any:
        """Persist the draft as ``persist(flashcard_id, tongan, english)``; failures re-raise."""
        if not isinstance(self.state, Editing):
            raise ValidationError("No flashcard is being edited")
        editing = self.state
        self.state = Saving(word=editing.word, entry=editing.draft)
        try:
            result = persist(editing.word, editing.draft.tongan, editing.draft.english)
        except TonganReaderError as e:
            logger.error(f"Error saving flashcard {editing.word}: {e.message}")
            self.state = Error(word=editing.word, reason=e.message)
            raise
        self.state = Idle()
        return result
