"""Service for running a flashcard study session."""
import logging
import random
from datetime import datetime, UTC
from typing import Callable, Dict, Iterable, List, Optional

from tonganreader.config import SORT_MODES
from tonganreader.errors import ValidationError
from tonganreader.models.models import CARD_STATUSES, RATINGS
from tonganreader.models.study_models import (
    SORT_OLDEST,
    SORT_RANDOM,
    KeyResult,
    StudyAction,
    StudyCard,
    StudySessionData,
)

logger = logging.getLogger(__name__)

# persist(card_id, status) -> review timestamp; raises if the datastore call fails
RatingPersister = Callable[[str, str], Optional[datetime]]

KEY_ACTIONS: Dict[str, StudyAction] = {
    "ArrowLeft": StudyAction.PREVIOUS,
    "ArrowRight": StudyAction.NEXT,
    "1": StudyAction.RATE_BAD,
    "2": StudyAction.RATE_OK,
    "3": StudyAction.RATE_GOOD,
    " ": StudyAction.TOGGLE_ANSWER,
    "Space": StudyAction.TOGGLE_ANSWER,
}

RATING_ACTIONS = {
    StudyAction.RATE_BAD: "bad",
    StudyAction.RATE_OK: "ok",
    StudyAction.RATE_GOOD: "good",
}


def toggle_status_filter(current: Iterable[str], status: str) -> List[str]:
    """Add or remove a status; a filter that would become empty resets to all statuses."""
    if status not in CARD_STATUSES:
        raise ValidationError(f"Unknown status: {status}")

    selected = list(current)
    if status in selected:
        selected.remove(status)
    else:
        selected.append(status)

    if not selected:
        return list(CARD_STATUSES)
    return [s for s in CARD_STATUSES if s in selected]


def shuffled_positions(length: int, rng: random.Random) -> List[int]:
    """Fisher-Yates shuffle over the positions 0..length-1."""
    order = list(range(length))
    for i in range(length - 1, 0, -1):
        j = rng.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return order


def _created_key(card: StudyCard):
    created = card.created_at
    return (created is None, created.timestamp() if created else 0.0)


class StudySession:
    """Filtered, ordered traversal of a user's flashcards."""

    def __init__(self, data: Optional[StudySessionData] = None, rng: Optional[random.Random] = None):
        self.data = data or StudySessionData()
        self.rng = rng or random.Random()
        self.cards: List[StudyCard] = []
        self.ordered: List[StudyCard] = []

    def load(self, cards: Iterable[StudyCard]) -> None:
        """Recompute the ordered view for a card collection."""
        self.cards = list(cards)
        self._recompute()

    def _recompute(self) -> None:
        # Guard against state written before the filter could be emptied
        if not self.data.status_filter:
            self.data.status_filter = list(CARD_STATUSES)

        filtered = [card for card in self.cards if card.status in self.data.status_filter]

        if self.data.sort_by == SORT_RANDOM:
            order = self.data.shuffled_order
            if len(order) != len(filtered) or sorted(order) != list(range(len(filtered))):
                order = shuffled_positions(len(filtered), self.rng)
                logger.debug(f"Reshuffled {len(filtered)} cards")
            self.data.shuffled_order = order
            self.ordered = [filtered[i] for i in order]
        elif self.data.sort_by == SORT_OLDEST:
            self.ordered = sorted(filtered, key=_created_key)
        else:
            self.ordered = sorted(filtered, key=_created_key, reverse=True)

        self._clamp_index()

    def _clamp_index(self) -> None:
        length = len(self.ordered)
        if length == 0:
            self.data.current_index = 0
        elif self.data.current_index >= length:
            self.data.current_index = length - 1
        elif self.data.current_index < 0:
            self.data.current_index = 0

    def __len__(self) -> int:
        return len(self.ordered)

    @property
    def is_empty(self) -> bool:
        return not self.ordered

    @property
    def current_card(self) -> Optional[StudyCard]:
        if not self.ordered:
            return None
        return self.ordered[self.data.current_index]

    @property
    def prompt(self) -> Optional[str]:
        card = self.current_card
        if card is None:
            return None
        return card.english_phrase if self.data.swap_qa else card.tongan_phrase

    @property
    def answer(self) -> Optional[str]:
        card = self.current_card
        if card is None:
            return None
        return card.tongan_phrase if self.data.swap_qa else card.english_phrase

    def next(self) -> None:
        if self.ordered:
            self.data.current_index = (self.data.current_index + 1) % len(self.ordered)
        self.data.answer_visible = False

    def previous(self) -> None:
        if self.ordered:
            length = len(self.ordered)
            self.data.current_index = (self.data.current_index - 1 + length) % length
        self.data.answer_visible = False

    def toggle_answer(self) -> None:
        self.data.answer_visible = not self.data.answer_visible

    def set_sort(self, sort_by: str) -> None:
        if sort_by not in SORT_MODES:
            raise ValidationError(f"Unknown sort mode: {sort_by}")
        if sort_by != self.data.sort_by:
            self.data.sort_by = sort_by
            self.data.shuffled_order = []
        self._recompute()

    def toggle_status(self, status: str) -> None:
        self.data.status_filter = toggle_status_filter(self.data.status_filter, status)
        self._recompute()

    def set_swap(self, swap_qa: bool) -> None:
        """Swap prompt and answer; ordering is unaffected."""
        self.data.swap_qa = bool(swap_qa)

    def rate(self, status: str, persist: RatingPersister) -> StudyCard:
        """Persist a rating, then update the card and advance.

        If ``persist`` raises, the exception propagates and neither the card
        nor the position changes.
        """
        if status not in RATINGS:
            raise ValidationError(f"Unknown rating: {status}")
        card = self.current_card
        if card is None:
            raise ValidationError("No card to rate")

        reviewed_at = persist(card.id, status)

        card.status = status
        card.last_reviewed_at = reviewed_at or datetime.now(UTC)
        logger.debug(f"Card {card.id} rated {status}")
        self.next()
        # The new status may drop the card out of the filter
        self._recompute()
        return card

    def handle_key(self, key: str, persist: RatingPersister) -> KeyResult:
        """Apply a keyboard shortcut."""
        action = KEY_ACTIONS.get(key)
        if action is None or self.is_empty:
            return KeyResult()

        if action is StudyAction.PREVIOUS:
            self.previous()
        elif action is StudyAction.NEXT:
            self.next()
        elif action is StudyAction.TOGGLE_ANSWER:
            self.toggle_answer()
        else:
            self.rate(RATING_ACTIONS[action], persist)

        return KeyResult(action=action, prevent_default=action is StudyAction.TOGGLE_ANSWER)

    def progress(self) -> Dict[str, int]:
        """Number of cards in each status across the whole collection."""
        counts = {status: 0 for status in CARD_STATUSES}
        for card in self.cards:
            counts[card.status] = counts.get(card.status, 0) + 1
        return counts

    def to_view(self) -> dict:
        """Render-ready state of the session."""
        card = self.current_card
        return {
            "empty": card is None,
            "card": None if card is None else {
                "id": card.id,
                "prompt": self.prompt,
                "answer": self.answer if self.data.answer_visible else None,
                "status": card.status,
            },
            "current_index": self.data.current_index,
            "total": len(self.ordered),
            "answer_visible": self.data.answer_visible,
            "sort_by": self.data.sort_by,
            "status_filter": list(self.data.status_filter),
            "swap_qa": self.data.swap_qa,
            "progress": self.progress(),
        }
