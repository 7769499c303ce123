"""Models for study-session data."""
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from tonganreader.models.models import CARD_STATUSES, Flashcard

SORT_NEWEST = "newest"
SORT_OLDEST = "oldest"
SORT_RANDOM = "random"


class StudyAction(Enum):
    """Actions a study key press can trigger."""
    PREVIOUS = "previous"
    NEXT = "next"
    RATE_BAD = "bad"
    RATE_OK = "ok"
    RATE_GOOD = "good"
    TOGGLE_ANSWER = "toggle_answer"


@dataclass
class StudySessionData:
    """Serializable study-session state kept between requests."""
    sort_by: str = SORT_NEWEST
    status_filter: List[str] = field(default_factory=lambda: list(CARD_STATUSES))
    swap_qa: bool = False
    current_index: int = 0
    shuffled_order: List[int] = field(default_factory=list)  # positions into the filtered list
    answer_visible: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]], default_sort: str = SORT_NEWEST) -> "StudySessionData":
        """Create session data from stored data, ignoring unknown keys."""
        if not data:
            return cls(sort_by=default_sort)
        return cls(
            sort_by=data.get("sort_by", default_sort),
            status_filter=list(data.get("status_filter") or CARD_STATUSES),
            swap_qa=bool(data.get("swap_qa", False)),
            current_index=int(data.get("current_index", 0)),
            shuffled_order=[int(i) for i in data.get("shuffled_order", [])],
            answer_visible=bool(data.get("answer_visible", False)),
        )


@dataclass
class StudyCard:
    """In-memory copy of a flashcard under review."""
    id: str
    tongan_phrase: str
    english_phrase: str
    status: str
    created_at: Optional[datetime] = None
    last_reviewed_at: Optional[datetime] = None

    @classmethod
    def from_flashcard(cls, flashcard: Flashcard) -> "StudyCard":
        return cls(
            id=flashcard.id,
            tongan_phrase=flashcard.tongan_phrase,
            english_phrase=flashcard.english_phrase,
            status=flashcard.status,
            created_at=flashcard.created_at,
            last_reviewed_at=flashcard.last_reviewed_at,
        )


@dataclass
class KeyResult:
    """Outcome of a key press on the study page."""
    action: Optional[StudyAction] = None
    prevent_default: bool = False
