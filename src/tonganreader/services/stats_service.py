"""Dashboard statistics for a user."""
import logging
from datetime import datetime, timedelta, UTC
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from tonganreader.config import settings
from tonganreader.models.models import STATUS_GOOD, Flashcard, User
from tonganreader.services.bible_service import BibleLibrary

logger = logging.getLogger(__name__)

# Sunday first, as on the dashboard chart
WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def percentage(part: int, whole: int) -> int:
    if whole <= 0:
        return 0
    return round(part / whole * 100)


class StatsService:
    """Service for computing a user's learning statistics."""

    def __init__(self, db: Session, library: BibleLibrary, window_days: Optional[int] = None):
        self.db = db
        self.library = library
        self.window_days = window_days or settings.study.new_words_window_days

    def daily_progress(self, cards: List[Flashcard], vocab_goal: int, now: datetime) -> List[Dict[str, Any]]:
        """Good cards created during the last week, per weekday."""
        week_ago = now - timedelta(days=7)
        counts = [0] * 7
        for card in cards:
            if card.status != STATUS_GOOD or card.created_at is None:
                continue
            created = _as_utc(card.created_at)
            if created >= week_ago:
                # isoweekday: Monday=1 .. Sunday=7
                counts[created.isoweekday() % 7] += 1
        return [
            {"day": day, "words": counts[i], "goal": vocab_goal}
            for i, day in enumerate(WEEKDAYS)
        ]

    def dashboard(self, user: User, now: Optional[datetime] = None) -> Dict[str, Any]:
        now = now or datetime.now(UTC)
        cards = self.db.query(Flashcard).filter(Flashcard.owner_id == user.clerk_id).all()

        window_start = now - timedelta(days=self.window_days)
        new_words = sum(
            1 for card in cards
            if card.created_at is not None and _as_utc(card.created_at) >= window_start
        )
        mastered = sum(1 for card in cards if card.status == STATUS_GOOD)

        reading_progress = 0
        current_book_name = None
        if user.current_book:
            current_book_name = self.library.book_name(user.current_book)
            reading_progress = percentage(user.current_chapter or 0, self.library.chapter_count(user.current_book))

        logger.debug(f"Dashboard for {user.clerk_id}: {len(cards)} cards, {mastered} mastered")
        return {
            "new_words": new_words,
            "mastered_words": mastered,
            "total_words": len(cards),
            "vocabulary_progress": percentage(mastered, len(cards)),
            "vocab_goal": user.vocab_goal or 0,
            "current_book": current_book_name,
            "current_chapter": user.current_chapter,
            "reading_progress": reading_progress,
            "daily_progress": self.daily_progress(cards, user.vocab_goal or 0, now),
        }
