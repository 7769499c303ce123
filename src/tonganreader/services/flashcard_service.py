"""Service for managing a user's flashcards."""
import logging
import unicodedata
from datetime import datetime, UTC
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tonganreader import monitoring
from tonganreader.errors import FlashcardNotFoundError, PersistenceError, ValidationError
from tonganreader.models.models import CARD_STATUSES, RATINGS, STATUS_NONE, Flashcard

logger = logging.getLogger(__name__)


def normalize_text(text: str) -> str:
    """Lowercase and drop diacritical marks for search."""
    decomposed = unicodedata.normalize("NFD", text or "")
    return "".join(c for c in decomposed if not unicodedata.combining(c)).lower()


class FlashcardService:
    """Service for managing flashcards, always scoped to one owner."""

    def __init__(self, db: Session):
        """Initialize the service with a database session."""
        self.db = db

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            monitoring.db_errors.labels(error_type=type(e).__name__).inc()
            logger.error(f"Error {action}: {e}")
            raise PersistenceError(f"Failed {action}") from e

    def list_for_owner(self, owner_id: str) -> List[Flashcard]:
        """Get all of a user's flashcards, newest first."""
        try:
            return (
                self.db.query(Flashcard)
                .filter(Flashcard.owner_id == owner_id)
                .order_by(Flashcard.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            monitoring.db_errors.labels(error_type=type(e).__name__).inc()
            logger.error(f"Error fetching flashcards for {owner_id}: {e}")
            raise PersistenceError("Failed to load flashcards") from e

    def get(self, owner_id: str, flashcard_id: str) -> Flashcard:
        """Get one flashcard owned by the user."""
        flashcard = (
            self.db.query(Flashcard)
            .filter(Flashcard.id == flashcard_id, Flashcard.owner_id == owner_id)
            .first()
        )
        if not flashcard:
            raise FlashcardNotFoundError(flashcard_id)
        return flashcard

    def create(self, owner_id: str, tongan_phrase: str, english_phrase: str) -> Flashcard:
        """Create a flashcard from a lookup result or manual entry."""
        tongan_phrase = (tongan_phrase or "").strip()
        english_phrase = (english_phrase or "").strip()
        if not tongan_phrase or not english_phrase:
            raise ValidationError("Both phrases are required")

        flashcard = Flashcard(
            tongan_phrase=tongan_phrase,
            english_phrase=english_phrase,
            status=STATUS_NONE,
            last_reviewed_at=None,
            owner_id=owner_id,
        )
        self.db.add(flashcard)
        self._commit("to create flashcard")
        self.db.refresh(flashcard)

        monitoring.flashcards_created.inc()
        logger.info(f"Flashcard {flashcard.id} created for {owner_id}")
        return flashcard

    def update(
        self,
        owner_id: str,
        flashcard_id: str,
        tongan_phrase: Optional[str] = None,
        english_phrase: Optional[str] = None,
        status: Optional[str] = None,
    ) -> Flashcard:
        """Update a flashcard's phrases or status."""
        flashcard = self.get(owner_id, flashcard_id)

        if tongan_phrase is not None:
            if not tongan_phrase.strip():
                raise ValidationError("Tongan phrase cannot be empty")
            flashcard.tongan_phrase = tongan_phrase.strip()
        if english_phrase is not None:
            if not english_phrase.strip():
                raise ValidationError("English phrase cannot be empty")
            flashcard.english_phrase = english_phrase.strip()
        if status is not None:
            if status not in CARD_STATUSES:
                raise ValidationError(f"Unknown status: {status}")
            flashcard.status = status

        self._commit("to update flashcard")
        self.db.refresh(flashcard)
        return flashcard

    def rate(self, owner_id: str, flashcard_id: str, status: str) -> datetime:
        """Persist a review rating and return the review timestamp."""
        if status not in RATINGS:
            raise ValidationError(f"Unknown rating: {status}")

        flashcard = self.get(owner_id, flashcard_id)
        reviewed_at = datetime.now(UTC)
        flashcard.status = status
        flashcard.last_reviewed_at = reviewed_at
        self._commit("to update flashcard status")

        monitoring.ratings.labels(status=status).inc()
        return reviewed_at

    def delete(self, owner_id: str, flashcard_ids: Iterable[str]) -> int:
        """Delete one or more flashcards; returns how many were removed."""
        flashcard_ids = list(flashcard_ids)
        if not flashcard_ids:
            return 0

        deleted = (
            self.db.query(Flashcard)
            .filter(Flashcard.id.in_(flashcard_ids), Flashcard.owner_id == owner_id)
            .delete(synchronize_session=False)
        )
        self._commit("to delete flashcards")

        monitoring.flashcards_deleted.inc(deleted)
        logger.info(f"Deleted {deleted} flashcards for {owner_id}")
        return deleted

    def search(self, owner_id: str, query: str) -> List[Flashcard]:
        """Find flashcards whose phrases contain the query, ignoring case and accents."""
        flashcards = self.list_for_owner(owner_id)
        needle = normalize_text(query)
        if not needle:
            return flashcards
        return [
            flashcard
            for flashcard in flashcards
            if needle in normalize_text(flashcard.tongan_phrase)
            or needle in normalize_text(flashcard.english_phrase)
        ]
