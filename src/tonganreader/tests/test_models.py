"""Tests for database models."""
import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tonganreader.models.models import Flashcard, User


def test_flashcard_defaults(db: Session, test_user: User) -> None:
    card = Flashcard(tongan_phrase="fale", english_phrase="house", owner_id=test_user.clerk_id)
    db.add(card)
    db.commit()

    data = card.to_dict()
    assert len(data["id"]) == 36
    assert data["status"] == "none"
    assert data["last_reviewed_at"] is None
    assert data["created_at"] is not None
    assert data["owner_id"] == test_user.clerk_id


def test_flashcard_status_is_constrained(db: Session, test_user: User) -> None:
    db.add(Flashcard(tongan_phrase="fale", english_phrase="house", owner_id=test_user.clerk_id, status="great"))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_flashcard_requires_existing_owner(db: Session) -> None:
    db.add(Flashcard(tongan_phrase="fale", english_phrase="house", owner_id="user_missing"))

    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_user_id_is_identity_provider_id(test_user: User) -> None:
    assert test_user.get_id() == test_user.clerk_id
    assert test_user.is_authenticated
