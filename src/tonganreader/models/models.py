"""Database models for the reader."""
import uuid

from flask_login import UserMixin
from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.orm import relationship

from tonganreader.models.base import Base, TimestampMixin

STATUS_NONE = "none"
STATUS_BAD = "bad"
STATUS_OK = "ok"
STATUS_GOOD = "good"

CARD_STATUSES = (STATUS_GOOD, STATUS_OK, STATUS_BAD, STATUS_NONE)
RATINGS = (STATUS_BAD, STATUS_OK, STATUS_GOOD)


def new_flashcard_id() -> str:
    return str(uuid.uuid4())


class User(Base, TimestampMixin, UserMixin):
    """User model, keyed by the identity provider's user id."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    clerk_id = Column(String, unique=True, nullable=False, index=True)
    email = Column(String, nullable=True)
    first_name = Column(String, nullable=True)
    last_name = Column(String, nullable=True)
    avatar_url = Column(String, nullable=True)
    current_book = Column(String, nullable=True)  # book code, e.g. "GEN"
    current_chapter = Column(Integer, nullable=True)
    vocab_goal = Column(Integer, default=0, nullable=False)

    # Relationships
    flashcards = relationship(
        "Flashcard",
        back_populates="owner",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    logs = relationship(
        "UserLog",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def get_id(self) -> str:
        return self.clerk_id


class Flashcard(Base, TimestampMixin):
    """A phrase pair owned by one user."""

    __tablename__ = "flashcards"
    __table_args__ = (
        CheckConstraint(
            "status IN ('none', 'bad', 'ok', 'good')",
            name="ck_flashcards_status",
        ),
    )

    id = Column(String(36), primary_key=True, default=new_flashcard_id)
    tongan_phrase = Column(String, nullable=False)
    english_phrase = Column(String, nullable=False)
    status = Column(String, nullable=False, default=STATUS_NONE)
    last_reviewed_at = Column(DateTime(timezone=True), nullable=True)
    owner_id = Column(
        String,
        ForeignKey("users.clerk_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Relationships
    owner = relationship("User", back_populates="flashcards")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "tongan_phrase": self.tongan_phrase,
            "english_phrase": self.english_phrase,
            "status": self.status,
            "last_reviewed_at": self.last_reviewed_at.isoformat() if self.last_reviewed_at else None,
            "owner_id": self.owner_id,
        }


class UserLog(Base, TimestampMixin):
    """User activity log model."""

    __tablename__ = "user_logs"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    message = Column(String, nullable=False)
    level = Column(String, nullable=False)  # INFO, WARNING, ERROR
    category = Column(String, nullable=False)  # e.g., "flashcards", "study"

    # Relationships
    user = relationship("User", back_populates="logs")
