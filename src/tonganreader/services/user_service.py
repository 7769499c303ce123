"""User service for managing user records and reading progress."""
from datetime import datetime, UTC
from typing import Any, Dict, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from tonganreader import monitoring
from tonganreader.errors import NotFoundError, PersistenceError, ValidationError
from tonganreader.models.models import User, UserLog

# Configure logging
logger = logging.getLogger(__name__)


class UserService:
    """Service for managing users keyed by their identity provider id."""

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

    def get_user_by_clerk_id(self, clerk_id: str) -> Optional[User]:
        """Get user by identity provider id."""
        return self.db.query(User).filter(User.clerk_id == clerk_id).first()

    def get_or_create_user(self, clerk_id: str, email: Optional[str] = None) -> User:
        """Get a user, creating a bare record the first time an identity is seen."""
        user = self.get_user_by_clerk_id(clerk_id)
        if user:
            return user

        user = User(clerk_id=clerk_id, email=email)
        self.db.add(user)
        self._commit("to create user")
        self.db.refresh(user)
        logger.info(f"Created user {clerk_id}")
        return user

    def upsert_user(self, data: Dict[str, Any]) -> User:
        """Create or update a user from an identity provider payload."""
        clerk_id = data.get("id")
        if not clerk_id:
            raise ValidationError("User payload has no id")

        emails = data.get("email_addresses") or []
        email = emails[0].get("email_address") if emails else data.get("email")

        user = self.get_user_by_clerk_id(clerk_id)
        if not user:
            user = User(clerk_id=clerk_id)
            self.db.add(user)

        user.email = email
        user.first_name = data.get("first_name")
        user.last_name = data.get("last_name")
        user.avatar_url = data.get("profile_image_url") or data.get("image_url")
        user.updated_at = datetime.now(UTC)

        self._commit("to sync user")
        self.db.refresh(user)
        logger.info(f"User {clerk_id} synced")
        return user

    def delete_user(self, clerk_id: str) -> bool:
        """Delete a user and, by cascade, their flashcards."""
        user = self.get_user_by_clerk_id(clerk_id)
        if not user:
            return False

        self.db.delete(user)
        self._commit("to delete user")
        logger.info(f"User {clerk_id} deleted")
        return True

    def update_progress(self, clerk_id: str, book: str, chapter: int) -> User:
        """Store the user's current reading position."""
        user = self.get_user_by_clerk_id(clerk_id)
        if not user:
            raise NotFoundError(f"User {clerk_id} not found")

        user.current_book = book.upper()
        user.current_chapter = chapter
        self._commit("to save reading progress")
        self.db.refresh(user)
        return user

    def update_vocab_goal(self, clerk_id: str, vocab_goal: int) -> User:
        """Set the user's daily vocabulary goal."""
        if vocab_goal < 0:
            raise ValidationError("Vocab goal must not be negative")

        user = self.get_user_by_clerk_id(clerk_id)
        if not user:
            raise NotFoundError(f"User {clerk_id} not found")

        user.vocab_goal = vocab_goal
        self._commit("to update vocab goal")
        self.db.refresh(user)

        self.log_user_activity(user.id, f"Vocab goal set to {vocab_goal}", "INFO", "settings_updated")
        return user

    def log_user_activity(
        self, user_id: int, message: str, level: str, category: str
    ) -> None:
        """Log user activity."""
        log = UserLog(
            user_id=user_id,
            message=message,
            level=level,
            category=category,
        )
        self.db.add(log)
        self._commit("to log user activity")
