"""Per-request access to the database session and shared services."""
from flask import current_app, g
from sqlalchemy.orm import Session

from tonganreader.models.base import SessionLocal
from tonganreader.services.bible_service import BibleLibrary
from tonganreader.services.dictionary_service import DictionaryService

LIBRARY_KEY = "tonganreader.library"
DICTIONARY_KEY = "tonganreader.dictionary"


def get_session() -> Session:
    """Database session for the current request, opened on first use."""
    if "db" not in g:
        g.db = SessionLocal()
    return g.db


def close_session(exception=None) -> None:
    db = g.pop("db", None)
    if db is not None:
        if exception is not None:
            db.rollback()
        db.close()


def get_library() -> BibleLibrary:
    return current_app.extensions[LIBRARY_KEY]


def get_dictionary() -> DictionaryService:
    return current_app.extensions[DICTIONARY_KEY]
