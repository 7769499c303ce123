"""Base model configuration."""
from datetime import UTC, datetime

from sqlalchemy import Column, DateTime, create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker

from tonganreader.config import settings

# Create SQLAlchemy engine
engine = create_engine(settings.database.url, echo=settings.database.echo)


# SQLite only enforces ON DELETE CASCADE with foreign keys switched on
@event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key enforcement on SQLite connections."""
    if engine.dialect.name != "sqlite":
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Create declarative base class
Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(UTC)


class TimestampMixin:
    """Mixin to add timestamp columns to models."""
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


def init_db() -> None:
    """Initialize database."""
    Base.metadata.create_all(bind=engine)  # Create tables if they don't exist
