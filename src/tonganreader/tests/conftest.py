"""Test configuration."""
import json
import os
from datetime import datetime, timedelta, UTC
from pathlib import Path
from typing import Generator

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parent.parent.parent.parent / ".env.test"
load_dotenv(test_env_path)

# Import after environment setup
import jwt
from sqlalchemy.orm import Session

from tonganreader.config import TranslatorSettings, ensure_directories, settings
from tonganreader.models.base import Base, SessionLocal, engine, init_db
from tonganreader.models.models import User
from tonganreader.services.bible_service import BibleLibrary, parse_bible
from tonganreader.services.dictionary_service import DictionaryService
from tonganreader.services.translation_service import TranslationService

fake = Faker()

REFERENCE_BIBLE = {
    "GEN": {
        "name": "Genesis",
        "chapters": {
            "1": [
                {"number": "1", "text": "In the beginning, God created the heavens and the earth."},
                {"number": "2", "text": "The earth was without form and void,"},
                {"number": "3", "text": "And God said, \"Let there be light,\""},
                {"number": "4", "text": "And God saw that the light was good."},
                {"number": "5", "text": "God called the light Day."},
            ],
            "2": [
                {"number": "1", "text": "Thus the heavens and the earth were finished."},
            ],
        },
    },
    "EXO": {
        "name": "Exodus",
        "chapters": {
            "1": [
                {"number": "1", "text": "These are the names of the sons of Israel."},
            ],
        },
    },
}

TARGET_BIBLE = {
    "GEN": {
        "name": "Senesi",
        "chapters": {
            "1": [
                {"number": "1", "text": "Naʻe fakatupu ʻe he ʻOtua ʻa e langi mo e maama."},
                {"number": "2-4", "text": "Pea naʻe ʻikai ha fōtunga ʻo e maama,"},
                {"number": "#", "text": "pea naʻe lea ʻa e ʻOtua."},
                {"number": "5", "text": "Pea ui ʻe he ʻOtua ʻa e maama ko e ʻAho."},
            ],
            "2": [
                {"number": "1", "text": "Pea naʻe fakaʻosi ai ʻa e langi mo e maama."},
            ],
        },
    },
    "EXO": {
        "name": "Ekisoto",
        "chapters": {
            "1": [
                {"number": "1", "text": "Ko e ngaahi hingoa eni ʻo e fānau ʻa ʻIsileli."},
            ],
        },
    },
}

DICTIONARY_LINES = [
    "id\tword\tpos\tsource\tnotes\tsee\tvariant\tgloss",
    "1\the'ene\tpron\t\t\t\t\this, her",
    "2\tfale\tn\t\t\t\t\thouse",
    "3\tʻOtua\tn\t\t\t\t\tGod",
    "4\tpea or bea\tconj\t\t\t\t\tand",
    "5\tshort\trow",
]


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Set up test environment before each test."""
    # Ensure test directories exist
    ensure_directories()
    yield


@pytest.fixture
def setup_database():
    """Drop and recreate all tables."""
    engine.dispose()
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield
    engine.dispose()


@pytest.fixture
def db(setup_database) -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def test_user(db: Session) -> User:
    """Create a test user."""
    user = User(
        clerk_id=f"user_{fake.uuid4()}",
        email=fake.email(),
        first_name=fake.first_name(),
        last_name=fake.last_name(),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def library() -> BibleLibrary:
    return BibleLibrary(parse_bible(REFERENCE_BIBLE), parse_bible(TARGET_BIBLE))


@pytest.fixture
def bible_files(tmp_path: Path):
    """Write both bibles to JSON files."""
    reference_path = tmp_path / "reference.json"
    target_path = tmp_path / "target.json"
    reference_path.write_text(json.dumps(REFERENCE_BIBLE), encoding="utf-8")
    target_path.write_text(json.dumps(TARGET_BIBLE, ensure_ascii=False), encoding="utf-8")
    return reference_path, target_path


@pytest.fixture
def dictionary_file(tmp_path: Path) -> Path:
    path = tmp_path / "dictionary.tsv"
    path.write_text("\n".join(DICTIONARY_LINES) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def offline_translator() -> TranslationService:
    return TranslationService(TranslatorSettings(provider="none"))


@pytest.fixture
def dictionary(dictionary_file: Path, offline_translator: TranslationService) -> DictionaryService:
    return DictionaryService(dictionary_path=dictionary_file, translator=offline_translator)


@pytest.fixture
def app(setup_database, library: BibleLibrary, dictionary: DictionaryService):
    from tonganreader.app import create_app

    return create_app(library=library, dictionary=dictionary, config={"TESTING": True})


@pytest.fixture
def client(app):
    return app.test_client()


def make_token(clerk_id: str, **claims) -> str:
    """Sign a session token the way the identity provider would."""
    payload = {
        "sub": clerk_id,
        "exp": datetime.now(UTC) + timedelta(hours=1),
        **claims,
    }
    algorithm = settings.auth.jwt_algorithms[0]
    return jwt.encode(payload, settings.auth.jwt_key, algorithm=algorithm)


@pytest.fixture
def clerk_id() -> str:
    return f"user_{fake.uuid4()}"


@pytest.fixture
def auth_headers(clerk_id: str) -> dict:
    return {"Authorization": f"Bearer {make_token(clerk_id, email=fake.email())}"}


@pytest.fixture
def token_factory():
    return make_token
