"""Tongan dictionary index and word lookup."""
import logging
import threading
from dataclasses import dataclass, asdict
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Union

from tonganreader import monitoring
from tonganreader.config import settings
from tonganreader.errors import ValidationError, WordNotFoundError
from tonganreader.services.translation_service import TranslationService

logger = logging.getLogger(__name__)

APOSTROPHES = ("'", "ʻ")
CANONICAL_APOSTROPHE = "'"

# Columns of the dictionary TSV
WORD_COLUMN = 1
GLOSS_COLUMN = 7


def normalize_apostrophes(word: str) -> str:
    for apostrophe in APOSTROPHES:
        word = word.replace(apostrophe, CANONICAL_APOSTROPHE)
    return word


def strip_apostrophes(word: str) -> str:
    for apostrophe in APOSTROPHES:
        word = word.replace(apostrophe, "")
    return word


@dataclass(frozen=True)
class DictionaryEntry:
    """A headword and its English gloss."""
    tongan: str
    english: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class LookupResult:
    entry: DictionaryEntry
    source: str  # "index" or "translator"


class DictionaryIndex:
    """Read-only word index with exact, normalized and stripped tiers."""

    def __init__(
        self,
        exact: Mapping[str, DictionaryEntry],
        normalized: Mapping[str, DictionaryEntry],
        stripped: Mapping[str, DictionaryEntry],
    ):
        self.exact = MappingProxyType(dict(exact))
        self.normalized = MappingProxyType(dict(normalized))
        self.stripped = MappingProxyType(dict(stripped))

    def __len__(self) -> int:
        return len(self.exact) + len(self.normalized) + len(self.stripped)

    @classmethod
    def empty(cls) -> "DictionaryIndex":
        return cls({}, {}, {})

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "DictionaryIndex":
        """Build the index from TSV lines; the first line is a header."""
        exact: Dict[str, DictionaryEntry] = {}
        normalized: Dict[str, DictionaryEntry] = {}
        stripped: Dict[str, DictionaryEntry] = {}

        for line_number, line in enumerate(lines):
            if line_number == 0:
                continue
            line = line.strip()
            if not line:
                continue

            parts = line.split("\t")
            if len(parts) <= GLOSS_COLUMN:
                continue

            headword = parts[WORD_COLUMN].strip()
            entry = DictionaryEntry(tongan=headword, english=parts[GLOSS_COLUMN].strip())

            # Entries like "he'ene or 'ene" are indexed under each alternative
            for word in headword.lower().split(" or "):
                word = word.strip()
                if not word:
                    continue
                exact[word] = entry

                canonical = normalize_apostrophes(word)
                if canonical != word:
                    normalized[canonical] = entry

                if word.startswith(APOSTROPHES):
                    stripped[word[1:]] = entry
                bare = strip_apostrophes(word)
                if bare != word and bare:
                    stripped[bare] = entry

        return cls(exact, normalized, stripped)

    @classmethod
    def from_tsv(cls, path: Union[str, Path]) -> "DictionaryIndex":
        with open(path, encoding="utf-8") as f:
            index = cls.from_lines(f)
        logger.info(f"Dictionary initialized with {len(index)} entries")
        return index

    def lookup(self, word: str) -> Optional[DictionaryEntry]:
        """Find an entry: exact match first, then normalized, then stripped."""
        word = word.lower().strip()
        canonical = normalize_apostrophes(word)

        candidates = [
            self.exact.get(word),
            self.exact.get(canonical),
            self.normalized.get(canonical),
        ]
        if canonical.startswith(CANONICAL_APOSTROPHE):
            candidates.append(self.exact.get(canonical[1:]))
            candidates.append(self.normalized.get(canonical[1:]))
        candidates.append(self.stripped.get(canonical))

        bare = strip_apostrophes(canonical)
        if bare != canonical:
            candidates.append(self.exact.get(bare))
            candidates.append(self.stripped.get(bare))

        for entry in candidates:
            if entry is not None:
                return entry
        return None


class DictionaryService:
    """Service for looking up target-language words."""

    def __init__(
        self,
        dictionary_path: Optional[Union[str, Path]] = None,
        translator: Optional[TranslationService] = None,
        index: Optional[DictionaryIndex] = None,
    ):
        """Initialize the service; the index is built on first use unless given."""
        self.dictionary_path = dictionary_path or settings.paths.dictionary
        self.translator = translator or TranslationService()
        self._index = index
        self._lock = threading.Lock()

    @property
    def index(self) -> DictionaryIndex:
        if self._index is not None:
            return self._index
        with self._lock:
            if self._index is None:
                try:
                    self._index = DictionaryIndex.from_tsv(self.dictionary_path)
                except (OSError, ValueError) as e:
                    # Not cached, so the next request tries the file again
                    logger.error(f"Error initializing dictionary: {e}")
                    return DictionaryIndex.empty()
        return self._index

    def lookup(self, word: Optional[str]) -> LookupResult:
        """Look a word up in the index, falling back to machine translation."""
        if word is None or not word.strip():
            raise ValidationError("Word parameter is required")
        word = word.lower().strip()

        entry = self.index.lookup(word)
        if entry is not None:
            monitoring.dictionary_lookups.labels(source="index").inc()
            return LookupResult(entry=entry, source="index")

        translation = self.translator.translate(word)
        if translation:
            monitoring.dictionary_lookups.labels(source="translator").inc()
            return LookupResult(entry=DictionaryEntry(tongan=word, english=translation), source="translator")

        monitoring.dictionary_lookups.labels(source="miss").inc()
        logger.info(f"Word not found: {word}")
        raise WordNotFoundError(word)
