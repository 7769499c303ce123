"""Models for bible text and aligned chapter views."""
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

# Canonical book order used for chapter navigation
BOOK_CODES = [
    "GEN", "EXO", "LEV", "NUM", "DEU", "JOS", "JDG", "RUT", "1SA", "2SA",
    "1KI", "2KI", "1CH", "2CH", "EZR", "NEH", "EST", "JOB", "PSA", "PRO",
    "ECC", "SNG", "ISA", "JER", "LAM", "EZK", "DAN", "HOS", "JOL", "AMO",
    "OBA", "JON", "MIC", "NAM", "HAB", "ZEP", "HAG", "ZEC", "MAL",
    "MAT", "MRK", "LUK", "JHN", "ACT", "ROM", "1CO", "2CO", "GAL", "EPH",
    "PHP", "COL", "1TH", "2TH", "1TI", "2TI", "TIT", "PHM", "HEB", "JAS",
    "1PE", "2PE", "1JN", "2JN", "3JN", "JUD", "REV",
]

CONTINUATION_MARKER = "#"


@dataclass
class Verse:
    """A raw verse as stored in a bible file."""
    number: str  # "12", "#" (continuation) or "2-4" (merged range)
    text: str

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "Verse":
        return cls(number=str(data["number"]), text=data.get("text", ""))


@dataclass
class ProcessedVerse:
    """A verse with its continuation lines merged in."""
    number: str
    text: str
    key: str  # render identity only


@dataclass
class Book:
    """One book of a translation."""
    code: str
    name: str
    chapters: Dict[str, List[Verse]] = field(default_factory=dict)

    def chapter_numbers(self) -> List[int]:
        """Chapter numbers in ascending order."""
        return sorted(int(number) for number in self.chapters if number.isdigit())


@dataclass
class Token:
    """A clickable word of target-language text."""
    text: str
    lookup: str  # punctuation-stripped form sent to the dictionary


@dataclass
class AlignedVerseRow:
    """One rendered row: reference verse(s) next to a target verse or range."""
    reference_verses: List[ProcessedVerse]
    target_number: str
    target_text: str
    tokens: List[Token]

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ChapterLink:
    book: str
    chapter: str

    @property
    def path(self) -> str:
        return f"/bible/{self.book.lower()}/{self.chapter}"


@dataclass
class ChapterView:
    """Everything needed to render one chapter page."""
    book: str
    chapter: str
    title: str
    reference_title: str
    rows: List[AlignedVerseRow]
    previous: Optional[ChapterLink] = None
    next: Optional[ChapterLink] = None

    def to_dict(self) -> dict:
        return {
            "book": self.book,
            "chapter": self.chapter,
            "title": self.title,
            "reference_title": self.reference_title,
            "rows": [row.to_dict() for row in self.rows],
            "previous": self.previous.path if self.previous else None,
            "next": self.next.path if self.next else None,
        }
