"""Service for loading the parallel bibles and building chapter views."""
import json
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from tonganreader.errors import ChapterNotFoundError
from tonganreader.models.bible_models import (
    BOOK_CODES,
    Book,
    ChapterLink,
    ChapterView,
    Verse,
)
from tonganreader.services.verse_aligner import align_chapter, process_verses

logger = logging.getLogger(__name__)


def parse_bible(data: Dict[str, dict]) -> Dict[str, Book]:
    """Build books from the `{CODE: {name, chapters: {num: [verse]}}}` layout."""
    books: Dict[str, Book] = {}
    for code, raw_book in data.items():
        chapters = {
            str(number): [Verse.from_dict(verse) for verse in verses]
            for number, verses in raw_book.get("chapters", {}).items()
        }
        books[code.upper()] = Book(code=code.upper(), name=raw_book.get("name", code), chapters=chapters)
    return books


def load_bible(path: Union[str, Path]) -> Dict[str, Book]:
    """Load a bible JSON file."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    books = parse_bible(data)
    logger.info(f"Loaded {len(books)} books from {path}")
    return books


class BibleLibrary:
    """The reference and target-language bibles, loaded once."""

    def __init__(self, reference: Dict[str, Book], target: Dict[str, Book]):
        """Initialize the library with both translations."""
        self.reference = reference
        self.target = target
        self.book_order: List[str] = [code for code in BOOK_CODES if code in reference]
        # Books outside the canonical list keep their file order at the end
        self.book_order.extend(code for code in reference if code not in BOOK_CODES)

    @classmethod
    def from_files(cls, reference_path: Union[str, Path], target_path: Union[str, Path]) -> "BibleLibrary":
        return cls(load_bible(reference_path), load_bible(target_path))

    def book_name(self, book: str) -> Optional[str]:
        """Display name of a book in the target language, falling back to the reference."""
        code = book.upper()
        if code in self.target:
            return self.target[code].name
        if code in self.reference:
            return self.reference[code].name
        return None

    def chapter_count(self, book: str) -> int:
        reference_book = self.reference.get(book.upper())
        if not reference_book:
            return 0
        numbers = reference_book.chapter_numbers()
        return numbers[-1] if numbers else 0

    def books(self, query: Optional[str] = None) -> List[Dict[str, object]]:
        """Books in reading order with chapter counts, optionally filtered by name."""
        needle = (query or "").strip().lower()
        books = []
        for code in self.book_order:
            name = self.book_name(code)
            reference_name = self.reference[code].name
            if needle and not any(needle in value.lower() for value in (code, name, reference_name)):
                continue
            books.append({"code": code, "name": name, "chapters": self.chapter_count(code)})
        return books

    def has_chapter(self, book: str, chapter: Union[str, int]) -> bool:
        code = book.upper()
        chapter = str(chapter)
        return bool(
            self.reference.get(code) and self.reference[code].chapters.get(chapter)
            and self.target.get(code) and self.target[code].chapters.get(chapter)
        )

    def previous_link(self, book: str, chapter: Union[str, int]) -> Optional[ChapterLink]:
        """Link to the previous chapter, crossing into the previous book's last chapter."""
        code = book.upper()
        previous_chapter = int(chapter) - 1
        if previous_chapter >= 1:
            return ChapterLink(code, str(previous_chapter))

        if code not in self.book_order:
            return None
        index = self.book_order.index(code)
        if index <= 0:
            return None
        previous_book = self.book_order[index - 1]
        last_chapter = self.chapter_count(previous_book)
        if not last_chapter:
            return None
        return ChapterLink(previous_book, str(last_chapter))

    def next_link(self, book: str, chapter: Union[str, int]) -> Optional[ChapterLink]:
        """Link to the next chapter, crossing into the next book's first chapter."""
        code = book.upper()
        next_chapter = str(int(chapter) + 1)
        reference_book = self.reference.get(code)
        if reference_book and next_chapter in reference_book.chapters:
            return ChapterLink(code, next_chapter)

        if code not in self.book_order:
            return None
        index = self.book_order.index(code)
        if index >= len(self.book_order) - 1:
            return None
        return ChapterLink(self.book_order[index + 1], "1")

    def chapter_view(self, book: str, chapter: Union[str, int]) -> ChapterView:
        """Build the aligned, navigable view of one chapter."""
        code = book.upper()
        chapter = str(chapter)
        if not chapter.isdigit():
            raise ChapterNotFoundError(code, chapter)

        reference_book = self.reference.get(code)
        target_book = self.target.get(code)
        reference = process_verses(reference_book.chapters.get(chapter, [])) if reference_book else []
        target = process_verses(target_book.chapters.get(chapter, [])) if target_book else []

        if not reference or not target:
            logger.info(f"Chapter not found: {code} {chapter}")
            raise ChapterNotFoundError(code, chapter)

        return ChapterView(
            book=code,
            chapter=chapter,
            title=f"{target_book.name} {chapter}",
            reference_title=f"{reference_book.name} {chapter}",
            rows=align_chapter(reference, target),
            previous=self.previous_link(code, chapter),
            next=self.next_link(code, chapter),
        )
