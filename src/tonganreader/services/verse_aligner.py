"""Continuation merging and cross-translation verse alignment."""
import logging
import re
from typing import Dict, Iterable, List, Optional, Set, Tuple

from tonganreader.models.bible_models import (
    CONTINUATION_MARKER,
    AlignedVerseRow,
    ProcessedVerse,
    Token,
    Verse,
)

logger = logging.getLogger(__name__)

# Apostrophes (' and the glottal stop ʻ) are part of Tongan spelling and stay
_PUNCTUATION = re.compile(r'[.,!?;:"“”]')


def process_verses(verses: Iterable[Verse]) -> List[ProcessedVerse]:
    """Merge continuation entries into the verse they continue."""
    processed: List[ProcessedVerse] = []
    current: Optional[ProcessedVerse] = None

    for index, verse in enumerate(verses):
        if verse.number == CONTINUATION_MARKER:
            if current is not None:
                current.text = f"{current.text} {verse.text}"
            else:
                logger.debug(f"Dropping continuation with no verse to attach to: {verse.text!r}")
            continue

        if current is not None:
            processed.append(current)
        current = ProcessedVerse(number=verse.number, text=verse.text, key=f"verse-{index}")

    if current is not None:
        processed.append(current)

    return processed


def parse_range(number: str) -> Optional[Tuple[int, int]]:
    """Parse a "start-end" verse number, or None if it is not a range."""
    if "-" not in number:
        return None
    start, _, end = number.partition("-")
    try:
        return int(start), int(end)
    except ValueError:
        return None


def verse_number(number: str) -> Optional[int]:
    try:
        return int(number)
    except ValueError:
        return None


class _RangeTable:
    """Target-language range entries ordered by (start, position)."""

    def __init__(self, target: List[ProcessedVerse]):
        self.entries: List[Tuple[int, int, int, ProcessedVerse]] = []
        for position, verse in enumerate(target):
            parsed = parse_range(verse.number)
            if parsed:
                self.entries.append((parsed[0], parsed[1], position, verse))
        self.entries.sort(key=lambda entry: (entry[0], entry[2]))

    def covering(self, number: int) -> Optional[Tuple[int, int, int, ProcessedVerse]]:
        # Overlapping ranges: the lowest start wins, then the earliest entry
        for entry in self.entries:
            start, end = entry[0], entry[1]
            if start <= number <= end:
                return entry
        return None


def find_range(target: List[ProcessedVerse], number: int) -> Optional[ProcessedVerse]:
    """Find the target-language range entry that covers a reference verse."""
    entry = _RangeTable(target).covering(number)
    return entry[3] if entry else None


def clean_word(word: str) -> str:
    """Strip punctuation from a token for dictionary lookup."""
    return _PUNCTUATION.sub("", word).strip()


def tokenize(text: str) -> List[Token]:
    """Split target-language text on single spaces into clickable tokens."""
    if not text:
        return []
    return [Token(text=word, lookup=clean_word(word)) for word in text.split(" ")]


def align_chapter(
    reference: List[ProcessedVerse], target: List[ProcessedVerse]
) -> List[AlignedVerseRow]:
    """Pair each reference verse with its target verse or merged range.

    A range is rendered once, on the row of the first reference verse it
    covers; later reference verses inside the same range produce no row.
    """
    ranges = _RangeTable(target)
    reference_by_number: Dict[int, ProcessedVerse] = {}
    for verse in reference:
        number = verse_number(verse.number)
        if number is not None:
            reference_by_number.setdefault(number, verse)

    target_by_number: Dict[str, ProcessedVerse] = {}
    for verse in target:
        target_by_number.setdefault(verse.number, verse)

    rows: List[AlignedVerseRow] = []
    emitted: Set[int] = set()

    for verse in reference:
        number = verse_number(verse.number)
        entry = ranges.covering(number) if number is not None else None

        if entry is not None:
            start, end, position, range_verse = entry
            if position in emitted:
                continue
            emitted.add(position)
            combined = [
                reference_by_number[i]
                for i in range(start, end + 1)
                if i in reference_by_number
            ]
            rows.append(
                AlignedVerseRow(
                    reference_verses=combined,
                    target_number=range_verse.number,
                    target_text=range_verse.text,
                    tokens=tokenize(range_verse.text),
                )
            )
            continue

        target_verse = target_by_number.get(verse.number)
        target_text = target_verse.text if target_verse else ""
        rows.append(
            AlignedVerseRow(
                reference_verses=[verse],
                target_number=target_verse.number if target_verse else verse.number,
                target_text=target_text,
                tokens=tokenize(target_text),
            )
        )

    return rows
