"""Tests for the dictionary index and lookup service."""
import pytest

from tonganreader.config import TranslatorSettings
from tonganreader.errors import ValidationError, WordNotFoundError
from tonganreader.services.dictionary_service import DictionaryIndex, DictionaryService
from tonganreader.services.translation_service import TranslationService

from conftest import DICTIONARY_LINES


@pytest.fixture
def index() -> DictionaryIndex:
    return DictionaryIndex.from_lines(DICTIONARY_LINES)


@pytest.mark.parametrize("word", ["he'ene", "heʻene", "heene", "HE'ENE"])
def test_apostrophe_variants_resolve_to_one_entry(index, word):
    entry = index.lookup(word)

    assert entry is not None
    assert entry.tongan == "he'ene"
    assert entry.english == "his, her"


def test_glottal_stop_headword_found_with_straight_apostrophe(index):
    assert index.lookup("'otua").english == "God"
    assert index.lookup("ʻotua").english == "God"
    assert index.lookup("otua").english == "God"


def test_or_alternatives_are_indexed_separately(index):
    assert index.lookup("pea").english == "and"
    assert index.lookup("bea").english == "and"
    assert index.lookup("pea or bea") is None


def test_header_and_short_rows_are_skipped(index):
    assert index.lookup("word") is None
    assert index.lookup("short") is None


def test_exact_match_wins_over_stripped_variant():
    lines = [
        "header",
        "1\tfaka'ofa\tv\t\t\t\t\tpitiful",
        "2\tfakaofa\tv\t\t\t\t\tto imitate",
    ]
    index = DictionaryIndex.from_lines(lines)

    assert index.lookup("fakaofa").english == "to imitate"
    assert index.lookup("faka'ofa").english == "pitiful"


def test_lookup_from_file(dictionary):
    result = dictionary.lookup("  Fale ")

    assert result.source == "index"
    assert result.entry.to_dict() == {"tongan": "fale", "english": "house"}


def test_index_is_built_once(dictionary, mocker):
    spy = mocker.spy(DictionaryIndex, "from_tsv")

    dictionary.lookup("fale")
    dictionary.lookup("pea")

    assert spy.call_count == 1


@pytest.mark.parametrize("word", [None, "", "   "])
def test_blank_word_is_rejected(dictionary, word):
    with pytest.raises(ValidationError, match="Word parameter is required"):
        dictionary.lookup(word)


def test_unknown_word_not_found(dictionary):
    with pytest.raises(WordNotFoundError, match="Word not found"):
        dictionary.lookup("kumala")


def test_translator_fallback(dictionary_file, mocker):
    translator = TranslationService(TranslatorSettings(provider="google"))
    mocker.patch.object(translator, "_build_translator").return_value.translate.return_value = "sweet potato"
    service = DictionaryService(dictionary_path=dictionary_file, translator=translator)

    result = service.lookup("kumala")

    assert result.source == "translator"
    assert result.entry.tongan == "kumala"
    assert result.entry.english == "sweet potato"


def test_translator_failure_is_not_found(dictionary_file, mocker):
    translator = TranslationService(TranslatorSettings(provider="google"))
    mocker.patch.object(translator, "_build_translator").return_value.translate.side_effect = RuntimeError("quota")
    service = DictionaryService(dictionary_path=dictionary_file, translator=translator)

    with pytest.raises(WordNotFoundError):
        service.lookup("kumala")


def test_undecodable_file_falls_back_to_empty_index(tmp_path, offline_translator):
    path = tmp_path / "broken.tsv"
    path.write_bytes(b"header\n1\tfale\tn\t\t\t\t\t\xff\xfe\n")
    service = DictionaryService(dictionary_path=path, translator=offline_translator)

    with pytest.raises(WordNotFoundError):
        service.lookup("fale")

    path.write_text("header\n1\tfale\tn\t\t\t\t\thouse\n", encoding="utf-8")
    assert service.lookup("fale").entry.english == "house"


def test_missing_file_is_retried(tmp_path, offline_translator):
    path = tmp_path / "later.tsv"
    service = DictionaryService(dictionary_path=path, translator=offline_translator)

    with pytest.raises(WordNotFoundError):
        service.lookup("fale")

    path.write_text("header\n1\tfale\tn\t\t\t\t\thouse\n", encoding="utf-8")
    assert service.lookup("fale").entry.english == "house"


if __name__ == "__main__":
    pytest.main([__file__])
