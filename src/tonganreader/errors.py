"""Error types raised by the reader services."""


class TonganReaderError(Exception):
    """Base class for errors that map onto a user-visible response."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(TonganReaderError):
    status_code = 404


class ChapterNotFoundError(NotFoundError):
    def __init__(self, book: str, chapter: str):
        super().__init__("Chapter not found")
        self.book = book
        self.chapter = chapter


class WordNotFoundError(NotFoundError):
    def __init__(self, word: str):
        super().__init__("Word not found")
        self.word = word


class FlashcardNotFoundError(NotFoundError):
    def __init__(self, flashcard_id: str):
        super().__init__(f"Flashcard {flashcard_id} not found")
        self.flashcard_id = flashcard_id


class ValidationError(TonganReaderError):
    status_code = 400


class PersistenceError(TonganReaderError):
    """The datastore rejected or failed a call. Not retried automatically."""


class ConfigurationError(TonganReaderError):
    """A collaborator is unusable because its configuration is missing."""


class WebhookVerificationFailed(TonganReaderError):
    status_code = 400
