"""Monitoring configuration for the reader."""
from prometheus_client import Counter, Histogram, start_http_server

# Dictionary metrics
dictionary_lookups = Counter(
    "tonganreader_dictionary_lookups_total",
    "Total number of dictionary lookups",
    ["source"],  # index, translator, miss
)

# Flashcard metrics
flashcards_created = Counter(
    "tonganreader_flashcards_created_total",
    "Total number of flashcards created",
)

flashcards_deleted = Counter(
    "tonganreader_flashcards_deleted_total",
    "Total number of flashcards deleted",
)

ratings = Counter(
    "tonganreader_ratings_total",
    "Total number of flashcard ratings",
    ["status"],
)

# Identity metrics
webhook_events = Counter(
    "tonganreader_webhook_events_total",
    "Total number of identity webhook events processed",
    ["event_type"],
)

# Error metrics
error_count = Counter(
    "tonganreader_errors_total",
    "Total number of errors encountered",
    ["error_type"],
)

db_errors = Counter(
    "tonganreader_db_errors_total",
    "Total number of database errors",
    ["error_type"],
)

# Performance metrics
request_duration = Histogram(
    "tonganreader_request_duration_seconds",
    "Duration of web requests in seconds",
    ["endpoint"],
    buckets=[0.05, 0.1, 0.5, 1.0, 2.0, 5.0],
)


def start_monitoring(port: int = 9090) -> None:
    """Start the Prometheus metrics server."""
    start_http_server(port)
