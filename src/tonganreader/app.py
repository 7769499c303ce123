"""Flask application factory."""
import logging
import time
from typing import Optional

from flask import Flask, g, request

from tonganreader import monitoring
from tonganreader.config import settings
from tonganreader.services.bible_service import BibleLibrary
from tonganreader.services.dictionary_service import DictionaryService
from tonganreader.web import dashboard, flashcards, reader, study, webhooks
from tonganreader.web.auth import login_manager
from tonganreader.web.context import DICTIONARY_KEY, LIBRARY_KEY, close_session
from tonganreader.web.errors import register_error_handlers

logger = logging.getLogger(__name__)


def create_app(
    library: Optional[BibleLibrary] = None,
    dictionary: Optional[DictionaryService] = None,
    config: Optional[dict] = None,
) -> Flask:
    """Create the application.

    Args:
        library: Loaded bibles. If None, both bible files are read from the configured paths.
        dictionary: Dictionary service. If None, one is built for the configured TSV file.
        config: Extra Flask configuration.
    """
    app = Flask(__name__)
    app.config["SECRET_KEY"] = settings.web.secret_key
    if config:
        app.config.update(config)

    if library is None:
        library = BibleLibrary.from_files(settings.paths.reference_bible, settings.paths.target_bible)
    app.extensions[LIBRARY_KEY] = library
    app.extensions[DICTIONARY_KEY] = dictionary or DictionaryService()

    login_manager.init_app(app)
    app.teardown_appcontext(close_session)
    register_error_handlers(app)

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def record_duration(response):
        started = g.pop("request_started", None)
        if started is not None:
            monitoring.request_duration.labels(endpoint=request.endpoint or "unknown").observe(
                time.perf_counter() - started
            )
        return response

    for blueprint in (reader.bp, study.bp, flashcards.bp, webhooks.bp, dashboard.bp):
        app.register_blueprint(blueprint)

    logger.info(f"Application created with {len(library.book_order)} books")
    return app
