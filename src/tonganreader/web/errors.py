"""Convert errors into JSON responses."""
import logging

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from tonganreader import monitoring
from tonganreader.errors import TonganReaderError

logger = logging.getLogger(__name__)


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(TonganReaderError)
    def handle_reader_error(e: TonganReaderError):
        if e.status_code >= 500:
            logger.error(f"{type(e).__name__}: {e.message}")
            monitoring.error_count.labels(error_type=type(e).__name__).inc()
        return jsonify({"error": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.exception(f"Unhandled error: {e}")
        monitoring.error_count.labels(error_type=type(e).__name__).inc()
        return jsonify({"error": "Internal server error"}), 500
