"""Identity provider webhook route."""
import logging

from flask import Blueprint, jsonify, request

from tonganreader.services.webhook_service import WebhookService
from tonganreader.web.context import get_session

logger = logging.getLogger(__name__)

bp = Blueprint("webhooks", __name__, url_prefix="/webhooks")


@bp.post("/identity")
def identity_webhook():
    event_type = WebhookService(get_session()).handle(request.get_data(), request.headers)
    logger.info(f"Processed webhook {event_type}")
    return jsonify({"success": True, "type": event_type})
