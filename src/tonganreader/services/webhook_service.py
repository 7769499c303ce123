"""Identity provider webhook handling."""
import json
import logging
from typing import Any, Dict, Mapping, Optional, Union

from sqlalchemy.orm import Session
from svix.webhooks import Webhook, WebhookVerificationError

from tonganreader import monitoring
from tonganreader.config import settings
from tonganreader.errors import ConfigurationError, ValidationError, WebhookVerificationFailed
from tonganreader.services.user_service import UserService

logger = logging.getLogger(__name__)

SIGNATURE_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")


class WebhookService:
    """Verify identity events and keep the users table in sync."""

    def __init__(self, db: Session, secret: Optional[str] = None):
        self.db = db
        self.secret = secret if secret is not None else settings.auth.webhook_secret
        self.user_service = UserService(db)

    def verify(self, payload: Union[str, bytes], headers: Mapping[str, str]) -> Dict[str, Any]:
        """Check the payload signature and return the decoded event."""
        if not self.secret:
            logger.error("Missing webhook secret")
            raise ConfigurationError("Missing webhook secret")

        signature_headers = {name: headers.get(name) for name in SIGNATURE_HEADERS}
        if not all(signature_headers.values()):
            raise WebhookVerificationFailed("Missing svix headers")

        try:
            Webhook(self.secret).verify(payload, signature_headers)
        except WebhookVerificationError as e:
            logger.warning(f"Webhook signature rejected: {e}")
            raise WebhookVerificationFailed("Invalid webhook signature") from e

        try:
            event = json.loads(payload)
        except ValueError as e:
            raise ValidationError("Webhook payload is not valid JSON") from e
        if not isinstance(event, dict):
            raise ValidationError("Webhook payload must be a JSON object")
        return event

    def handle(self, payload: Union[str, bytes], headers: Mapping[str, str]) -> str:
        """Verify and apply one event; returns the event type."""
        event = self.verify(payload, headers)
        event_type = event.get("type")
        data = event.get("data") or {}
        monitoring.webhook_events.labels(event_type=event_type or "unknown").inc()

        if event_type in ("user.created", "user.updated"):
            self.user_service.upsert_user(data)
        elif event_type == "user.deleted":
            if not data.get("id"):
                raise ValidationError("User payload has no id")
            self.user_service.delete_user(data["id"])
        else:
            logger.info(f"Ignoring webhook event {event_type}")

        return event_type
