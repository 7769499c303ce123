"""Flashcard study session routes."""
import logging
from typing import Tuple

from flask import Blueprint, jsonify, request, session
from flask_login import current_user, login_required

from tonganreader.config import settings
from tonganreader.errors import ValidationError
from tonganreader.models.study_models import StudyCard, StudySessionData
from tonganreader.services.flashcard_service import FlashcardService
from tonganreader.services.study_service import StudySession
from tonganreader.web.context import get_session

logger = logging.getLogger(__name__)

bp = Blueprint("study", __name__, url_prefix="/study")

STUDY_KEY = "study"


def _load() -> Tuple[StudySession, FlashcardService]:
    data = StudySessionData.from_dict(session.get(STUDY_KEY), settings.study.default_sort)
    study = StudySession(data)
    service = FlashcardService(get_session())
    study.load(StudyCard.from_flashcard(card) for card in service.list_for_owner(current_user.clerk_id))
    return study, service


def _persister(service: FlashcardService):
    owner_id = current_user.clerk_id
    return lambda card_id, status: service.rate(owner_id, card_id, status)


def _respond(study: StudySession, **extra):
    session[STUDY_KEY] = study.data.to_dict()
    view = study.to_view()
    view.update(extra)
    return jsonify(view)


@bp.before_request
@login_required
def require_login():
    pass


@bp.get("")
def show():
    study, _ = _load()
    return _respond(study)


@bp.post("/next")
def next_card():
    study, _ = _load()
    study.next()
    return _respond(study)


@bp.post("/previous")
def previous_card():
    study, _ = _load()
    study.previous()
    return _respond(study)


@bp.post("/toggle-answer")
def toggle_answer():
    study, _ = _load()
    study.toggle_answer()
    return _respond(study)


@bp.post("/rate")
def rate():
    """Rate the current card; the session only advances once the rating is saved."""
    payload = request.get_json(silent=True) or {}
    study, service = _load()
    study.rate(payload.get("status"), _persister(service))
    return _respond(study)


@bp.post("/key")
def key():
    payload = request.get_json(silent=True) or {}
    study, service = _load()
    result = study.handle_key(payload.get("key", ""), _persister(service))
    return _respond(
        study,
        action=result.action.value if result.action else None,
        prevent_default=result.prevent_default,
    )


@bp.post("/settings")
def update_settings():
    payload = request.get_json(silent=True) or {}
    study, _ = _load()
    if "sort_by" in payload:
        study.set_sort(payload["sort_by"])
    if "swap_qa" in payload:
        if not isinstance(payload["swap_qa"], bool):
            raise ValidationError("swap_qa must be true or false")
        study.set_swap(payload["swap_qa"])
    return _respond(study)


@bp.post("/filter")
def toggle_filter():
    payload = request.get_json(silent=True) or {}
    study, _ = _load()
    study.toggle_status(payload.get("status"))
    return _respond(study)
