"""Flashcard management routes."""
import logging

from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from tonganreader.errors import FlashcardNotFoundError, ValidationError
from tonganreader.services.flashcard_service import FlashcardService
from tonganreader.services.panel_service import FlashcardEditor
from tonganreader.web.context import get_session

logger = logging.getLogger(__name__)

bp = Blueprint("flashcards", __name__)


@bp.get("/edit")
@login_required
def edit_page():
    query = request.args.get("q", "")
    flashcards = FlashcardService(get_session()).search(current_user.clerk_id, query)
    return jsonify({"query": query, "flashcards": [card.to_dict() for card in flashcards]})


@bp.post("/flashcards")
@login_required
def create_flashcard():
    payload = request.get_json(silent=True) or {}
    flashcard = FlashcardService(get_session()).create(
        current_user.clerk_id,
        payload.get("tongan_phrase", ""),
        payload.get("english_phrase", ""),
    )
    return jsonify(flashcard.to_dict()), 201


@bp.patch("/flashcards/<flashcard_id>")
@login_required
def update_flashcard(flashcard_id: str):
    payload = request.get_json(silent=True) or {}
    owner_id = current_user.clerk_id
    service = FlashcardService(get_session())
    flashcard = service.get(owner_id, flashcard_id)

    editor = FlashcardEditor()
    editor.start(flashcard.id, flashcard.tongan_phrase, flashcard.english_phrase)
    editor.update_draft(tongan=payload.get("tongan_phrase"), english=payload.get("english_phrase"))
    updated = editor.save(
        lambda card_id, tongan, english: service.update(
            owner_id, card_id, tongan, english, status=payload.get("status")
        )
    )
    return jsonify(updated.to_dict())


@bp.delete("/flashcards/<flashcard_id>")
@login_required
def delete_flashcard(flashcard_id: str):
    deleted = FlashcardService(get_session()).delete(current_user.clerk_id, [flashcard_id])
    if not deleted:
        raise FlashcardNotFoundError(flashcard_id)
    return jsonify({"deleted": deleted})


@bp.post("/flashcards/delete")
@login_required
def delete_flashcards():
    """Bulk delete the selected flashcards."""
    payload = request.get_json(silent=True) or {}
    ids = payload.get("ids")
    if not isinstance(ids, list) or not ids:
        raise ValidationError("No flashcards selected")
    deleted = FlashcardService(get_session()).delete(current_user.clerk_id, [str(i) for i in ids])
    return jsonify({"deleted": deleted})
