"""Chapter reading, word lookup and reading progress routes."""
import logging

from flask import Blueprint, jsonify, request, session
from flask_login import current_user, login_required

from tonganreader.errors import ChapterNotFoundError, NotFoundError, TonganReaderError, ValidationError
from tonganreader.models.panel_models import state_from_dict, state_to_dict
from tonganreader.services.flashcard_service import FlashcardService
from tonganreader.services.panel_service import LookupPanel
from tonganreader.services.user_service import UserService
from tonganreader.web.context import get_dictionary, get_library, get_session

logger = logging.getLogger(__name__)

bp = Blueprint("reader", __name__)

PANEL_KEY = "lookup_panel"


def _panel() -> LookupPanel:
    return LookupPanel(state_from_dict(session.get(PANEL_KEY)))


def _panel_response(panel: LookupPanel):
    session[PANEL_KEY] = state_to_dict(panel.state)
    return jsonify({"panel": state_to_dict(panel.state)})


@bp.get("/bible")
def list_books():
    return jsonify({"books": get_library().books(request.args.get("q"))})


@bp.get("/bible/<book>/<chapter>")
def read_chapter(book: str, chapter: str):
    view = get_library().chapter_view(book, chapter)
    return jsonify(view.to_dict())


@bp.get("/dictionary")
def dictionary_lookup():
    result = get_dictionary().lookup(request.args.get("word"))
    return jsonify(result.entry.to_dict())


@bp.get("/lookup")
def show_lookup():
    return jsonify({"panel": state_to_dict(_panel().state)})


@bp.post("/lookup")
def lookup_word():
    """Select a clicked word and show its dictionary entry in the panel."""
    payload = request.get_json(silent=True) or {}
    panel = _panel()
    word = panel.select(payload.get("word")).word
    try:
        result = get_dictionary().lookup(word)
    except NotFoundError as e:
        panel.fail(word, e.message)
    else:
        panel.resolve(word, result.entry)
    return _panel_response(panel)


@bp.post("/lookup/edit")
def edit_lookup():
    """Edit the English text of the shown entry before saving it."""
    payload = request.get_json(silent=True) or {}
    action = payload.get("action", "start")
    panel = _panel()

    if action == "start":
        panel.edit()
    elif action == "update":
        panel.update_draft(payload.get("english", ""))
    elif action == "apply":
        if "english" in payload:
            panel.update_draft(payload["english"])
        panel.save_edit()
    elif action == "cancel":
        panel.cancel_edit()
    else:
        raise ValidationError(f"Unknown edit action: {action}")
    return _panel_response(panel)


@bp.post("/lookup/save")
@login_required
def save_lookup():
    """Save the shown entry as a flashcard."""
    panel = _panel()
    service = FlashcardService(get_session())
    try:
        flashcard = panel.save(
            lambda entry: service.create(current_user.clerk_id, entry.tongan, entry.english)
        )
    except TonganReaderError:
        session[PANEL_KEY] = state_to_dict(panel.state)
        raise
    session[PANEL_KEY] = state_to_dict(panel.state)
    return jsonify({"panel": state_to_dict(panel.state), "flashcard": flashcard.to_dict()}), 201


@bp.post("/lookup/close")
def close_lookup():
    panel = _panel()
    panel.close()
    return _panel_response(panel)


@bp.post("/progress")
@login_required
def save_progress():
    """Remember the chapter the user is reading."""
    payload = request.get_json(silent=True) or {}
    book = str(payload.get("book") or "")
    chapter = str(payload.get("chapter") or "")
    if not book or not chapter:
        raise ValidationError("Book and chapter are required")
    if not chapter.isdigit() or not get_library().has_chapter(book, chapter):
        raise ChapterNotFoundError(book, chapter)

    user = UserService(get_session()).update_progress(current_user.clerk_id, book, int(chapter))
    return jsonify({"current_book": user.current_book, "current_chapter": user.current_chapter})
