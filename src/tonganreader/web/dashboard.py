"""Dashboard routes."""
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from tonganreader.errors import ValidationError
from tonganreader.services.stats_service import StatsService
from tonganreader.services.user_service import UserService
from tonganreader.web.context import get_library, get_session

bp = Blueprint("dashboard", __name__, url_prefix="/dashboard")


@bp.get("")
@login_required
def show():
    stats = StatsService(get_session(), get_library()).dashboard(current_user)
    return jsonify(stats)


@bp.post("/goal")
@login_required
def update_goal():
    payload = request.get_json(silent=True) or {}
    vocab_goal = payload.get("vocab_goal")
    if isinstance(vocab_goal, bool) or not isinstance(vocab_goal, int):
        raise ValidationError("vocab_goal must be a whole number")
    user = UserService(get_session()).update_vocab_goal(current_user.clerk_id, vocab_goal)
    return jsonify({"vocab_goal": user.vocab_goal})
