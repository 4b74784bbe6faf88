# routes/game_routes.py - new game, clue reveals and the JSON game snapshot
from flask import Blueprint, current_app, jsonify, session

from services.board_renderer import render_board
from services.errors import BoardNotReady, CellNotFound, GameSuperseded, TriviaError
from services.session_helper import SessionHelper

game_bp = Blueprint("game", __name__)

UNAVAILABLE_MSG = "Unable to load the game board. Please try again."


@game_bp.route("/new-game", methods=["POST"])
def new_game():
    """
    Start a new game for this session: fetch categories, then return the
    board table as an HTML fragment for the page to swap in.
    """
    game = SessionHelper.ensure_game(session)
    try:
        game.new_game()
    except GameSuperseded:
        # A later click owns the board now; the page ignores this response.
        return jsonify({"status": "superseded"}), 409
    except TriviaError:
        current_app.logger.exception("new game failed")
        return f'<p class="board-error">{UNAVAILABLE_MSG}</p>', 503

    try:
        return render_board(game.board())
    except BoardNotReady:
        # Cleared by a newer new game between loading and rendering
        return jsonify({"status": "superseded"}), 409


@game_bp.route("/clues/<int:category_index>/<int:clue_index>", methods=["POST"])
def reveal_clue(category_index, clue_index):
    """Advance one clue: ? -> question -> answer, then ignore further clicks."""
    game = SessionHelper.current_game(session)
    if game is None:
        return jsonify({"error": "no game started"}), 409
    try:
        update = game.activate_cell(category_index, clue_index)
    except BoardNotReady:
        return jsonify({"error": "board not ready"}), 409
    except CellNotFound as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(update.to_dict())


@game_bp.route("/api/game", methods=["GET"])
def game_snapshot():
    game = SessionHelper.current_game(session)
    if game is None:
        return jsonify({"status": "idle", "started": False, "generation": 0, "error": None, "categories": []})
    return jsonify(game.snapshot())
