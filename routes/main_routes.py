# routes/main_routes.py - homepage / board chrome
from flask import Blueprint, current_app, render_template, session

from services.board_renderer import render_board
from services.errors import BoardNotReady
from services.session_helper import SessionHelper

main_bp = Blueprint("main", __name__)


@main_bp.route("/", methods=["GET"])
def index():
    """Home page: title, New Game button and the current board if one is loaded."""
    board_html = None
    game = SessionHelper.current_game(session)
    if game is not None:
        try:
            board_html = render_board(game.board())
        except BoardNotReady:
            # idle, loading or failed: show the empty board container
            pass
    return render_template(
        "index.html",
        board_html=board_html,
        loading_min_ms=current_app.config["LOADING_MIN_MS"],
    )
