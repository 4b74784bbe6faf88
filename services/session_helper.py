# services/session_helper.py - small helpers to find the session's game
from flask import current_app


class SessionHelper:
    @staticmethod
    def registry():
        return current_app.extensions["jeopardy_games"]

    @staticmethod
    def current_game(session):
        """Return this session's GameController, or None if it never started one."""
        return SessionHelper.registry().get(session.get("game_id"))

    @staticmethod
    def ensure_game(session):
        if "game_id" not in session:
            session["game_id"] = SessionHelper.registry().new_id()
        return SessionHelper.registry().get_or_create(session["game_id"])
