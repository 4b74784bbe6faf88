"""Functional page-by-page verification script.
Run inside the virtual environment:
  python functional_check.py
Serves a canned trivia API in place of the real one, then drives the board
through a full game. Outputs tuple of (status_code, heuristic_content_ok) per route.
"""

import random
from unittest.mock import patch

from app import create_app

CANNED_CATEGORIES = [{"id": i, "title": f"Category {i}"} for i in range(1, 11)]


class _CannedResponse:
    def __init__(self, payload):
        self._payload = payload
        self.status_code = 200

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


def _canned_get(url, params=None, timeout=None):
    if url.endswith("/categories"):
        return _CannedResponse(CANNED_CATEGORIES)
    cat_id = int(params["id"])
    return _CannedResponse(
        {
            "title": f"Category {cat_id}",
            "clues": [{"question": f"Q{cat_id}.{n}", "answer": f"A{cat_id}.{n}"} for n in range(5)],
        }
    )


def run_checks():
    app = create_app({"TESTING": True, "WTF_CSRF_ENABLED": False}, rng=random.Random(7))
    results = {}
    with patch("services.trivia_service.requests.get", _canned_get), app.test_client() as c:
        # Home
        r = c.get("/")
        results["home"] = (r.status_code, "New Game!" in r.get_data(as_text=True))

        # New game
        ng = c.post("/new-game")
        body = ng.get_data(as_text=True)
        results["new_game"] = (ng.status_code, body.count('class="clue"') == 30)

        # Reveal one cell three times: question, answer, ignored
        first = c.post("/clues/0/0")
        second = c.post("/clues/0/0")
        third = c.post("/clues/0/0")
        results["reveal_question"] = (first.status_code, first.get_json()["showing"] == "question")
        results["reveal_answer"] = (second.status_code, second.get_json()["showing"] == "answer")
        results["reveal_ignored"] = (third.status_code, third.get_json()["changed"] is False)

        # Board survives a reload with the revealed text in place
        reload = c.get("/")
        results["reload"] = (reload.status_code, second.get_json()["text"] in reload.get_data(as_text=True))

        snap = c.get("/api/game")
        results["snapshot"] = (snap.status_code, snap.get_json()["status"] == "ready")

        results["healthz"] = (c.get("/healthz").status_code, True)

        missing = c.get("/no-such-page")
        results["404"] = (missing.status_code, missing.status_code == 404)
    return results


if __name__ == "__main__":
    for name, (status, ok) in run_checks().items():
        print(f"{name:16} {status} {'OK' if ok else 'FAIL'}")
