# services/board_renderer.py - project a loaded GameState into the board table
from dataclasses import dataclass
from typing import List

from flask import render_template

from models import GameState
from services.errors import BoardNotReady


@dataclass
class CellView:
    category_index: int
    clue_index: int
    text: str

    @property
    def key(self) -> str:
        return f"{self.category_index}-{self.clue_index}"


@dataclass
class BoardView:
    headers: List[str]
    rows: List[List[CellView]]


def build_board(state: GameState, categories_per_game: int, questions_per_category: int) -> BoardView:
    """One header per category, then one row per clue slot across all categories."""
    if not state.is_complete(categories_per_game, questions_per_category):
        raise BoardNotReady("game state is not fully loaded")
    headers = [cat.title for cat in state.categories]
    rows = [
        [
            CellView(cat_idx, clue_idx, state.categories[cat_idx].clues[clue_idx].display_text)
            for cat_idx in range(categories_per_game)
        ]
        for clue_idx in range(questions_per_category)
    ]
    return BoardView(headers=headers, rows=rows)


def render_board(board: BoardView) -> str:
    return render_template("_board.html", board=board)
