# services/game_controller.py - game lifecycle: fetch -> install -> reveal
import logging
import threading
import uuid
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, List, Optional

from models import Category, GameState, GameStatus
from services.board_renderer import BoardView, build_board
from services.errors import BoardNotReady, CellNotFound, GameSuperseded, TriviaError
from services.trivia_service import TriviaService

logger = logging.getLogger(__name__)


@dataclass
class CellUpdate:
    key: str
    showing: str
    text: str
    changed: bool

    def to_dict(self) -> dict:
        return {"key": self.key, "showing": self.showing, "text": self.text, "changed": self.changed}


class GameController:
    """Owns one GameState and drives it through idle -> loading -> ready.

    Network calls happen outside the lock; every mutation of the state is
    checked against the generation the fetch chain started with, so a chain
    overtaken by a newer new_game() never touches the board.
    """

    def __init__(self, trivia: TriviaService, categories_per_game: int = 6, questions_per_category: int = 5):
        self.trivia = trivia
        self.categories_per_game = categories_per_game
        self.questions_per_category = questions_per_category
        self.state = GameState()
        self._lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self.state.status is GameStatus.READY

    def _begin(self) -> int:
        with self._lock:
            self.state.generation += 1
            self.state.started = False
            self.state.categories = []
            self.state.status = GameStatus.LOADING
            self.state.error = None
            return self.state.generation

    def _check_current(self, generation: int) -> None:
        current = self.state.generation
        if generation != current:
            logger.info("discarding stale fetch chain generation=%s current=%s", generation, current)
            raise GameSuperseded(generation, current)

    def new_game(self) -> GameState:
        """Reset the board and load a fresh set of categories.

        Category ids are fetched first, then each category in order, one
        request at a time. Raises GameSuperseded if another new_game() began
        meanwhile; TriviaError subclasses propagate after the state is marked
        failed.
        """
        generation = self._begin()
        logger.info("new game generation=%s categories=%s questions=%s",
                    generation, self.categories_per_game, self.questions_per_category)
        loaded: List[Category] = []
        try:
            ids = self.trivia.fetch_category_ids(self.categories_per_game)
            for cat_id in ids:
                with self._lock:
                    self._check_current(generation)
                loaded.append(self.trivia.fetch_category(cat_id))
        except TriviaError as e:
            with self._lock:
                if generation == self.state.generation:
                    self.state.status = GameStatus.FAILED
                    self.state.error = str(e)
            logger.warning("new game generation=%s failed: %s", generation, e)
            raise

        with self._lock:
            self._check_current(generation)
            self.state.categories = loaded
            self.state.status = GameStatus.READY
            self.state.started = True
        logger.info("new game generation=%s ready titles=%s", generation, [c.title for c in loaded])
        return self.state

    def board(self) -> BoardView:
        """Project the loaded board; raises BoardNotReady while a new game is loading."""
        with self._lock:
            return build_board(self.state, self.categories_per_game, self.questions_per_category)

    def snapshot(self) -> dict:
        with self._lock:
            return self.state.snapshot()

    def activate_cell(self, category_index: int, clue_index: int) -> CellUpdate:
        """Advance the reveal state of one clue and report what its cell shows now."""
        with self._lock:
            if not self.is_ready:
                raise BoardNotReady("no board loaded")
            if not (0 <= category_index < len(self.state.categories)):
                raise CellNotFound(f"no category {category_index}")
            clues = self.state.categories[category_index].clues
            if not (0 <= clue_index < len(clues)):
                raise CellNotFound(f"no clue {clue_index} in category {category_index}")
            clue = clues[clue_index]
            shown = clue.reveal()
            return CellUpdate(
                key=f"{category_index}-{clue_index}",
                showing=clue.showing.value,
                text=clue.display_text,
                changed=shown is not None,
            )


class GameRegistry:
    """One GameController per browser session, keyed by a random game id.

    Holds at most max_games controllers; the least recently used one is
    dropped when a new session needs room.
    """

    def __init__(self, factory: Callable[[], GameController], max_games: int = 1000):
        self._factory = factory
        self.max_games = max(1, max_games)
        self._games: "OrderedDict[str, GameController]" = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def new_id() -> str:
        return uuid.uuid4().hex

    def get(self, game_id: Optional[str]) -> Optional[GameController]:
        if not game_id:
            return None
        with self._lock:
            game = self._games.get(game_id)
            if game is not None:
                self._games.move_to_end(game_id)
            return game

    def get_or_create(self, game_id: str) -> GameController:
        with self._lock:
            game = self._games.get(game_id)
            if game is not None:
                self._games.move_to_end(game_id)
                return game
            game = self._factory()
            self._games[game_id] = game
            while len(self._games) > self.max_games:
                evicted, _ = self._games.popitem(last=False)
                logger.info("evicted idle game id=%s", evicted)
            return game

    def __contains__(self, game_id: str) -> bool:
        with self._lock:
            return game_id in self._games

    def __len__(self) -> int:
        with self._lock:
            return len(self._games)
