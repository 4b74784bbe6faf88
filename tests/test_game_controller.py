"""Game lifecycle: sequential loading, generation token, failures and reveals."""

import threading
import time

import pytest

from models import Category, Clue, GameStatus, RevealState
from services.errors import BoardNotReady, CellNotFound, GameSuperseded, NetworkFailure
from services.game_controller import GameController, GameRegistry


class FakeTrivia:
    """Stands in for TriviaService; hands out ids from a script and logs calls."""

    def __init__(self, id_batches, questions=5, fail_on=None):
        self.id_batches = list(id_batches)
        self.questions = questions
        self.fail_on = fail_on
        self.calls = []
        self.before_category = None

    def fetch_category_ids(self, count):
        self.calls.append(("ids", count))
        return self.id_batches.pop(0)

    def fetch_category(self, cat_id):
        self.calls.append(("category", cat_id))
        if self.before_category:
            hook, self.before_category = self.before_category, None
            hook(cat_id)
        if cat_id == self.fail_on:
            raise NetworkFailure(f"category {cat_id} unreachable")
        return Category(
            title=f"Cat {cat_id}",
            clues=[Clue(question=f"Q{cat_id}.{n}", answer=f"A{cat_id}.{n}") for n in range(self.questions)],
        )


def make_controller(trivia, categories=6, questions=5):
    return GameController(trivia, categories_per_game=categories, questions_per_category=questions)


def test_initial_state_is_idle():
    game = make_controller(FakeTrivia([]))
    assert game.state.status is GameStatus.IDLE
    assert game.state.started is False
    assert game.state.categories == []


def test_new_game_loads_categories_in_id_order():
    trivia = FakeTrivia([[5, 3, 9, 3, 1, 2]])
    game = make_controller(trivia)
    state = game.new_game()

    assert [c.title for c in state.categories] == ["Cat 5", "Cat 3", "Cat 9", "Cat 3", "Cat 1", "Cat 2"]
    assert state.status is GameStatus.READY
    assert state.started is True
    assert state.generation == 1
    # ids first, then every category one after another
    assert trivia.calls == [("ids", 6)] + [("category", i) for i in [5, 3, 9, 3, 1, 2]]


def test_new_game_replaces_previous_board():
    game = make_controller(FakeTrivia([[1, 2], [3, 4]]), categories=2)
    game.new_game()
    game.activate_cell(0, 0)
    state = game.new_game()
    assert [c.title for c in state.categories] == ["Cat 3", "Cat 4"]
    assert all(c.showing.value == "unrevealed" for cat in state.categories for c in cat.clues)
    assert state.generation == 2


def test_overlapping_new_game_keeps_only_latest_chain():
    trivia = FakeTrivia([[1, 2, 3], [7, 8, 9]], questions=1)
    game = make_controller(trivia, categories=3, questions=1)
    inner = {}

    # While the first chain is fetching category 1, a second new game starts
    # and runs to completion.
    def start_second_game(cat_id):
        inner["state"] = game.new_game()

    trivia.before_category = start_second_game

    with pytest.raises(GameSuperseded) as exc:
        game.new_game()
    assert exc.value.generation == 1
    assert exc.value.current == 2

    titles = [c.title for c in game.state.categories]
    assert titles == ["Cat 7", "Cat 8", "Cat 9"]
    assert game.state.status is GameStatus.READY
    assert game.state.generation == 2


def test_failed_chain_leaves_board_empty_and_marks_failure():
    game = make_controller(FakeTrivia([[1, 2, 3, 4, 5, 6]], fail_on=4))
    with pytest.raises(NetworkFailure):
        game.new_game()
    assert game.state.status is GameStatus.FAILED
    assert game.state.started is False
    assert game.state.categories == []
    assert "category 4" in game.state.error


def test_failure_clears_previous_board():
    game = make_controller(FakeTrivia([[1, 2], [3, 4]], fail_on=4), categories=2)
    game.new_game()
    with pytest.raises(NetworkFailure):
        game.new_game()
    assert game.state.categories == []
    with pytest.raises(BoardNotReady):
        game.activate_cell(0, 0)


def test_activate_cell_cycles_and_then_ignores():
    game = make_controller(FakeTrivia([[1, 2, 3, 4, 5, 6]]))
    game.new_game()

    first = game.activate_cell(2, 4)
    assert first.to_dict() == {"key": "2-4", "showing": "question", "text": "Q3.4", "changed": True}
    second = game.activate_cell(2, 4)
    assert second.to_dict() == {"key": "2-4", "showing": "answer", "text": "A3.4", "changed": True}
    for _ in range(3):
        again = game.activate_cell(2, 4)
        assert again.to_dict() == {"key": "2-4", "showing": "answer", "text": "A3.4", "changed": False}

    # neighbours untouched
    assert game.state.categories[2].clues[3].showing.value == "unrevealed"
    assert game.state.categories[1].clues[4].showing.value == "unrevealed"


def test_activate_cell_before_any_game():
    game = make_controller(FakeTrivia([]))
    with pytest.raises(BoardNotReady):
        game.activate_cell(0, 0)


@pytest.mark.parametrize("cat_idx,clue_idx", [(6, 0), (0, 5), (-1, 0), (0, -1)])
def test_activate_cell_out_of_range(cat_idx, clue_idx):
    game = make_controller(FakeTrivia([[1, 2, 3, 4, 5, 6]]))
    game.new_game()
    with pytest.raises(CellNotFound):
        game.activate_cell(cat_idx, clue_idx)


def test_snapshot_hides_unrevealed_text():
    game = make_controller(FakeTrivia([[1]], questions=2), categories=1, questions=2)
    game.new_game()
    game.activate_cell(0, 1)
    snap = game.snapshot()
    assert snap["status"] == "ready"
    assert snap["categories"][0]["clues"] == [
        {"showing": "unrevealed", "text": "?"},
        {"showing": "question", "text": "Q1.1"},
    ]
    assert "Q1.0" not in str(snap)


def test_registry_gives_one_controller_per_game_id():
    made = []

    def factory():
        made.append(make_controller(FakeTrivia([])))
        return made[-1]

    registry = GameRegistry(factory)
    assert registry.get(None) is None
    assert registry.get("missing") is None
    a = registry.get_or_create("a")
    assert registry.get_or_create("a") is a
    b = registry.get_or_create("b")
    assert a is not b
    assert len(registry) == 2
    assert len(made) == 2
    assert registry.new_id() != registry.new_id()


class SlowClue(Clue):
    """Clue that pauses while its cell text is read, leaving room for a concurrent new game."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.reading = threading.Event()
        self.resume = threading.Event()

    @property
    def display_text(self):
        self.reading.set()
        self.resume.wait(2)
        return super().display_text


def test_board_comes_from_a_single_chain_when_new_game_overlaps():
    trivia = FakeTrivia([[1, 2], [7, 8]], questions=1)
    game = make_controller(trivia, categories=2, questions=1)
    game.new_game()
    game.activate_cell(1, 0)
    slow = SlowClue(question="Q1.0", answer="A1.0", showing=RevealState.QUESTION)
    game.state.categories[0].clues[0] = slow

    built = {}
    builder = threading.Thread(target=lambda: built.setdefault("board", game.board()))
    restarter = threading.Thread(target=game.new_game)
    builder.start()
    assert slow.reading.wait(2)
    restarter.start()
    time.sleep(0.1)
    slow.resume.set()
    builder.join(2)
    restarter.join(2)

    board = built["board"]
    assert board.headers == ["Cat 1", "Cat 2"]
    assert [cell.text for cell in board.rows[0]] == ["Q1.0", "Q2.0"]
    # the second chain still installed its own board afterwards
    assert [c.title for c in game.state.categories] == ["Cat 7", "Cat 8"]
    assert [cell.text for cell in game.board().rows[0]] == ["?", "?"]


def test_board_not_ready_while_loading_or_failed():
    game = make_controller(FakeTrivia([[1, 2]], fail_on=2), categories=2)
    with pytest.raises(BoardNotReady):
        game.board()
    with pytest.raises(NetworkFailure):
        game.new_game()
    with pytest.raises(BoardNotReady):
        game.board()


def test_registry_drops_least_recently_used_game():
    registry = GameRegistry(lambda: make_controller(FakeTrivia([])), max_games=3)
    first = registry.get_or_create("a")
    registry.get_or_create("b")
    registry.get_or_create("c")
    # touching "a" makes "b" the oldest
    assert registry.get("a") is first
    registry.get_or_create("d")

    assert len(registry) == 3
    assert "b" not in registry
    assert registry.get("b") is None
    assert registry.get("a") is first
    for game_id in ("c", "d"):
        assert game_id in registry


def test_registry_stays_bounded_under_many_sessions():
    registry = GameRegistry(lambda: make_controller(FakeTrivia([])), max_games=50)
    for _ in range(200):
        registry.get_or_create(registry.new_id())
    assert len(registry) == 50
