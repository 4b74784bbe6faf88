# services/errors.py - exceptions raised by the trivia client and game controller


class TriviaError(Exception):
    """Base class for failures talking to the remote trivia source."""


class NetworkFailure(TriviaError):
    """Trivia source unreachable, timed out, or returned a non-success status."""


class DataShapeFailure(TriviaError):
    """Trivia source answered, but not with data a board can be built from."""


class GameSuperseded(Exception):
    """A newer game was started while this fetch chain was still running."""

    def __init__(self, generation: int, current: int):
        super().__init__(f"game generation {generation} superseded by {current}")
        self.generation = generation
        self.current = current


class BoardNotReady(Exception):
    """No fully loaded board exists for this game."""


class CellNotFound(LookupError):
    """Category or clue index outside the board."""
