from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class RevealState(str, Enum):
    UNREVEALED = "unrevealed"
    QUESTION = "question"
    ANSWER = "answer"


class GameStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


PLACEHOLDER = "?"


@dataclass
class Clue:
    question: str
    answer: str
    showing: RevealState = RevealState.UNREVEALED

    @property
    def display_text(self) -> str:
        """Text the board cell shows for the current reveal state."""
        if self.showing is RevealState.QUESTION:
            return self.question
        if self.showing is RevealState.ANSWER:
            return self.answer
        return PLACEHOLDER

    def reveal(self) -> Optional[str]:
        """Advance unrevealed -> question -> answer.

        Returns the newly shown text, or None once the answer is showing
        (further activations are ignored).
        """
        if self.showing is RevealState.UNREVEALED:
            self.showing = RevealState.QUESTION
            return self.question
        if self.showing is RevealState.QUESTION:
            self.showing = RevealState.ANSWER
            return self.answer
        return None

    def to_dict(self) -> dict:
        return {"question": self.question, "answer": self.answer, "showing": self.showing.value}


@dataclass
class Category:
    title: str
    clues: List[Clue] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"title": self.title, "clues": [c.to_dict() for c in self.clues]}


@dataclass
class GameState:
    categories: List[Category] = field(default_factory=list)
    started: bool = False
    status: GameStatus = GameStatus.IDLE
    generation: int = 0
    error: Optional[str] = None

    def is_complete(self, categories_per_game: int, questions_per_category: int) -> bool:
        """True when every category and clue slot is populated."""
        if len(self.categories) != categories_per_game:
            return False
        return all(len(c.clues) == questions_per_category for c in self.categories)

    def snapshot(self) -> dict:
        """Public view of the game; unrevealed clue text is never included."""
        return {
            "status": self.status.value,
            "started": self.started,
            "generation": self.generation,
            "error": self.error,
            "categories": [
                {
                    "title": cat.title,
                    "clues": [{"showing": c.showing.value, "text": c.display_text} for c in cat.clues],
                }
                for cat in self.categories
            ],
        }
