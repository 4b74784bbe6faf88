import html
import logging
import random
import re
from typing import Any, Dict, List, Optional

import requests

from models import Category, Clue, RevealState
from services.errors import DataShapeFailure, NetworkFailure

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://jservice.io/api"

# Markup tags only: "<" directly followed by a tag name
_TAG_RE = re.compile(r"</?[A-Za-z][A-Za-z0-9]*(?:\s[^<>]*)?/?>")


def _clean_text(value: Any) -> str:
    """Answers may come back as numbers or carry <i> markup; flatten to plain text."""
    return html.unescape(_TAG_RE.sub("", str(value))).strip()


class TriviaService:
    """Client for a jService-compatible trivia API.

    Every request is made once: there is no retry, backoff or caching, and
    failures propagate to the caller as NetworkFailure / DataShapeFailure.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: int = 5,
        pool_size: int = 100,
        questions_per_category: int = 5,
        rng: Optional[random.Random] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.pool_size = pool_size
        self.questions_per_category = questions_per_category
        self.rng = rng or random.Random()

    @classmethod
    def from_config(cls, config, rng: Optional[random.Random] = None) -> "TriviaService":
        return cls(
            base_url=config.get("TRIVIA_API_URL", DEFAULT_API_URL),
            timeout=config.get("TRIVIA_TIMEOUT_SECONDS", 5),
            pool_size=config.get("CATEGORY_POOL_SIZE", 100),
            questions_per_category=config.get("NUM_QUESTIONS_PER_CAT", 5),
            rng=rng,
        )

    def _fetch(self, path: str, params: Dict[str, Any]) -> Any:
        """GET base_url/path and return the decoded JSON body."""
        url = f"{self.base_url}/{path}"
        try:
            resp = requests.get(url, params=params, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise NetworkFailure(f"GET {url} failed: {e}") from e
        try:
            return resp.json()
        except ValueError as e:
            raise DataShapeFailure(f"GET {url} did not return JSON") from e

    def fetch_category_ids(self, count: int) -> List[int]:
        """Pick `count` category ids at random (with replacement) from the candidate pool."""
        data = self._fetch("categories", {"count": self.pool_size})
        if not isinstance(data, list):
            raise DataShapeFailure("category list response is not a list")
        try:
            pool = [c["id"] for c in data]
        except (KeyError, TypeError) as e:
            raise DataShapeFailure("category summary without an id") from e
        if not pool:
            raise DataShapeFailure("candidate category pool is empty")
        # Duplicate picks are allowed; the same category may fill several columns.
        return [self.rng.choice(pool) for _ in range(count)]

    def fetch_category(self, category_id: int) -> Category:
        """Fetch one category and sample its clues with replacement."""
        data = self._fetch("category", {"id": category_id})
        try:
            title = data["title"]
            all_clues = data["clues"]
        except (KeyError, TypeError) as e:
            raise DataShapeFailure(f"category {category_id} has no title/clues") from e
        if not isinstance(all_clues, list):
            raise DataShapeFailure(f"category {category_id} clues are not a list")
        if not all_clues:
            raise DataShapeFailure(f"category {category_id} has no clues")

        clues = []
        for _ in range(self.questions_per_category):
            raw = self.rng.choice(all_clues)
            try:
                question, answer = raw["question"], raw["answer"]
            except (KeyError, TypeError) as e:
                raise DataShapeFailure(f"category {category_id} has a malformed clue") from e
            clues.append(
                Clue(
                    question=_clean_text(question),
                    answer=_clean_text(answer),
                    showing=RevealState.UNREVEALED,
                )
            )
        logger.debug("fetched category id=%s title=%r clue_pool=%d", category_id, title, len(all_clues))
        return Category(title=_clean_text(title), clues=clues)
