# config.py - configuration constants
import os


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "supersecretkey")

    # Remote trivia source (jService-compatible API)
    TRIVIA_API_URL = os.getenv("TRIVIA_API_URL", "https://jservice.io/api")
    TRIVIA_TIMEOUT_SECONDS = _int_env("TRIVIA_TIMEOUT_SECONDS", 5)

    # Board shape and the size of the candidate pool categories are drawn from
    NUM_CATEGORIES = _int_env("NUM_CATEGORIES", 6)
    NUM_QUESTIONS_PER_CAT = _int_env("NUM_QUESTIONS_PER_CAT", 5)
    CATEGORY_POOL_SIZE = _int_env("CATEGORY_POOL_SIZE", 100)

    # Minimum time the loading indicator stays on screen (milliseconds)
    LOADING_MIN_MS = _int_env("LOADING_MIN_MS", 975)

    # Upper bound on concurrently kept games; least recently used are dropped
    MAX_GAMES = _int_env("MAX_GAMES", 1000)

    # Cookie/session security (tunable via env for local vs prod)
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "Lax")
    # Don't force Secure cookies locally unless explicitly enabled
    SESSION_COOKIE_SECURE = os.getenv("SESSION_COOKIE_SECURE", "0") == "1"

    # Preferred scheme for URL generation in prod behind HTTPS
    PREFERRED_URL_SCHEME = os.getenv("PREFERRED_URL_SCHEME", "https")
