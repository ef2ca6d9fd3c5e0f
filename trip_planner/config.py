# Role: Central configuration module. Loads .env into environment variables and computes runtime flags
# (DEBUG, agent loop bound, engine timeout, image cache size). Importers read trip_planner.config.<FLAG>
# at call time, so load_env() may run after import.

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv

DEBUG: bool = False
MAX_AGENT_TURNS: int = 6
LLM_TIMEOUT_SECONDS: float = 30.0
IMAGE_CACHE_MAX_ENTRIES: int = 256

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value > 0 else default


def load_env() -> None:
    """
    Load .env into os.environ, then recompute the module flags and configure logging.
    """
    global DEBUG, MAX_AGENT_TURNS, LLM_TIMEOUT_SECONDS, IMAGE_CACHE_MAX_ENTRIES
    load_dotenv()
    # Key line: accept common truthy values.
    DEBUG = os.getenv("DEBUG", "0").lower() in {"1", "true", "yes"}
    MAX_AGENT_TURNS = _int_env("AGENT_MAX_TURNS", 6)
    LLM_TIMEOUT_SECONDS = _float_env("LLM_TIMEOUT_SECONDS", 30.0)
    IMAGE_CACHE_MAX_ENTRIES = _int_env("IMAGE_CACHE_MAX_ENTRIES", 256)

    logging.basicConfig(level=logging.DEBUG if DEBUG else logging.INFO, format=_LOG_FORMAT)
