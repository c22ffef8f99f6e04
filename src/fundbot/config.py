"""
Configuration for fundbot.

Values come from environment variables (optionally from a .env file) and are
collected once into a Settings dataclass that the app and CLI share.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

logger = logging.getLogger("fundbot.config")

STORE_BACKENDS = ("memory", "sql")
CLASSIFIER_MODES = ("three_way", "two_way")


@dataclass
class Settings:
    """Runtime settings for the query router"""
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    llm_timeout_seconds: int = 30

    store_backend: str = "memory"
    database_url: Optional[str] = None
    store_seed_file: Optional[str] = None
    store_timeout_seconds: int = 10

    cache_ttl_seconds: int = 300
    cache_max_entries: int = 100

    classifier_mode: str = "three_way"
    transaction_default_limit: int = 10

    host: str = "0.0.0.0"
    port: int = 3000


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid integer for %s=%r; using default %d", name, raw, default)
        return default


def load_settings() -> Settings:
    """
    Build Settings from the environment.

    Raises:
        ValueError: unknown STORE_BACKEND or CLASSIFIER_MODE, or the sql
            backend without a DATABASE_URL.
    """
    load_dotenv(find_dotenv(), override=False)

    backend = os.getenv("STORE_BACKEND", "memory").strip().lower()
    if backend not in STORE_BACKENDS:
        raise ValueError(f"Unsupported STORE_BACKEND '{backend}' (expected one of {STORE_BACKENDS})")

    mode = os.getenv("CLASSIFIER_MODE", "three_way").strip().lower()
    if mode not in CLASSIFIER_MODES:
        raise ValueError(f"Unsupported CLASSIFIER_MODE '{mode}' (expected one of {CLASSIFIER_MODES})")

    database_url = os.getenv("DATABASE_URL")
    if backend == "sql" and not database_url:
        raise ValueError("STORE_BACKEND=sql requires DATABASE_URL to be set.")

    return Settings(
        gemini_api_key=(
            os.getenv("GEMINI_API_KEY")
            or os.getenv("GENAI_API_KEY")
            or os.getenv("GEMINI_TOKEN")
        ),
        gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-flash"),
        llm_timeout_seconds=_int_env("LLM_TIMEOUT_SECONDS", 30),
        store_backend=backend,
        database_url=database_url,
        store_seed_file=os.getenv("STORE_SEED_FILE") or None,
        store_timeout_seconds=_int_env("STORE_TIMEOUT_SECONDS", 10),
        cache_ttl_seconds=_int_env("CACHE_TTL_SECONDS", 300),
        cache_max_entries=_int_env("CACHE_MAX_ENTRIES", 100),
        classifier_mode=mode,
        transaction_default_limit=_int_env("TRANSACTION_DEFAULT_LIMIT", 10),
        host=os.getenv("HOST", "0.0.0.0"),
        port=_int_env("PORT", 3000),
    )
