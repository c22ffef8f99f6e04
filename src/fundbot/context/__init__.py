from .response_cache import ResponseCache, cache_key  # noqa: F401
