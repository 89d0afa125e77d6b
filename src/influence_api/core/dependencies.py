"""FastAPI dependency injection for settings and the shared token cache."""

from fastapi import Request

from influence_api.lib.sway_client import TokenCache


def get_token_cache(request: Request) -> TokenCache:
    """Return the app-scoped Sway token cache, creating it on first use.

    The lifespan normally installs one on ``app.state``; the fallback keeps
    apps built without the lifespan (e.g. in tests) working.
    """
    cache: TokenCache | None = getattr(request.app.state, "token_cache", None)
    if cache is None:
        cache = TokenCache()
        request.app.state.token_cache = cache
    return cache
