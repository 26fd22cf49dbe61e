# workforce/utils/limiter.py
"""Shared slowapi limiter

Lives in its own module so main (app.state.limiter) and the auth router use
the same instance. There is one limiter per process: create_app() calls
configure_limiter() with its Settings, and the limit strings are looked up
on every request, so the most recently created app decides them.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

from workforce.config import Settings, get_settings

_active = {}


def configure_limiter(settings: Settings) -> Limiter:
    _active["settings"] = settings
    limiter.enabled = settings.rate_limit_enabled
    return limiter


def _settings() -> Settings:
    return _active.get("settings") or get_settings()


def api_rate_limit() -> str:
    return _settings().api_rate_limit


def auth_rate_limit() -> str:
    return _settings().auth_rate_limit


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[api_rate_limit],
    enabled=get_settings().rate_limit_enabled,
)

limit_auth = limiter.limit(auth_rate_limit)
