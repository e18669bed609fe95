# =============================================================================
# core/config.py  -  Server configuration from the environment
# =============================================================================
#
# HOW CONFIGURATION IS LOADED:
#   main.py calls load_dotenv() first, so values can live in a local .env
#   file or in the real environment.  load_settings() then reads them once
#   at startup.
#
#   OPENFEC_API_KEY              required - get one at https://api.data.gov/signup/
#   OPENFEC_BASE_URL             default https://api.open.fec.gov/v1
#   OPENFEC_RATE_LIMIT           default 1000 requests ...
#   OPENFEC_RATE_WINDOW_SECONDS  default 3600 ... per hour
#   OPENFEC_TIMEOUT_SECONDS      default 30 (transport timeout per request)
#   OPENFEC_LOG_LEVEL            default INFO
#
# A missing key or a malformed number raises ConfigError and the server
# refuses to start.
# =============================================================================

import os
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

from core.errors import ConfigError
from core.openfec import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_SECONDS
from core.rate_limiter import DEFAULT_CAPACITY, DEFAULT_WINDOW_SECONDS

T = TypeVar("T", int, float)

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class Settings:
    api_key: str
    base_url: str = DEFAULT_BASE_URL
    rate_limit: int = DEFAULT_CAPACITY
    rate_window_seconds: float = DEFAULT_WINDOW_SECONDS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"

    def __repr__(self) -> str:
        # Keep the key out of logs and tracebacks.
        return (
            f"Settings(api_key='***', base_url={self.base_url!r}, "
            f"rate_limit={self.rate_limit}, rate_window_seconds={self.rate_window_seconds}, "
            f"timeout_seconds={self.timeout_seconds}, log_level={self.log_level!r})"
        )


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build Settings from ``environ`` (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ

    api_key = env.get("OPENFEC_API_KEY", "").strip()
    if not api_key:
        raise ConfigError("OPENFEC_API_KEY environment variable is required")

    log_level = env.get("OPENFEC_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    if log_level not in _LOG_LEVELS:
        raise ConfigError(f"OPENFEC_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}, got {log_level!r}")

    return Settings(
        api_key=api_key,
        base_url=env.get("OPENFEC_BASE_URL", "").strip() or DEFAULT_BASE_URL,
        rate_limit=_positive(env, "OPENFEC_RATE_LIMIT", int, DEFAULT_CAPACITY),
        rate_window_seconds=_positive(env, "OPENFEC_RATE_WINDOW_SECONDS", float, DEFAULT_WINDOW_SECONDS),
        timeout_seconds=_positive(env, "OPENFEC_TIMEOUT_SECONDS", float, DEFAULT_TIMEOUT_SECONDS),
        log_level=log_level,
    )


def _positive(env: Mapping[str, str], name: str, cast: Callable[[str], T], default: T) -> T:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value
