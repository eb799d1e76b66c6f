"""Runtime settings, read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

from mpm.exceptions import InputError

DEFAULT_SEARCH_URL = "https://search.maven.org/solrsearch/select"
DEFAULT_TIMEOUT = 30.0
DEFAULT_CONNECT_TIMEOUT = 10.0


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise InputError(f"{name} must be a number of seconds, got {raw!r}") from None
    if value <= 0:
        raise InputError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass
class Settings:
    """Settings threaded into the console, the registry client and the executor.

    Environment variables:
        MPM_SEARCH_URL       registry search endpoint
        MPM_HTTP_TIMEOUT     request timeout in seconds (default: 30)
        MPM_CONNECT_TIMEOUT  connect timeout in seconds (default: 10)
        MPM_MVN              Maven executable override
        MPM_LOG_LEVEL        log level (default: WARNING)
        MPM_LOG_FORMAT       console or json (default: console)
        NO_COLOR             disable coloured output when set
    """

    search_url: str = DEFAULT_SEARCH_URL
    timeout: float = DEFAULT_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    mvn_command: str | None = None
    log_level: str = "WARNING"
    log_format: str = "console"
    color: bool = True

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            search_url=os.environ.get("MPM_SEARCH_URL") or DEFAULT_SEARCH_URL,
            timeout=_env_float("MPM_HTTP_TIMEOUT", DEFAULT_TIMEOUT),
            connect_timeout=_env_float("MPM_CONNECT_TIMEOUT", DEFAULT_CONNECT_TIMEOUT),
            mvn_command=os.environ.get("MPM_MVN") or None,
            log_level=os.environ.get("MPM_LOG_LEVEL", "WARNING").upper(),
            log_format=os.environ.get("MPM_LOG_FORMAT", "console").lower(),
            color="NO_COLOR" not in os.environ,
        )
