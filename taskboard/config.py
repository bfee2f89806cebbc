"""
Server Configuration
=====================
Settings for the Taskboard server, read from TASKBOARD_* environment
variables. Command-line flags override whatever the environment says.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional

ENV_PREFIX = "TASKBOARD"


def _k(suffix: str) -> str:
    return f"{ENV_PREFIX}_{suffix}"


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_list(env: Mapping[str, str], name: str, default: list[str]) -> list[str]:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


@dataclass
class ServerConfig:
    """Configuration for the Taskboard HTTP server."""

    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"
    max_title_length: int = 200     # Titles longer than this are rejected with 400
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    legacy_routes: bool = True      # Also serve the /api/todos routes

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> ServerConfig:
        """Build a config from environment variables.

        Malformed numbers fall back to the defaults.
        """
        env = os.environ if env is None else env
        defaults = cls()
        return cls(
            host=env.get(_k("HOST")) or defaults.host,
            port=_env_int(env, _k("PORT"), defaults.port),
            log_level=(env.get(_k("LOG_LEVEL")) or defaults.log_level).upper(),
            max_title_length=_env_int(env, _k("MAX_TITLE_LENGTH"), defaults.max_title_length),
            cors_origins=_env_list(env, _k("CORS_ORIGINS"), defaults.cors_origins),
            legacy_routes=_env_bool(env, _k("LEGACY_ROUTES"), defaults.legacy_routes),
        )
