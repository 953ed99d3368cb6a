"""Backend and runtime settings from Streamlit secrets or a local .env file."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_LOG_LEVEL = "INFO"


@dataclass
class Settings:
    supabase_url: str = ""
    supabase_key: str = ""
    app_env: str = "production"
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = DEFAULT_LOG_LEVEL

    @property
    def has_credentials(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @property
    def is_development(self) -> bool:
        return self.app_env.lower() in {"development", "dev", "local"}


def _streamlit_secrets() -> dict[str, Any]:
    try:
        import streamlit as st

        return dict(st.secrets)
    except Exception:
        return {}


def _load_env_file(env_file: str | None) -> None:
    candidates = [Path(env_file)] if env_file else [Path.cwd() / ".env", Path(__file__).parent / ".env"]
    for env_path in candidates:
        if env_path.exists():
            load_dotenv(env_path)
            logger.info("Loaded .env from: %s", env_path)
            return


def _parse_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError):
        logger.warning("Invalid REQUEST_TIMEOUT_SECONDS %r, using %s", value, DEFAULT_TIMEOUT_SECONDS)
        return DEFAULT_TIMEOUT_SECONDS
    return timeout if timeout > 0 else DEFAULT_TIMEOUT_SECONDS


def _parse_log_level(value: Any) -> str:
    level = str(value or DEFAULT_LOG_LEVEL).strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        logger.warning("Invalid LOG_LEVEL %r, using %s", value, DEFAULT_LOG_LEVEL)
        return DEFAULT_LOG_LEVEL
    return level


def load_settings(env_file: str | None = None, secrets: Mapping[str, Any] | None = None) -> Settings:
    """Read settings; secrets win over .env and the environment.

    Missing credentials are logged, not raised.
    """
    source = dict(secrets) if secrets is not None else _streamlit_secrets()
    _load_env_file(env_file)

    def get(name: str, default: str = "") -> str:
        value = source.get(name)
        if value in (None, ""):
            value = os.getenv(name, default)
        return str(value).strip()

    settings = Settings(
        supabase_url=get("SUPABASE_URL"),
        supabase_key=get("SUPABASE_ANON_KEY"),
        app_env=get("APP_ENV", "production") or "production",
        request_timeout=_parse_timeout(get("REQUEST_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS))),
        log_level=_parse_log_level(get("LOG_LEVEL", DEFAULT_LOG_LEVEL)),
    )

    if not settings.has_credentials:
        logger.error("Backend settings missing: SUPABASE_URL and SUPABASE_ANON_KEY are required")

    return settings
