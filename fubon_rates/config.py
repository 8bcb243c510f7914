"""Configuration helpers for the API key and runtime settings."""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Dict, Optional

from dotenv import load_dotenv

LOGGER = logging.getLogger(__name__)


def _load_env_file() -> None:
    """Load variables from a local ``.env`` file when available."""

    env_path = os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env")
    if not os.path.exists(env_path):
        LOGGER.debug("No .env file found at %s", env_path)
        return

    load_dotenv(env_path)
    LOGGER.info("Loaded environment variables from %s", env_path)


def _env_flag(name: str, default: str) -> bool:
    """Read a boolean flag such as ``DEBUG=true`` from the environment."""

    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


@lru_cache
def _resolve_openrouter_secret() -> Optional[str]:
    """Resolve the OpenRouter API key from the environment."""

    direct = os.getenv("OPENROUTER_API_KEY") or os.getenv("OPENROUTER_KEY")
    if direct and direct.strip():
        return direct.strip()
    return None


_load_env_file()


class Config:
    """Central access point for runtime configuration."""

    # OpenRouter configuration -------------------------------------------------
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_MODEL: str = os.getenv("OPENROUTER_MODEL", "openai/gpt-4o-mini")
    WEB_SEARCH_ENABLED: bool = _env_flag("OPENROUTER_WEB_SEARCH", "True")
    AI_REQUEST_TIMEOUT: float = float(os.getenv("AI_REQUEST_TIMEOUT", "60"))

    # Rate source --------------------------------------------------------------
    BANK_NAME: str = "台北富邦銀行"
    FUBON_RATE_URL: str = (
        "https://www.fubon.com/banking/personal/deposit/exchange_rate/"
        "exchange_rate_tw.htm?page=ex_rate_tab0"
    )

    # Polling ------------------------------------------------------------------
    # Seconds between automatic refreshes; 0 disables the timer.
    POLL_INTERVAL_SECONDS: int = int(os.getenv("FX_POLL_INTERVAL_SECONDS", "300"))

    # Feature flags ------------------------------------------------------------
    DEBUG: bool = _env_flag("DEBUG", "False")

    @classmethod
    def get_openrouter_api_key(cls) -> Optional[str]:
        """Return the configured OpenRouter API key, if any."""

        return _resolve_openrouter_secret()

    @classmethod
    def has_credentials(cls) -> bool:
        """Return whether an OpenRouter API key is configured."""

        return bool(cls.get_openrouter_api_key())

    @classmethod
    def get_openrouter_headers(cls, site_url: str = "http://localhost:5000") -> Dict[str, str]:
        """Return the attribution headers OpenRouter expects from apps."""

        return {
            "HTTP-Referer": site_url,
            "X-Title": "Fubon FX Rate Monitor",
        }


if not Config.has_credentials():  # pragma: no cover - depends on environment
    LOGGER.warning("No OpenRouter API key configured - rate fetches will fail")
