import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

PLACEHOLDER_API_KEY = "your-api-key-here"


@dataclass(frozen=True)
class Settings:
    """
    Settings read from the environment (and .env).

    Env vars:
    - ANTHROPIC_API_KEY: key for the model API; AI endpoints answer 500 without it
    - ANTHROPIC_MODEL: model name (default claude-sonnet-4-5)
    - AI_MAX_TOKENS: output token limit for todo generation (default 1024)
    - AI_ANALYSIS_MAX_TOKENS: output token limit for analysis (default 2048)
    - AI_TIMEOUT_SECONDS: request timeout for a model call (default 30)
    - CORS_ALLOW_ORIGINS: comma-separated origins (default http://localhost:5173)
    """

    anthropic_api_key: Optional[str]
    anthropic_model: str
    max_tokens: int
    analysis_max_tokens: int
    timeout_seconds: float
    cors_allow_origins: list[str]

    @property
    def ai_configured(self) -> bool:
        return bool(self.anthropic_api_key) and self.anthropic_api_key != PLACEHOLDER_API_KEY


def _get_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except ValueError:
        return default


def get_settings() -> Settings:
    """Read settings fresh from the environment on every call."""
    origins = os.getenv("CORS_ALLOW_ORIGINS", "http://localhost:5173")
    return Settings(
        anthropic_api_key=os.getenv("ANTHROPIC_API_KEY") or None,
        anthropic_model=os.getenv("ANTHROPIC_MODEL", "claude-sonnet-4-5"),
        max_tokens=_get_int("AI_MAX_TOKENS", 1024),
        analysis_max_tokens=_get_int("AI_ANALYSIS_MAX_TOKENS", 2048),
        timeout_seconds=_get_float("AI_TIMEOUT_SECONDS", 30.0),
        cors_allow_origins=[o.strip() for o in origins.split(",") if o.strip()],
    )
