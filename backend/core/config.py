import os
import logging
from dataclasses import dataclass
from typing import Optional
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# --- Replicate Configuration ---
DEFAULT_REPLICATE_API_URL = "https://api.replicate.com/v1/predictions"
DEFAULT_AI_DETECTOR_VERSION = "f1f3098b63028679982e0523e0a306a66ed26edf9c48ce43762fc64a5d01d0c7"
DEFAULT_REPLICATE_TIMEOUT_SECONDS = 60.0

PLACEHOLDER_TOKENS = {"your_replicate_api_token"}


def is_replicate_configured(api_token: Optional[str]) -> bool:
    """True when the token looks like a real credential rather than blank or a template value."""
    if not api_token or not api_token.strip():
        return False
    token = api_token.strip()
    if token in PLACEHOLDER_TOKENS or token.lower().startswith("your_"):
        return False
    return True


def _float_env(name: str, default: float) -> float:
    raw_value = os.getenv(name)
    if not raw_value:
        return default
    try:
        return float(raw_value)
    except ValueError:
        logger.warning(f"{name}={raw_value!r} is not a number. Using default {default}.")
        return default


@dataclass(frozen=True)
class Settings:
    replicate_api_token: Optional[str] = None
    replicate_api_url: str = DEFAULT_REPLICATE_API_URL
    ai_detector_version: str = DEFAULT_AI_DETECTOR_VERSION
    replicate_timeout_seconds: float = DEFAULT_REPLICATE_TIMEOUT_SECONDS
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            replicate_api_token=os.getenv("REPLICATE_API_TOKEN"),
            replicate_api_url=os.getenv("REPLICATE_API_URL", DEFAULT_REPLICATE_API_URL),
            ai_detector_version=os.getenv("AI_DETECTOR_VERSION", DEFAULT_AI_DETECTOR_VERSION),
            replicate_timeout_seconds=_float_env("REPLICATE_TIMEOUT_SECONDS", DEFAULT_REPLICATE_TIMEOUT_SECONDS),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    @property
    def replicate_configured(self) -> bool:
        return is_replicate_configured(self.replicate_api_token)
