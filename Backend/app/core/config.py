# Backend/app/core/config.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Dit bestand staat in Backend/app/core/config.py → parents[2] = Backend
BACKEND_DIR = Path(__file__).resolve().parents[2]
ENV_FILE = BACKEND_DIR / ".env"
load_dotenv(ENV_FILE, override=False)  # pre-load in procesomgeving


class Settings(BaseSettings):
    # ---- App ----
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"

    # ---- Profile decay ----
    # Fallback when a profile has neither country_iso nor country_code
    DEFAULT_COUNTRY_CODE: str = "ZA"
    # Summary memo window, matches the 30s read cache of the frontend
    PROFILE_CACHE_TTL_SECONDS: int = 30
    # Seed decay configs; None → Backend/config/decay_configs.yml
    DECAY_PRESETS_PATH: Optional[str] = None

    # Pydantic v2 settings
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE),
        env_file_encoding="utf-8",
        case_sensitive=False,   # toleranter voor env-namen
        extra="ignore",         # negeer alle overige .env-keys
    )


settings = Settings()


def get_decay_presets_path() -> Path:
    """
    Resolve the decay presets YAML path (absolute, or relative to Backend/).
    """
    if not settings.DECAY_PRESETS_PATH:
        return BACKEND_DIR / "config" / "decay_configs.yml"
    path = Path(settings.DECAY_PRESETS_PATH)
    if not path.is_absolute():
        path = BACKEND_DIR / path
    return path
