"""Application configuration using pydantic-settings, plus the local config file."""

import json
import logging
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

PRODUCTION_API_URL = "https://shot-elixir.fly.dev"
LOCAL_API_URL = "http://localhost:4002"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CHIWAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_url: str = PRODUCTION_API_URL
    local_api_url: str = LOCAL_API_URL
    config_dir: Path = Path.home() / ".chiwar"

    debug: bool = False

    # HTTP
    http_timeout: float = 30.0

    # Device authorization polling
    auth_poll_interval: float = 2.0
    auth_max_poll_attempts: int = 300  # 10 minutes at 2s

    # Request logging (disabled when unset)
    request_log_dir: str | None = None
    request_log_rotation_count: int = 50  # Keep last N log files

    @property
    def config_file(self) -> Path:
        return self.config_dir.expanduser() / "config.json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class StoredConfig(BaseModel):
    """Values persisted between CLI invocations."""

    token: str | None = None
    api_url: str | None = None
    current_campaign_id: str | None = None
    current_encounter_id: str | None = None


class ConfigStore:
    """Reads and writes the JSON config file holding the session token and current context."""

    def __init__(self, settings: Settings | None = None, path: Path | None = None) -> None:
        self.settings = settings or get_settings()
        self.path = path or self.settings.config_file

    def load(self) -> StoredConfig:
        """Load stored config; a missing or unreadable file yields defaults."""
        if not self.path.exists():
            return StoredConfig()
        try:
            return StoredConfig.model_validate(json.loads(self.path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable config file {self.path}: {e}")
            return StoredConfig()

    def save(self, config: StoredConfig) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(config.model_dump_json(indent=2, exclude_none=True), encoding="utf-8")

    def update(self, **values: str | None) -> StoredConfig:
        """Set fields on the stored config and save it."""
        config = self.load().model_copy(update=values)
        self.save(config)
        return config

    @property
    def token(self) -> str | None:
        return self.load().token

    def set_token(self, token: str) -> None:
        self.update(token=token)

    def clear_token(self) -> None:
        self.update(token=None)

    @property
    def api_url(self) -> str:
        """Effective API URL: the stored one, else the configured default."""
        return self.load().api_url or self.settings.api_url

    def set_api_url(self, url: str) -> None:
        self.update(api_url=url)

    @property
    def current_campaign_id(self) -> str | None:
        return self.load().current_campaign_id

    def set_current_campaign_id(self, campaign_id: str) -> None:
        self.update(current_campaign_id=campaign_id)

    @property
    def current_encounter_id(self) -> str | None:
        return self.load().current_encounter_id

    def set_current_encounter_id(self, encounter_id: str) -> None:
        self.update(current_encounter_id=encounter_id)


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Configure root logging for a CLI run."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug or verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
