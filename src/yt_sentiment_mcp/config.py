"""Pipeline configuration via environment variables."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_ENV_PATH = Path.home() / ".config" / "yt-sentiment-mcp" / ".env"


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
        return value[1:-1]
    return value


def read_env_file(path: Path) -> dict[str, str]:
    """Read ``KEY=VALUE`` lines from *path*.

    Blank lines, ``#`` comments and an optional ``export`` prefix are
    ignored. Values may be single- or double-quoted. No expansion.
    """
    if not path.is_file():
        return {}

    values: dict[str, str] = {}
    for raw in path.read_text().splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        line = line.removeprefix("export ").strip()
        key, _, value = line.partition("=")
        if key.strip():
            values[key.strip()] = _strip_quotes(value.strip())
    return values


def merge_env_file(path: Path | None = None) -> list[str]:
    """Copy vars from the shared env file into ``os.environ`` where unset.

    Process environment always wins; a blank value counts as unset.

    Returns:
        Names of the variables that were injected.
    """
    injected = []
    for key, value in read_env_file(path or DEFAULT_ENV_PATH).items():
        if not os.environ.get(key, "").strip():
            os.environ[key] = value
            injected.append(key)
    return injected


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    gemini_api_key: str = Field(default="")
    gemini_model: str = Field(default="gemini-2.5-pro")
    gemini_temperature: float = Field(default=1.0)
    youtube_api_key: str = Field(default="")
    max_comments_to_fetch: int = Field(default=5000)
    snapshot_dir: str = Field(default="")
    weaviate_url: str = Field(default="")
    weaviate_api_key: str = Field(default="")
    tracing_enabled: bool = Field(default=False)
    mlflow_tracking_uri: str = Field(default="")
    mlflow_experiment_name: str = Field(default="yt-sentiment-mcp")

    @field_validator("max_comments_to_fetch")
    @classmethod
    def validate_comment_cap(cls, value: int) -> int:
        if value < 1:
            raise ValueError("max_comments_to_fetch must be >= 1")
        return value

    @field_validator("gemini_temperature")
    @classmethod
    def validate_temperature(cls, value: float) -> float:
        if not 0.0 <= value <= 2.0:
            raise ValueError("gemini_temperature must be between 0.0 and 2.0")
        return value

    @field_validator("weaviate_url")
    @classmethod
    def validate_weaviate_url(cls, value: str) -> str:
        value = value.strip()
        if value and "://" not in value:
            host = value.split(":", 1)[0]
            scheme = "http" if host in ("localhost", "127.0.0.1") else "https"
            value = f"{scheme}://{value}"
        return value

    @property
    def warehouse_enabled(self) -> bool:
        return bool(self.weaviate_url)

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables."""
        tracking_uri = os.getenv("MLFLOW_TRACKING_URI", "")
        tracing_flag = os.getenv("YT_SENTIMENT_TRACING_ENABLED", "").lower()
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY", ""),
            gemini_model=os.getenv("GEMINI_MODEL", "gemini-2.5-pro"),
            gemini_temperature=float(os.getenv("GEMINI_TEMPERATURE", "1.0")),
            youtube_api_key=os.getenv("YOUTUBE_API_KEY", ""),
            max_comments_to_fetch=int(os.getenv("MAX_COMMENTS_TO_FETCH", "5000")),
            snapshot_dir=os.getenv(
                "SNAPSHOT_DIR",
                str(Path.home() / ".cache" / "yt-sentiment-mcp" / "snapshots"),
            ),
            weaviate_url=os.getenv("WEAVIATE_URL", ""),
            weaviate_api_key=os.getenv("WEAVIATE_API_KEY", ""),
            tracing_enabled=tracing_flag != "false" and bool(tracking_uri),
            mlflow_tracking_uri=tracking_uri,
            mlflow_experiment_name=os.getenv("MLFLOW_EXPERIMENT_NAME", "yt-sentiment-mcp"),
        )


_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the global config singleton, creating it on first access.

    Merges ``~/.config/yt-sentiment-mcp/.env`` before reading env vars.
    """
    global _config
    if _config is None:
        injected = merge_env_file()
        if injected:
            logger.info("Loaded %d var(s) from config: %s", len(injected), ", ".join(injected))
        _config = ServerConfig.from_env()
    return _config
