import yaml
import os
from pathlib import Path
from pydantic import BaseModel, Field
from typing import Optional
from dotenv import load_dotenv
from loguru import logger

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

from backend.app.core.logging_config import setup_logging

load_dotenv(dotenv_path=PROJECT_ROOT / ".env")


class LoggingConfig(BaseModel):
    level: str = "INFO"
    console_enabled: bool = True
    console_level: str = "DEBUG"
    file_enabled: bool = True
    file_path: str = "logs/app.log"
    file_level: str = "INFO"
    rotation: str = "10 MB"
    retention: str = "7 days"
    format: str = (
        "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"
    )


class BackendConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 8000
    cache_dir: str = "cache"


class WordPressOrgConfig(BaseModel):
    api_url: str = "https://api.wordpress.org/plugins/info/1.2/"
    reviews_base_url: str = "https://wordpress.org/support/plugin"
    timeout_seconds: float = 10.0
    locale: str = "en_US"
    user_agent: str = "wp-plugin-reviews/1.0.0"


class CacheConfig(BaseModel):
    duration_hours: int = Field(24, ge=1, le=168)
    short_duration_hours: int = Field(1, ge=1)
    memory_maxsize: int = 1024
    namespace: str = "wppr"


class DatabaseConfig(BaseModel):
    user: str = Field(default_factory=lambda: os.environ.get("user", ""))
    password: str = Field(default_factory=lambda: os.environ.get("password", ""))
    host: str = Field(default_factory=lambda: os.environ.get("host", ""))
    port: str = Field(default_factory=lambda: os.environ.get("port", "5432"))
    dbname: str = Field(default_factory=lambda: os.environ.get("dbname", ""))
    min_connections: int = 1
    max_connections: int = 10
    table_prefix: str = Field(
        default_factory=lambda: os.environ.get("table_prefix", "wp_")
    )


class Settings(BaseModel):
    backend: BackendConfig = Field(default_factory=BackendConfig)
    wporg: WordPressOrgConfig = Field(default_factory=WordPressOrgConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _settings_file_path() -> Path:
    override = os.environ.get("WPPR_SETTINGS_FILE")
    if override:
        return Path(override)
    return PROJECT_ROOT / "config" / "settings.yaml"


def load_config(config_file_path: Optional[Path] = None) -> Settings:
    config_file_path = config_file_path or _settings_file_path()

    config_data = {}
    if config_file_path.exists():
        with open(config_file_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning(
            f"Settings file not found at {config_file_path}. Falling back to defaults."
        )

    backend_data = config_data.setdefault("backend", {})
    backend_data["cache_dir"] = str(
        PROJECT_ROOT / backend_data.get("cache_dir", BackendConfig().cache_dir)
    )
    config_data["database"] = config_data.get("database") or {}

    loaded_settings = Settings(**config_data)

    setup_logging(loaded_settings.logging.model_dump(), PROJECT_ROOT)

    return loaded_settings


settings = load_config()

# Ensure cache directory exists at runtime
Path(settings.backend.cache_dir).mkdir(parents=True, exist_ok=True)
