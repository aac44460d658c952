import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env early so env vars are available for YAML interpolation
load_dotenv(Path.cwd() / ".env")

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")

ENV_VAR_NAME = "CONSOLENAV_ENV"

_config_path_override: Path | None = None


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def set_config_path(path: Path | str | None) -> None:
    """Force a specific config file, e.g. from the CLI ``-f`` option."""
    global _config_path_override
    _config_path_override = Path(path) if path is not None else None


def get_config_path() -> Path:
    """Resolve the YAML config file.

    An explicit override wins; otherwise ``app.<CONSOLENAV_ENV>.yaml`` when the
    environment variable is set, falling back to ``app.yaml``.
    """
    if _config_path_override is not None:
        return _config_path_override

    env = os.environ.get(ENV_VAR_NAME, "").strip()
    if env and env != "production":
        return Path.cwd() / f"app.{env}.yaml"
    return Path.cwd() / "app.yaml"


def load_app_config() -> dict:
    """Load and parse the YAML config with environment variable interpolation."""
    config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f) or {}

    return interpolate_env_vars(config)


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = "sqlite+aiosqlite:///./consolenav.db"
    pool_size: int = 5
    pool_overflow: int = 10
    pool_timeout: int = 30
    echo: bool = False


class LogfireConfig(BaseModel):
    """Pydantic Logfire observability configuration."""

    enabled: bool = False
    service_name: str = "consolenav"
    environment: str | None = None
    sample_rate: float = 1.0
    console: bool = False


class SessionConfig(BaseModel):
    """Cookie session written by the console's login flow."""

    cookie_name: str = "session"
    max_age: int = 86400


class NavigationConfig(BaseModel):
    """Navigation manager configuration."""

    # Capability required to edit sections and pages
    manage_permission: str = "settings.edit"
    # Optional YAML file replacing the bundled baseline hierarchy
    baseline_file: str | None = None


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    debug: bool = False
    secret_key: str

    db: DatabaseConfig = DatabaseConfig()
    logfire: LogfireConfig = LogfireConfig()
    session: SessionConfig = SessionConfig()
    navigation: NavigationConfig = NavigationConfig()


_SECTION_MODELS: dict[str, type[BaseModel]] = {
    "db": DatabaseConfig,
    "logfire": LogfireConfig,
    "session": SessionConfig,
    "navigation": NavigationConfig,
}


@lru_cache
def get_settings() -> Settings:
    """Load settings from .env and the YAML config file."""
    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return Settings()

    updates = {}
    for name, model in _SECTION_MODELS.items():
        if name in app_config:
            updates[name] = model(**(app_config[name] or {}))

    if "debug" in app_config:
        updates["debug"] = bool(app_config["debug"])

    # secret_key may come from the YAML file instead of the environment
    if "secret_key" in app_config:
        base_settings = Settings(secret_key=app_config["secret_key"])
    else:
        base_settings = Settings()

    if updates:
        return base_settings.model_copy(update=updates)

    return base_settings


def clear_settings_cache() -> None:
    """Drop the cached settings so the next call reloads them."""
    get_settings.cache_clear()
