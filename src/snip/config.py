"""
Configuration management for snip.

Settings are resolved from, in order of precedence: explicit keyword
arguments, ``SNIP_*`` environment variables, a ``.env`` file, the user
config file (``$XDG_CONFIG_HOME/snip/config.json``) and built-in defaults.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

from dotenv import load_dotenv
from loguru import logger
from pydantic import Field, TypeAdapter, ValidationError, model_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from snip.errors import ConfigError

# Load environment variables
load_dotenv()

# Keys a user may persist in the config file
USER_CONFIG_KEYS = ("editor", "data_dir", "db_path", "default_shell", "confirm_run")


def _xdg_config_home() -> Path:
    return Path(os.getenv("XDG_CONFIG_HOME") or Path.home() / ".config")


def _xdg_data_home() -> Path:
    return Path(os.getenv("XDG_DATA_HOME") or Path.home() / ".local" / "share")


def default_config_file() -> Path:
    """Location of the user config file."""
    return Path(os.getenv("SNIP_CONFIG_FILE") or _xdg_config_home() / "snip" / "config.json")


def read_user_config(path: Path) -> Dict[str, Any]:
    """
    Read the user config file, keeping only known keys.

    A missing file yields an empty mapping; a malformed one is reported and
    ignored so that snip always starts with usable defaults.
    """
    path = Path(path)
    if not path.exists():
        return {}

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}

    if not isinstance(raw, dict):
        logger.warning(f"Ignoring config file {path}: expected a JSON object")
        return {}

    ignored = sorted(set(raw) - set(USER_CONFIG_KEYS))
    if ignored:
        logger.debug(f"Ignoring unknown config keys: {', '.join(ignored)}")

    return {key: value for key, value in raw.items() if key in USER_CONFIG_KEYS}


class UserConfigSource(PydanticBaseSettingsSource):
    """Settings source backed by the user's JSON config file."""

    def __init__(self, settings_cls: Type[BaseSettings], config_file: Optional[Path] = None):
        super().__init__(settings_cls)
        self.config_file = Path(config_file or default_config_file())
        self._values = read_user_config(self.config_file)

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        return self._values.get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        return dict(self._values)


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="SNIP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    data_dir: Path = Field(default_factory=lambda: _xdg_data_home() / "snip")
    db_path: Optional[Path] = None
    config_file: Path = Field(default_factory=default_config_file)

    # Execution
    editor: str = Field(default_factory=lambda: os.getenv("EDITOR") or "vi")
    default_shell: str = Field(default_factory=lambda: os.getenv("SHELL") or "sh")
    confirm_run: bool = True

    # Logging
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    @model_validator(mode="after")
    def _default_db_path(self) -> "Settings":
        if self.db_path is None:
            self.db_path = self.data_dir / "db.json"
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        config_file = init_settings().get("config_file")
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            UserConfigSource(settings_cls, config_file),
            file_secret_settings,
        )


def _coerce_value(key: str, value: Any) -> Any:
    """Validate a raw (usually string) value against the settings field type."""
    annotation = Settings.model_fields[key].annotation
    try:
        return TypeAdapter(annotation).validate_python(value)
    except ValidationError as e:
        raise ConfigError(f"Invalid value for {key}: {value!r} ({e.errors()[0]['msg']})")


def save_user_config(values: Dict[str, Any], config_file: Optional[Path] = None) -> Dict[str, Any]:
    """
    Merge values into the user config file.

    Returns:
        The full content written to disk
    """
    unknown = [key for key in values if key not in USER_CONFIG_KEYS]
    if unknown:
        raise ConfigError(
            f"Unknown config key(s): {', '.join(unknown)}. "
            f"Allowed: {', '.join(USER_CONFIG_KEYS)}"
        )

    path = Path(config_file or default_config_file())
    current = read_user_config(path)
    for key, value in values.items():
        current[key] = _coerce_value(key, value)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(current, indent=2, default=str) + "\n", encoding="utf-8")
    logger.debug(f"Saved config to {path}")
    return current


# Global settings instance, created on first use
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        try:
            _settings = Settings()
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e.errors()[0]['loc']} {e.errors()[0]['msg']}")
    return _settings


def update_settings(**kwargs: Any) -> Settings:
    """Update settings with new values."""
    global _settings
    _settings = Settings(**kwargs)
    return _settings
