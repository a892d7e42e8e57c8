"""Settings management using Pydantic for type validation and configuration."""

import logging
import os
from pathlib import Path
from typing import Any, Optional, Union, cast

import yaml
from pydantic import Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

ENV_PREFIX = "CALENDARCLONE_"
CONFIG_FILE_ENV = f"{ENV_PREFIX}CONFIG_FILE"


class CalendarCloneSettings(BaseSettings):
    """Application settings with environment variable and YAML support.

    Precedence, highest first: constructor arguments, ``CALENDARCLONE_*``
    environment variables (and ``.env``), the YAML config file, field defaults.
    """

    _config_file: Optional[Path] = PrivateAttr(default=None)

    # Application
    app_name: str = Field(default="Calendar Clone", description="Application name")
    log_level: str = Field(default="INFO", description="Console log level")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    # Recurrence expansion
    max_recurrence_iterations: int = Field(
        default=365, ge=1, description="Safety ceiling on recurrence steps per expansion"
    )
    recurrence_horizon_years: int = Field(
        default=1,
        ge=0,
        description="Implicit recurrence end, in years past the query range, for open-ended series",
    )

    # ICS interchange
    ics_prodid: str = Field(default="-//Calendar Clone//ES", description="PRODID written on export")
    ics_uid_domain: str = Field(
        default="calendar-clone", description="Domain suffix appended to exported UIDs"
    )
    ics_fold_lines: bool = Field(default=True, description="Fold exported lines at 75 octets")
    ics_export_until: bool = Field(
        default=True, description="Write recurrence end as RRULE UNTIL on export"
    )
    max_ics_size_bytes: int = Field(
        default=50 * 1024 * 1024, ge=1, description="Largest ICS file accepted for import"
    )

    # Calendar defaults
    default_calendar_id: str = Field(
        default="primary", description="Calendar that receives imported events"
    )
    agenda_days: int = Field(default=7, ge=1, description="Days shown by the agenda command")

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    def __init__(self, config_file: Optional[Union[str, Path]] = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._config_file = self._find_config_file(config_file)
        self._load_yaml_config()

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def config_file(self) -> Optional[Path]:
        """Path of the YAML file the settings were loaded from, if any."""
        return self._config_file

    def _find_config_file(self, explicit: Optional[Union[str, Path]]) -> Optional[Path]:
        """Locate the YAML config file.

        An explicit path (argument or CALENDARCLONE_CONFIG_FILE) is used as-is
        even when missing, so the caller gets a warning instead of a silent
        fallback to another file.
        """
        if explicit:
            return Path(explicit).expanduser()
        env_path = os.environ.get(CONFIG_FILE_ENV)
        if env_path:
            return Path(env_path).expanduser()

        candidates = [
            Path.cwd() / "config" / "config.yaml",
            Path.home() / ".config" / "calendarclone" / "config.yaml",
        ]
        for candidate in candidates:
            if candidate.exists():
                return candidate
        return None

    def _apply(self, key: str, value: Any) -> None:
        """Apply one YAML value unless a higher-precedence source already set it."""
        if key not in type(self).model_fields:
            logger.debug("Ignoring unknown config key %r", key)
            return
        if key in self.model_fields_set:
            return
        try:
            setattr(self, key, value)
        except ValueError as e:
            logger.warning("Invalid value for %s in config file: %s", key, e)
            return
        # setattr marks the field as explicitly set; YAML values must stay overridable
        self.model_fields_set.discard(key)

    def _load_basic_settings(self, config_data: dict) -> None:
        for key in ("app_name", "log_level", "log_file", "default_calendar_id", "agenda_days"):
            if key in config_data:
                self._apply(key, config_data[key])

        logging_section = config_data.get("logging")
        if isinstance(logging_section, dict):
            if "level" in logging_section:
                self._apply("log_level", logging_section["level"])
            if "file" in logging_section:
                self._apply("log_file", logging_section["file"])

    def _load_recurrence_config(self, config_data: dict) -> None:
        section = config_data.get("recurrence")
        if not isinstance(section, dict):
            section = {}
        mapping = {
            "max_iterations": "max_recurrence_iterations",
            "horizon_years": "recurrence_horizon_years",
        }
        for yaml_key, field_name in mapping.items():
            if yaml_key in section:
                self._apply(field_name, section[yaml_key])
            elif field_name in config_data:
                self._apply(field_name, config_data[field_name])

    def _load_ics_config(self, config_data: dict) -> None:
        section = config_data.get("ics")
        if not isinstance(section, dict):
            section = {}
        mapping = {
            "prodid": "ics_prodid",
            "uid_domain": "ics_uid_domain",
            "fold_lines": "ics_fold_lines",
            "export_until": "ics_export_until",
            "max_size_bytes": "max_ics_size_bytes",
        }
        for yaml_key, field_name in mapping.items():
            if yaml_key in section:
                self._apply(field_name, section[yaml_key])
            elif field_name in config_data:
                self._apply(field_name, config_data[field_name])

    def _load_yaml_config(self) -> None:
        """Load configuration from the YAML file if there is one."""
        config_file = self._config_file
        if config_file is None:
            return
        if not config_file.exists():
            logger.warning("Config file %s not found; using defaults", config_file)
            return

        try:
            with config_file.open(encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            # Don't fail if YAML loading fails, continue with defaults/env vars
            logger.warning("Could not load YAML config from %s: %s", config_file, e)
            return

        if not config_data:
            return
        if not isinstance(config_data, dict):
            logger.warning("Config file %s must contain a mapping at top level", config_file)
            return

        self._load_basic_settings(config_data)
        self._load_recurrence_config(config_data)
        self._load_ics_config(config_data)
        logger.debug("Loaded configuration from %s", config_file)


# Global settings management
_settings_instance: Optional[CalendarCloneSettings] = None


def get_settings() -> CalendarCloneSettings:
    """Get the global settings instance, creating it lazily if needed."""
    if globals()["_settings_instance"] is None:
        globals()["_settings_instance"] = CalendarCloneSettings()
    return cast(CalendarCloneSettings, globals()["_settings_instance"])


def reset_settings() -> None:
    """Reset the global settings instance (primarily for testing)."""
    globals()["_settings_instance"] = None
