"""Watcher configuration via environment variables and a per-user TOML file."""

import logging
import os
import sys
import tomllib
from pathlib import Path
from typing import Annotated

from pydantic import ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsError
from pydantic_settings.sources import PydanticBaseSettingsSource, TomlConfigSettingsSource

logger = logging.getLogger(__name__)

APP_NAME = "aw-watcher-network"

ENV_PREFIX = "AW_WATCHER_NETWORK_"
MAX_PORT = 65535


def config_dir() -> Path:
    """Return the platform-standard ActivityWatch config directory."""
    if sys.platform == "win32":
        base = Path(os.environ.get("LOCALAPPDATA", Path.home() / "AppData" / "Local"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return base / "activitywatch" / APP_NAME


# Path to the TOML file (patch in tests to use tmp_path / "config.toml")
_CONFIG_FILE: Path = config_dir() / f"{APP_NAME}.toml"

_DEFAULT_CONFIG = """\
# aw-watcher-network configuration

# Seconds between internet connectivity checks
polling_interval_seconds = 5

# Seconds between Wi-Fi scans (macOS and Linux only)
wifi_scan_interval_seconds = 300

# Wi-Fi backend: auto, macos, nmcli, iwlist, mock or none
wifi_backend = "auto"
"""


class Settings(BaseSettings):
    model_config = {
        "env_prefix": ENV_PREFIX,
        "extra": "ignore",
    }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Load the TOML file from _CONFIG_FILE (patchable in tests)
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=_CONFIG_FILE),
        )

    # Polling
    polling_interval_seconds: float = 5
    wifi_scan_interval_seconds: float = 300

    # ActivityWatch server
    server_host: str = "localhost"
    server_port: int = 5600
    bucket_id: str = APP_NAME
    wifi_bucket_id: str = f"{APP_NAME}-wifi"

    # Logging
    log_level: str = "info"

    # Connectivity probe
    probe_targets: Annotated[list[str], NoDecode] = ["1.1.1.1:53", "8.8.8.8:53", "9.9.9.9:53"]
    probe_timeout_seconds: float = 1.0

    # Wi-Fi: auto, macos, nmcli, iwlist, mock, none
    wifi_backend: str = "auto"
    command_timeout: float | None = None  # no limit on scan commands by default
    extra_excluded_labels: Annotated[list[str], NoDecode] = []

    @field_validator("polling_interval_seconds", "wifi_scan_interval_seconds", "probe_timeout_seconds")
    @classmethod
    def check_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("probe_targets", "extra_excluded_labels", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: object) -> list[str]:
        """Parse comma-separated string or list."""
        if isinstance(v, str):
            return [s.strip() for s in v.split(",") if s.strip()]
        if isinstance(v, list):
            return [s for s in v if s]
        return []

    @field_validator("probe_targets")
    @classmethod
    def check_targets(cls, v: list[str]) -> list[str]:
        for target in v:
            host, sep, port = target.rpartition(":")
            if not sep or not host or not port.isdigit():
                raise ValueError(f"probe target must be host:port, got {target!r}")
            if not 0 < int(port) <= MAX_PORT:
                raise ValueError(f"probe target port out of range: {target!r}")
        return v

    def get_probe_targets(self) -> list[tuple[str, int]]:
        """Return probe targets as (host, port) pairs, in configured order."""
        pairs = []
        for target in self.probe_targets:
            host, _, port = target.rpartition(":")
            pairs.append((host.strip("[]"), int(port)))
        return pairs


class _EnvOnlySettings(Settings):
    """Settings from init kwargs and environment only, skipping the TOML file."""

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings)


def write_default_config(path: Path) -> None:
    """Write the commented default config file, creating parent dirs."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(_DEFAULT_CONFIG, encoding="utf-8")
    logger.info("Created default config at %s", path)


def load_config() -> Settings:
    """Load configuration from the TOML file and environment (env overrides file).

    Creates the file with defaults on first run. A malformed or invalid file
    is skipped and the environment is applied on top of the built-in defaults.
    """
    if not _CONFIG_FILE.exists():
        try:
            write_default_config(_CONFIG_FILE)
        except OSError as e:
            logger.warning("Could not create config file %s: %s", _CONFIG_FILE, e)
    try:
        return Settings()
    except (tomllib.TOMLDecodeError, ValidationError, SettingsError, OSError) as e:
        logger.warning("Ignoring unusable config %s: %s", _CONFIG_FILE, e)
    try:
        return _EnvOnlySettings()
    except (ValidationError, SettingsError) as e:
        logger.warning("Ignoring invalid %s* environment: %s", ENV_PREFIX, e)
        return Settings.model_construct()
