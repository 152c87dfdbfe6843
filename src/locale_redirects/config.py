# Copyright (c) 2025 Henru Wang
# All rights reserved.

"""Configuration loading and validation for locale redirect tables."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration is missing something an operation needs."""

    pass


class Config:
    """Configuration for locale redirect tables.

    Loads configuration from .locale_redirects.yml with validation and defaults.
    The content root environment variables override the file.
    """

    DEFAULTS: Dict[str, Any] = {
        "content_root": "",
        "content_translated_root": "",
        "content_archived_root": "",
        "redirects_filename": "_redirects.txt",
        "strict_cycles": False,
    }

    ENVIRONMENT_OVERRIDES = {
        "content_root": "CONTENT_ROOT",
        "content_translated_root": "CONTENT_TRANSLATED_ROOT",
        "content_archived_root": "CONTENT_ARCHIVED_ROOT",
    }

    def __init__(
        self,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        **overrides: Any,
    ):
        """Initialize configuration.

        Args:
            config_path: Path to configuration file. If None, uses default location.
            environ: Environment to read overrides from. Defaults to os.environ.
            **overrides: Values applied last, validated like file values.
        """
        if config_path is None:
            config_path = Path.cwd() / ".locale_redirects.yml"

        self.config_path = config_path
        self._config: Dict[str, Any] = {}
        self._load_config()
        self._apply_environment(os.environ if environ is None else environ)
        if overrides:
            self._validate_and_merge(overrides)

    def _load_config(self) -> None:
        """Load and validate configuration from file."""
        if not self.config_path.exists():
            logger.info(f"Configuration file not found at {self.config_path}, using defaults")
            self._config = self.DEFAULTS.copy()
            return

        try:
            with open(self.config_path, encoding="utf-8") as f:
                loaded_config = yaml.safe_load(f)

            if loaded_config is None:
                logger.warning("Configuration file is empty, using defaults")
                self._config = self.DEFAULTS.copy()
                return

            if not isinstance(loaded_config, dict):
                logger.warning(
                    f"Configuration file must contain a YAML dictionary, "
                    f"got {type(loaded_config)}, using defaults"
                )
                self._config = self.DEFAULTS.copy()
                return

            # Start with defaults and override with loaded values
            self._config = self.DEFAULTS.copy()
            self._validate_and_merge(loaded_config)

        except yaml.YAMLError as e:
            logger.warning(
                f"Error parsing configuration file {self.config_path}: {e}, using defaults"
            )
            self._config = self.DEFAULTS.copy()
        except OSError as e:
            logger.warning(
                f"Unexpected error loading configuration file "
                f"{self.config_path}: {e}, using defaults"
            )
            self._config = self.DEFAULTS.copy()

    def _apply_environment(self, environ: Mapping[str, str]) -> None:
        for key, variable in self.ENVIRONMENT_OVERRIDES.items():
            value = environ.get(variable, "").strip()
            if value:
                logger.debug(f"Using {variable} for '{key}'")
                self._config[key] = value

    def _validate_and_merge(self, loaded_config: Mapping[str, Any]) -> None:
        """Validate loaded configuration and merge with defaults.

        Invalid parameters are logged as warnings and defaults are used.
        """
        for key, value in loaded_config.items():
            if key not in self.DEFAULTS:
                logger.warning(f"Unknown configuration parameter '{key}', ignoring")
                continue

            if not self._validate_parameter(key, value):
                logger.warning(
                    f"Invalid value for '{key}': {value}, using default {self.DEFAULTS[key]!r}"
                )
                continue

            self._config[key] = str(value) if isinstance(value, Path) else value

    def _validate_parameter(self, key: str, value: Any) -> bool:
        """Validate a configuration parameter.

        Returns:
            True if valid, False if invalid
        """
        if key in ("content_root", "content_translated_root", "content_archived_root"):
            return isinstance(value, (str, Path))

        expected_type = type(self.DEFAULTS[key])
        if not isinstance(value, expected_type):
            return False

        if key == "redirects_filename":
            # A bare filename, never a path
            return bool(value) and "/" not in value and "\\" not in value
        return True

    def _path(self, key: str) -> Optional[Path]:
        value = self._config[key]
        return Path(value) if value else None

    @property
    def content_root(self) -> Optional[Path]:
        """Root of the en-US content tree."""
        return self._path("content_root")

    @property
    def content_translated_root(self) -> Optional[Path]:
        """Root of the translated content tree (every locale but en-US)."""
        return self._path("content_translated_root")

    @property
    def content_archived_root(self) -> Optional[Path]:
        """Root of archived content, if any."""
        return self._path("content_archived_root")

    @property
    def redirects_filename(self) -> str:
        """Name of the per-locale redirect table file."""
        value = self._config["redirects_filename"]
        assert isinstance(value, str)
        return value

    @property
    def strict_cycles(self) -> bool:
        """Whether redirect cycles abort a write instead of being dropped."""
        value = self._config["strict_cycles"]
        assert isinstance(value, bool)
        return value
