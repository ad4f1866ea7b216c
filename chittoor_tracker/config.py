"""
Configuration management for the Chittoor project tracker.

This module provides the configuration dataclass for data sources, backend
table names, location filter thresholds and logging options.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Optional
import os
from pathlib import Path

from .exceptions import ConfigurationError


VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

# Environment variables read by TrackerConfig.from_env
ENV_PREFIX = "CHITTOOR_"


@dataclass
class TrackerConfig:
    """Configuration class for the project tracker."""

    # Bundled data is used when no villages file is given
    villages_file: Optional[str] = None

    # Output configuration
    output_directory: str = "output"

    # Backend table and bucket names
    remote_locations_table: str = "mandal_villages"
    projects_table: str = "chittoor_project_approvals"
    images_bucket: str = "project-images"

    # Cascading filter thresholds
    mandal_filter_min_chars: int = 2
    village_filter_min_chars: int = 3

    # Fuzzy village suggestions
    suggestion_limit: int = 5
    suggestion_score_cutoff: int = 70

    # Backend connection (both required for remote features)
    backend_url: Optional[str] = None
    backend_key: Optional[str] = None

    # Logging configuration
    log_level: str = "INFO"
    log_file: Optional[str] = None

    def __post_init__(self):
        """Validate configuration after initialization."""
        self._validate_paths()
        self._validate_thresholds()
        self._validate_log_level()

    def _validate_paths(self):
        """Validate that the villages file exists when one is configured."""
        if self.villages_file and not os.path.exists(self.villages_file):
            raise ConfigurationError(
                f"Villages file not found: {self.villages_file}",
                config_key='villages_file',
                config_value=self.villages_file
            )

    def _validate_thresholds(self):
        """Validate filter and suggestion thresholds."""
        for key in ('mandal_filter_min_chars', 'village_filter_min_chars'):
            value = getattr(self, key)
            if value < 0:
                raise ConfigurationError(
                    f"{key} must not be negative: {value}",
                    config_key=key,
                    config_value=value
                )

        if self.suggestion_limit < 0:
            raise ConfigurationError(
                f"suggestion_limit must not be negative: {self.suggestion_limit}",
                config_key='suggestion_limit',
                config_value=self.suggestion_limit
            )

        if not 0 <= self.suggestion_score_cutoff <= 100:
            raise ConfigurationError(
                f"Suggestion score cutoff must be between 0 and 100: {self.suggestion_score_cutoff}",
                config_key='suggestion_score_cutoff',
                config_value=self.suggestion_score_cutoff
            )

    def _validate_log_level(self):
        """Normalize and validate the log level."""
        self.log_level = str(self.log_level).upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}",
                config_key='log_level',
                config_value=self.log_level,
                valid_values=VALID_LOG_LEVELS
            )

    @property
    def has_backend(self) -> bool:
        """True when both backend URL and key are configured."""
        return bool(self.backend_url) and bool(self.backend_key)

    def ensure_output_directory(self) -> Path:
        """Create output directory if it doesn't exist."""
        path = Path(self.output_directory)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @classmethod
    def from_dict(cls, config_dict: Dict) -> 'TrackerConfig':
        """Create configuration from dictionary."""
        return cls(**config_dict)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None, **overrides) -> 'TrackerConfig':
        """
        Create configuration from CHITTOOR_* environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            **overrides: Explicit values that take precedence over the environment

        Returns:
            TrackerConfig instance
        """
        environ = os.environ if environ is None else environ
        values = {}

        string_keys = [
            'villages_file', 'output_directory', 'remote_locations_table',
            'projects_table', 'images_bucket', 'backend_url', 'backend_key',
            'log_level', 'log_file'
        ]
        int_keys = [
            'mandal_filter_min_chars', 'village_filter_min_chars',
            'suggestion_limit', 'suggestion_score_cutoff'
        ]

        for key in string_keys:
            raw = environ.get(ENV_PREFIX + key.upper())
            if raw:
                values[key] = raw

        for key in int_keys:
            raw = environ.get(ENV_PREFIX + key.upper())
            if raw:
                try:
                    values[key] = int(raw)
                except ValueError:
                    raise ConfigurationError(
                        f"{ENV_PREFIX + key.upper()} must be an integer: {raw}",
                        config_key=key,
                        config_value=raw
                    )

        values.update(overrides)
        return cls(**values)

    def to_dict(self) -> Dict:
        """Convert configuration to dictionary, masking the backend key."""
        data = asdict(self)
        if data.get('backend_key'):
            data['backend_key'] = '***'
        return data
