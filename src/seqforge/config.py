"""Configuration management for seqforge.

Configuration can come from:
- Default values
- A TOML file
- A plain dictionary (e.g. from an application's own settings)

Example:
    >>> from seqforge.config import Config
    >>> config = Config.load("seqforge.toml")
    >>> config.document.save_debounce_seconds
    0.1

A configuration file looks like::

    [document]
    save_debounce_seconds = 0.25
    max_overlap_iterations = 100

    [logging]
    verbosity = 2
    use_rich = false
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Mapping

import attrs

from seqforge.utils.logging import setup_logging

# =============================================================================
# Default Configuration Values
# =============================================================================

# Persistence defaults
DEFAULT_SAVE_DEBOUNCE_SECONDS = 0.1

# Overlap analysis defaults
DEFAULT_MAX_OVERLAP_ITERATIONS = 100

# Logging defaults
DEFAULT_VERBOSITY = 1


# =============================================================================
# Configuration Classes
# =============================================================================


@attrs.define
class DocumentConfig:
    """Configuration for sequence documents.

    Attributes:
        save_debounce_seconds: Window within which saves are coalesced.
        max_overlap_iterations: Safety cap for overlap depth estimation.
    """

    save_debounce_seconds: float = attrs.field(
        default=DEFAULT_SAVE_DEBOUNCE_SECONDS,
        converter=float,
        validator=attrs.validators.ge(0.0),
    )
    max_overlap_iterations: int = attrs.field(
        default=DEFAULT_MAX_OVERLAP_ITERATIONS,
        validator=[attrs.validators.instance_of(int), attrs.validators.ge(1)],
    )


@attrs.define
class LoggingConfig:
    """Configuration for logging.

    Attributes:
        verbosity: Verbosity level (0=warning, 1=info, 2=debug).
        use_rich: Use rich for console output.
        log_file: Optional file to log to.
    """

    verbosity: int = attrs.field(
        default=DEFAULT_VERBOSITY,
        validator=[attrs.validators.instance_of(int), attrs.validators.ge(0)],
    )
    use_rich: bool = True
    log_file: str | None = None


@attrs.define
class Config:
    """Main configuration container for seqforge.

    Attributes:
        document: Sequence document configuration.
        logging: Logging configuration.
    """

    document: DocumentConfig = attrs.Factory(DocumentConfig)
    logging: LoggingConfig = attrs.Factory(LoggingConfig)

    @classmethod
    def load(cls, path: Path | str | None = None) -> Config:
        """Load configuration from a TOML file.

        Args:
            path: Path to configuration file.
                  If None, returns default configuration.

        Returns:
            Loaded configuration object.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If configuration file is invalid.
        """
        if path is None:
            return cls()

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Invalid configuration file {path}: {e}") from e

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Build configuration from a nested dictionary.

        Args:
            data: Mapping with optional 'document' and 'logging' sections.

        Returns:
            Configuration object.

        Raises:
            ValueError: If a section or key is unknown, or a value is invalid.
        """
        sections = {"document": DocumentConfig, "logging": LoggingConfig}

        unknown = set(data) - set(sections)
        if unknown:
            raise ValueError(f"Unknown configuration sections: {sorted(unknown)}")

        kwargs = {}
        for name, section_cls in sections.items():
            values = data.get(name, {})
            if not isinstance(values, Mapping):
                raise ValueError(f"Configuration section '{name}' must be a table")

            allowed = {f.name for f in attrs.fields(section_cls)}
            bad_keys = set(values) - allowed
            if bad_keys:
                raise ValueError(f"Unknown keys in [{name}]: {sorted(bad_keys)}")

            try:
                kwargs[name] = section_cls(**values)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Invalid value in [{name}]: {e}") from e

        return cls(**kwargs)

    def setup_logging(self) -> logging.Logger:
        """Configure the seqforge logger from the [logging] section.

        Returns:
            The configured package logger.
        """
        return setup_logging(**attrs.asdict(self.logging))

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration.
        """
        return attrs.asdict(self)
