"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised when configuration values are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when required configuration values are absent or blank."""


class UnknownCityError(ConfigurationError):
    """Raised when a city name is not part of the configured catalog."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown city: {name}")
        self.name = name
