"""Exceptions raised while loading imgstream configuration."""


class ConfigError(Exception):
    """Raised when configuration data cannot be read or validated."""
