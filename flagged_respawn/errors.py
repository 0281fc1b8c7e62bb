class RespawnError(Exception):
    """Base exception for flagged-respawn errors."""

    pass


class ConfigurationError(RespawnError):
    """Raised when flags or the argument vector are missing."""

    pass


class SpawnError(RespawnError):
    """Raised when the child process cannot be created."""

    pass


class RelayError(RespawnError):
    """Raised when child output cannot be copied to the parent streams."""

    pass


class ProviderError(RespawnError):
    """Raised when a recognized-flag provider fails."""

    pass


class ConfigError(RespawnError):
    """Raised when the config file cannot be used."""

    pass
