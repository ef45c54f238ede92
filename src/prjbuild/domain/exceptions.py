"""
Domain exceptions for the project graph.

Version parse failures are not exceptions; they surface as a None parsed
version. These types cover the conditions that must stop an operation.
"""


class ConfigurationError(Exception):
    """Raised when the configuration file is invalid."""

    pass


class ConfigurationAbsent(ConfigurationError):
    """Raised when no configuration file can be found at all."""

    pass


class VersionUndefined(Exception):
    """
    Raised when a unit has no usable primary version but one is required.

    Archive naming cannot proceed without a version, so the archive
    operation for that unit must be abandoned. Other units are unaffected.
    """

    def __init__(self, unit_name: str, message: str | None = None):
        """
        Args:
            unit_name: Solution or project whose version is undefined
            message: Optional override for the default message
        """
        super().__init__(message or f"No usable version for '{unit_name}'")
        self.unit_name = unit_name
