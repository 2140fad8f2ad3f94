"""Custom exceptions for heightfield generation."""


class HeightfieldError(Exception):
    """Base exception for heightfield errors."""

    pass


class ConfigurationError(HeightfieldError):
    """Raised when a generation or erosion configuration is invalid."""

    pass


class ExportError(HeightfieldError):
    """Raised when a terrain writer fails to accept exported cells."""

    pass


class NumericDegeneracyWarning(UserWarning):
    """Warned when a droplet direction could not be normalized.

    The direction is left unchanged in that case, so the warning is
    informational only.
    """

    pass
