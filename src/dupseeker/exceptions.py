"""Custom exceptions for DupSeeker."""


class DupSeekerError(Exception):
    """Base exception for all DupSeeker errors."""

    pass


class ConfigurationError(DupSeekerError):
    """Raised when configuration is invalid or missing."""

    pass


class PipelineError(DupSeekerError):
    """Raised when the marking pass cannot complete."""

    pass


class ValidationError(DupSeekerError):
    """Raised when data validation fails."""

    pass


class PhysicalLocationError(ValidationError):
    """Raised when a read name matches the tile/x/y layout but cannot be parsed."""

    def __init__(self, message="", read_name=None):
        """Initialize PhysicalLocationError.

        Args:
            message: Error message
            read_name: Name of the offending read
        """
        super().__init__(message)
        self.read_name = read_name


class FileFormatError(DupSeekerError):
    """Raised when file format is invalid or unsupported."""

    pass
