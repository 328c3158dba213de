"""Custom exceptions for the runmerge package."""


class MergeError(Exception):
    """Base exception for all merge-related errors."""

    pass


class ConfigurationError(MergeError):
    """Raised when there are configuration-related issues."""

    pass


class FileSystemError(MergeError):
    """Raised when file system operations fail."""

    pass


class InputUnavailableError(FileSystemError):
    """Raised when an input file cannot be opened for reading."""

    pass


class NoInputsError(MergeError):
    """Raised when no input file could be opened, so there is nothing to merge."""

    pass


class OutputCreationError(FileSystemError):
    """Raised when the output destination cannot be created."""

    pass


class OutputWriteError(MergeError):
    """Raised when writing a merged object into the output tree fails."""

    pass


class MergeDepthError(MergeError):
    """Raised when namespace nesting exceeds the configured maximum depth."""

    pass


class ObjectReadError(MergeError):
    """Raised when an object of an input file cannot be read back."""

    pass
