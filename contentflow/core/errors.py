"""Custom exceptions used across ContentFlow."""


class ContentFlowError(Exception):
    """Base error for the application."""


class ConfigError(ContentFlowError):
    """Configuration related error."""


class UploadError(ContentFlowError):
    """Raised when an upload cannot be stored."""


class UploadRejectedError(UploadError):
    """Raised when a module already holds the maximum number of files."""
