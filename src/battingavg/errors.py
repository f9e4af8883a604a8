"""Custom exception types for the batting average generator."""


class BattingAverageError(Exception):
    """Base exception for all recoverable batting average generator errors."""


class ConfigurationError(BattingAverageError):
    """Raised when runtime configuration values are missing or invalid."""


class AuthenticationError(BattingAverageError):
    """Raised when Jira authentication credentials are unavailable or invalid."""


class ApiError(BattingAverageError):
    """Raised when a Jira API request fails or returns an unexpected response."""


class DataValidationError(BattingAverageError):
    """Raised when issue payloads or input records do not meet expected constraints."""
