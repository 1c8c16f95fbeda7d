"""Custom exceptions for CiteView."""


class CiteViewError(Exception):
    """Base exception for all CiteView errors."""

    pass


class ConfigurationError(CiteViewError):
    """Raised when configuration is invalid or missing."""

    pass


class OracleError(CiteViewError):
    """Raised when a call to the file search service fails."""

    pass


class RateLimitError(OracleError):
    """Raised when API rate limit is hit."""

    def __init__(self, message: str, retry_after: float = 0):
        super().__init__(message)
        self.retry_after = retry_after


class ConversionError(CiteViewError):
    """Raised when exporting a rendered answer fails."""

    pass


class ValidationError(CiteViewError):
    """Raised when input validation fails."""

    pass
