"""Domain-specific exceptions for the SEMIDAO bills connector.

This module defines custom exceptions that are part of the public API.
All exceptions inherit from SemidaoError for easy catching.
"""


class SemidaoError(Exception):
    """Base exception for all connector errors.

    Users can catch this exception to handle any error raised by the
    connector itself. Transport errors from ``requests`` are not wrapped.
    """

    pass


class ConfigError(SemidaoError):
    """Raised when there is a configuration error.

    This exception is raised when:
    - Credentials are missing or empty
    - The fields file cannot be loaded or parsed
    - An unknown qualification label is requested
    """

    pass


class KonnectorError(SemidaoError):
    """Raised when a stage of the connector run fails."""

    pass


class ExtractionError(KonnectorError):
    """Raised when the portal returns an unexpected response.

    This exception is raised when:
    - The listing page answers with a non-2xx status
    - Authentication fails (see AuthenticationError)
    """

    pass


class AuthenticationError(ExtractionError):
    """Raised when the login form post does not yield an authenticated page.

    Attributes:
        message: Human-readable error text found on the page, "" when absent.

    """

    def __init__(self, message: str = "") -> None:
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"LOGIN_FAILED{detail}")


class PersistenceError(KonnectorError):
    """Raised when saving bills fails (download error, unwritable manifest)."""

    pass
