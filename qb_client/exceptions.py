"""
Custom exceptions for the QuickBlox client library.
"""

from requests import RequestException


class QBClientError(Exception):
    """Base exception for QuickBlox client errors."""
    pass


class ConfigurationError(QBClientError):
    """Raised when client configuration is invalid."""
    pass


class SigningError(QBClientError):
    """Raised when an auth message cannot be signed."""
    pass


class CredentialsError(QBClientError):
    """Raised when auth credentials match no supported shape."""
    pass


class SessionError(QBClientError):
    """Raised when an operation needs a session the client does not hold."""
    pass


class ProtocolError(QBClientError):
    """Raised when the server answers with a body the client cannot use."""

    def __init__(self, message: str, body=None):
        super().__init__(message)
        self.body = body


# Network and HTTP status failures are raised by requests itself and reach
# the caller unchanged.
TransportError = RequestException
