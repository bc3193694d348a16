"""
QuickBlox Client Library

A Python client library that creates and syncs QuickBlox REST API sessions,
signing session requests with the application's auth secret.

Example usage:
    from qb_client import SessionClient

    client = SessionClient(5, auth_key="KnUm1", auth_secret="MKmn-asd1")
    token = client.auth()
"""

from .client import SessionClient
from .events import EventBus
from .exceptions import (
    QBClientError,
    ConfigurationError,
    SigningError,
    CredentialsError,
    SessionError,
    ProtocolError,
    TransportError
)
from .signer import (
    AuthMessage,
    AuthMessageSigner,
    canonicalize,
    sign_auth_message
)
from .users import UserProfile
from .constants import (
    HEADER_SESSION_TOKEN,
    DEFAULT_CONFIG,
    NONCE_RANGE,
    EVENT_SESSION_CREATED,
    EVENT_SESSION_SYNCED,
    EVENT_SESSION_DESTROYED
)

__version__ = "1.0.0"
__all__ = [
    "SessionClient",
    "EventBus",
    "UserProfile",
    "AuthMessage",
    "AuthMessageSigner",
    "canonicalize",
    "sign_auth_message",
    "QBClientError",
    "ConfigurationError",
    "SigningError",
    "CredentialsError",
    "SessionError",
    "ProtocolError",
    "TransportError",
    "HEADER_SESSION_TOKEN",
    "DEFAULT_CONFIG",
    "NONCE_RANGE",
    "EVENT_SESSION_CREATED",
    "EVENT_SESSION_SYNCED",
    "EVENT_SESSION_DESTROYED"
]
