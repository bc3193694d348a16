"""
Auth message construction and signing.

The session endpoint authenticates a client by recomputing an HMAC-SHA1
signature over a canonical form of the submitted parameters. The canonical
form is built here and nowhere else:

    application_id=5&auth_key=K&nonce=1234&timestamp=1000000

Top-level keys are sorted; a nested mapping such as ``user`` is flattened to
``user[login]=...&user[password]=...`` (sorted among its own keys) and then
sorted as a single entry among the top-level keys.
"""

import dataclasses
import hashlib
import hmac
import secrets
import time
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .constants import NONCE_RANGE, SIGNATURE_FIELD
from .exceptions import SigningError


@dataclasses.dataclass(frozen=True)
class AuthMessage:
    """Parameters of a session-creation request."""

    application_id: int
    nonce: int
    timestamp: int
    auth_key: Optional[str] = None
    user: Optional[Dict[str, str]] = None
    signature: Optional[str] = None

    @property
    def signed(self) -> bool:
        return self.signature is not None

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation; unset optional fields are left out."""
        data = {
            'application_id': self.application_id,
            'nonce': self.nonce,
            'timestamp': self.timestamp,
        }
        if self.auth_key is not None:
            data['auth_key'] = self.auth_key
        if self.user is not None:
            data['user'] = dict(self.user)
        if self.signature is not None:
            data[SIGNATURE_FIELD] = self.signature
        return data


def random_nonce() -> int:
    """Return a random integer in [0, 9999]."""
    return secrets.randbelow(NONCE_RANGE)


def unix_time() -> int:
    """Return the current time in whole Unix seconds."""
    return int(time.time())


def _render(value: Any, field: str) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, str)):
        return str(value)
    if value is None:
        raise SigningError(f"field {field!r} has no value")
    raise SigningError(
        f"field {field!r} has unsupported type {type(value).__name__}"
    )


def _check_key(key: Any) -> str:
    if not isinstance(key, str):
        raise SigningError(f"message keys must be strings, got {key!r}")
    return key


def canonicalize(message: Union[AuthMessage, Mapping[str, Any]]) -> str:
    """
    Build the canonical string that gets signed.

    Args:
        message: AuthMessage or flat mapping; values may be one level of
            nested mapping

    Returns:
        Sorted, ``&``-joined ``key=value`` pairs

    Raises:
        SigningError: If the message holds None, sequences, or deeper nesting
    """
    if isinstance(message, AuthMessage):
        message = message.to_dict()

    parts = []
    for key, value in message.items():
        key = _check_key(key)
        if key == SIGNATURE_FIELD:
            continue

        if isinstance(value, Mapping):
            if not value:
                raise SigningError(f"field {key!r} is an empty mapping")
            nested = []
            for sub_key, sub_value in value.items():
                sub_key = _check_key(sub_key)
                field = f"{key}[{sub_key}]"
                if isinstance(sub_value, Mapping):
                    raise SigningError(f"field {field!r} is nested too deeply")
                nested.append(f"{field}={_render(sub_value, field)}")
            parts.append('&'.join(sorted(nested)))
        else:
            parts.append(f"{key}={_render(value, key)}")

    return '&'.join(sorted(parts))


def sign_auth_message(message: Union[AuthMessage, Mapping[str, Any]], secret: str) -> str:
    """
    Compute the HMAC-SHA1 signature of a message.

    Args:
        message: Message to sign (any ``signature`` field is ignored)
        secret: Application auth secret

    Returns:
        Lowercase hex signature

    Raises:
        SigningError: If the secret is empty or the message shape is unsupported
    """
    if not secret:
        raise SigningError("auth secret is required to sign a message")

    mac = hmac.new(
        secret.encode('utf-8'),
        canonicalize(message).encode('utf-8'),
        hashlib.sha1
    )
    return mac.hexdigest()


class AuthMessageSigner:
    """
    Builds and signs auth messages with one application secret.

    The nonce and clock sources can be replaced to make messages
    reproducible in tests.
    """

    def __init__(
        self,
        secret: Optional[str],
        nonce_source: Callable[[], int] = random_nonce,
        clock: Callable[[], int] = unix_time,
    ):
        self.secret = secret
        self._nonce_source = nonce_source
        self._clock = clock

    def build_message(
        self,
        application_id: int,
        auth_key: Optional[str] = None,
        user: Optional[Mapping[str, str]] = None,
    ) -> AuthMessage:
        """Create an unsigned message with a fresh nonce and timestamp."""
        return AuthMessage(
            application_id=application_id,
            auth_key=auth_key,
            nonce=self._nonce_source(),
            timestamp=self._clock(),
            user=dict(user) if user is not None else None,
        )

    def sign(self, message: Union[AuthMessage, Mapping[str, Any]]) -> str:
        return sign_auth_message(message, self.secret)

    def verify(self, message: Union[AuthMessage, Mapping[str, Any]], signature: str) -> bool:
        """
        Check a signature the way the server does.

        Returns:
            True if signature matches the message
        """
        expected = self.sign(message)
        return hmac.compare_digest(expected, signature)

    def generate(
        self,
        application_id: int,
        auth_key: Optional[str] = None,
        user: Optional[Mapping[str, str]] = None,
    ) -> AuthMessage:
        """Build a message and return a signed copy of it."""
        message = self.build_message(application_id, auth_key, user)
        return dataclasses.replace(message, signature=self.sign(message))
