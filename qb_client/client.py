"""
QuickBlox session client.

This module obtains and refreshes API session tokens: an application
session signed with the app's auth secret, a user session signed the same
way with the user's credentials folded in, or a sync of a token obtained
elsewhere.
"""

from collections.abc import Mapping
from typing import Any, Dict, Optional

import requests
import structlog

from .constants import (
    HEADER_SESSION_TOKEN,
    DEFAULT_CONFIG,
    DEFAULT_URLS,
    EVENT_SESSION_CREATED,
    EVENT_SESSION_SYNCED,
    EVENT_SESSION_DESTROYED
)
from .events import EventBus
from .exceptions import (
    ConfigurationError,
    CredentialsError,
    ProtocolError,
    SessionError
)
from .signer import AuthMessageSigner
from .users import UserProfile

logger = structlog.get_logger(__name__)

USER_CREDENTIAL_SHAPES = (
    frozenset(('login', 'password')),
    frozenset(('email', 'password')),
)


def _is_integer(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_positive_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _valid_timeout(timeout) -> bool:
    """None, a positive number, or a (connect, read) pair of those."""
    if timeout is None or _is_positive_number(timeout):
        return True
    if isinstance(timeout, tuple) and len(timeout) == 2:
        return all(part is None or _is_positive_number(part) for part in timeout)
    return False


def _mask(token: Optional[str]) -> Optional[str]:
    if not token:
        return token
    return token[:6] + '...'


class SessionClient:
    """
    Client for the session endpoints of the QuickBlox REST API.

    Holds the current session token and user id. One instance is meant to be
    driven by a single caller; concurrent auth calls are not coordinated and
    the last response to arrive wins.
    """

    def __init__(
        self,
        application_id: int,
        auth_key: Optional[str] = None,
        auth_secret: Optional[str] = None,
        transport: Optional[requests.Session] = None,
        events: Optional[EventBus] = None,
        **config
    ):
        """
        Initialize session client.

        Args:
            application_id: Application id from the admin panel
            auth_key: Application auth key
            auth_secret: Application auth secret, used to sign session requests
            transport: HTTP session to send requests with (one is created if omitted)
            events: Event bus to notify (one is created if omitted)
            **config: Configuration options (scheme, api_host, urls, timeout)
        """
        self.application_id = application_id
        self.auth_key = auth_key

        # Merge default config with user overrides
        urls = {**DEFAULT_URLS, **(config.pop('urls', None) or {})}
        self.config = {**DEFAULT_CONFIG, **config, 'urls': urls}

        self._validate_config()

        self.signer = AuthMessageSigner(auth_secret)
        self.events = events if events is not None else EventBus()
        self.users = UserProfile(self)

        self._owns_transport = transport is None
        self.transport = transport if transport is not None else requests.Session()

        self.session_token: Optional[str] = None
        self.user_id: Optional[int] = None

    def _validate_config(self):
        """Validate client configuration."""
        if not _is_integer(self.application_id):
            raise ConfigurationError("application_id must be an integer")

        if self.application_id <= 0:
            raise ConfigurationError("application_id must be positive")

        if not self.config['api_host']:
            raise ConfigurationError("api_host cannot be empty")

        if not _valid_timeout(self.config['timeout']):
            raise ConfigurationError(
                "timeout must be None, a positive number or a (connect, read) pair"
            )

        for name in DEFAULT_URLS:
            if not self.config['urls'].get(name):
                raise ConfigurationError(f"url for {name!r} cannot be empty")

    @property
    def base_url(self) -> str:
        return f"{self.config['scheme']}://{self.config['api_host']}"

    @property
    def _session_path(self) -> str:
        return f"{self.config['urls']['session']}.json"

    def _request(self, method: str, path: str, token: Optional[str] = None, **kwargs) -> requests.Response:
        """
        Send a request to the API.

        Args:
            method: HTTP method
            path: URL path (relative to base_url)
            token: Session token to send in the QB-Token header
            **kwargs: Additional requests arguments

        Returns:
            requests.Response object

        Raises:
            requests.RequestException: If the request fails or returns an error status
        """
        url = f"{self.base_url}/{path.lstrip('/')}"

        headers = dict(kwargs.pop('headers', None) or {})
        if token is not None:
            headers[HEADER_SESSION_TOKEN] = token
        kwargs['headers'] = headers
        kwargs.setdefault('timeout', self.config['timeout'])

        logger.debug("api_request", method=method, url=url)
        try:
            response = self.transport.request(method, url, **kwargs)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.warning("api_request_failed", method=method, url=url, error=str(e))
            raise
        return response

    @staticmethod
    def _parse_json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise ProtocolError("response body is not JSON", body=response.text) from e

    def _handle_session_response(self, response: requests.Response, event: str) -> str:
        """Store the session carried by a response and return its token."""
        body = self._parse_json(response)

        session = body.get('session') if isinstance(body, dict) else None
        if not isinstance(session, dict):
            raise ProtocolError("response has no session object", body=body)

        token = session.get('token')
        if not isinstance(token, str) or not token:
            raise ProtocolError("response session has no token", body=body)

        user_id = session.get('user_id')
        if user_id is not None and not _is_integer(user_id):
            raise ProtocolError("response session has an invalid user_id", body=body)

        # user_id 0 marks an application session
        if user_id == 0:
            user_id = None

        self.session_token = token
        self.user_id = user_id

        logger.info(
            event.replace(':', '_'),
            application_id=self.application_id,
            user_id=user_id,
            token=_mask(token)
        )
        self.events.emit(event, token=token, user_id=user_id)
        return token

    def auth(self, credentials: Optional[Mapping] = None) -> str:
        """
        Authorize the client against the REST API.

        Credentials select the kind of session:

        - nothing: application session (read-only rights)
        - ``{"token": ...}``: sync an existing session
        - ``{"login": ..., "password": ...}`` or ``{"email": ..., "password": ...}``:
          user session

        Args:
            credentials: Optional credentials mapping

        Returns:
            Session token

        Raises:
            CredentialsError: If credentials match none of the shapes above
            SigningError: If a signed session is needed and no auth secret is set
            ProtocolError: If the server response carries no session token
            requests.RequestException: If the request fails
        """
        if not credentials:
            return self.create_session()

        if not isinstance(credentials, Mapping):
            raise CredentialsError("credentials must be a mapping")

        keys = frozenset(credentials)
        if keys == {'token'}:
            token = credentials['token']
            if not isinstance(token, str) or not token:
                raise CredentialsError("token must be a non-empty string")
            return self.sync_session(token)

        if keys in USER_CREDENTIAL_SHAPES:
            for key in keys:
                if not isinstance(credentials[key], str) or not credentials[key]:
                    raise CredentialsError(f"{key} must be a non-empty string")
            return self.create_session(user=dict(credentials))

        raise CredentialsError(
            "unsupported credentials: expected token, login/password or email/password, "
            f"got {sorted(keys)}"
        )

    def create_session(self, user: Optional[Dict[str, str]] = None) -> str:
        """
        Create a new session with a signed auth message.

        Args:
            user: Optional user credentials for a user session

        Returns:
            Session token
        """
        message = self.signer.generate(self.application_id, self.auth_key, user)
        response = self._request('POST', self._session_path, json=message.to_dict())
        return self._handle_session_response(response, EVENT_SESSION_CREATED)

    def sync_session(self, token: str) -> str:
        """Load the session state behind an existing token."""
        response = self._request('GET', self._session_path, token=token)
        return self._handle_session_response(response, EVENT_SESSION_SYNCED)

    def destroy_session(self):
        """Destroy the current session on the server and forget it locally."""
        if not self.session_token:
            raise SessionError("no session to destroy")

        token = self.session_token
        self._request('DELETE', self._session_path, token=token)

        self.session_token = None
        self.user_id = None

        logger.info("session_destroyed", application_id=self.application_id, token=_mask(token))
        self.events.emit(EVENT_SESSION_DESTROYED, token=token)

    def close(self):
        """Close the HTTP session if this client created it."""
        if self._owns_transport and self.transport:
            self.transport.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
