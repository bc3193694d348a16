"""
User lookups for the session holder.
"""

from typing import Any, Dict

from .exceptions import ProtocolError, SessionError


class UserProfile:
    """User records reachable with the client's current session token."""

    def __init__(self, client):
        self._client = client

    def get(self, user_id: int) -> Dict[str, Any]:
        """
        Fetch a user record.

        Args:
            user_id: Server-side user id

        Returns:
            The ``user`` object from the response

        Raises:
            SessionError: If the client holds no session token
            ProtocolError: If the response has no ``user`` object
        """
        if not self._client.session_token:
            raise SessionError("no session token; call auth() first")

        path = f"{self._client.config['urls']['users']}/{user_id}.json"
        response = self._client._request(
            'GET', path, token=self._client.session_token
        )
        body = self._client._parse_json(response)

        user = body.get('user') if isinstance(body, dict) else None
        if not isinstance(user, dict):
            raise ProtocolError("response has no user object", body=body)
        return user

    def current(self) -> Dict[str, Any]:
        """Fetch the record of the user the session belongs to."""
        if self._client.user_id is None:
            raise SessionError("session is not bound to a user")
        return self.get(self._client.user_id)
