"""
Unit tests for user lookups through the session client.
"""

from unittest.mock import Mock

import pytest

from qb_client import SessionClient, ProtocolError, SessionError, UserProfile
from qb_client.constants import HEADER_SESSION_TOKEN


def make_response(body):
    response = Mock()
    response.json.return_value = body
    return response


class TestUserProfile:
    """Test user profile capability."""

    @pytest.fixture
    def transport(self):
        return Mock()

    @pytest.fixture
    def client(self, transport):
        client = SessionClient(5, auth_secret="secret", transport=transport)
        client.session_token = "abc123"
        client.user_id = 42
        return client

    def test_client_holds_profile(self, client):
        assert isinstance(client.users, UserProfile)
        assert not isinstance(client, UserProfile)

    def test_get(self, client, transport):
        transport.request.return_value = make_response({"user": {"id": 7, "login": "alice"}})

        user = client.users.get(7)

        assert user == {"id": 7, "login": "alice"}
        args, kwargs = transport.request.call_args
        assert args == ('GET', "https://api.quickblox.com/users/7.json")
        assert kwargs['headers'] == {HEADER_SESSION_TOKEN: "abc123"}

    def test_current(self, client, transport):
        transport.request.return_value = make_response({"user": {"id": 42, "login": "bob"}})

        assert client.users.current()["login"] == "bob"
        assert transport.request.call_args[0][1].endswith("/users/42.json")

    def test_current_with_application_session(self, client, transport):
        client.user_id = None

        with pytest.raises(SessionError):
            client.users.current()

        transport.request.assert_not_called()

    def test_get_without_session(self, client, transport):
        client.session_token = None

        with pytest.raises(SessionError):
            client.users.get(7)

        transport.request.assert_not_called()

    def test_get_missing_user(self, client, transport):
        transport.request.return_value = make_response({"errors": ["Not found"]})

        with pytest.raises(ProtocolError):
            client.users.get(7)
