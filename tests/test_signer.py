"""
Unit tests for auth message construction and signing.
"""

import dataclasses
import hashlib
import hmac
import time
from collections import Counter

import pytest

from qb_client import (
    AuthMessage,
    AuthMessageSigner,
    SigningError,
    canonicalize,
    sign_auth_message
)
from qb_client.signer import random_nonce, unix_time


SAMPLE_MESSAGE = {
    'application_id': 5,
    'auth_key': 'K',
    'nonce': 1234,
    'timestamp': 1000000,
}


def expected_signature(canonical: str, secret: str) -> str:
    return hmac.new(secret.encode('utf-8'), canonical.encode('utf-8'), hashlib.sha1).hexdigest()


class TestCanonicalize:
    """Test canonical string construction."""

    def test_flat_message(self):
        """Test top-level keys are sorted alphabetically."""
        assert canonicalize(SAMPLE_MESSAGE) == (
            "application_id=5&auth_key=K&nonce=1234&timestamp=1000000"
        )

    def test_key_order_does_not_matter(self):
        reordered = dict(reversed(list(SAMPLE_MESSAGE.items())))
        assert canonicalize(reordered) == canonicalize(SAMPLE_MESSAGE)

    def test_nested_mapping_folded(self):
        """Test nested keys are sorted among themselves, then with top-level keys."""
        message = {'nonce': 1, 'extra': {'b': 2, 'a': 1}, 'application_id': 5}

        assert canonicalize(message) == "application_id=5&extra[a]=1&extra[b]=2&nonce=1"

    def test_user_credentials_folded(self):
        message = dict(SAMPLE_MESSAGE, user={'password': 'pw', 'login': 'bob'})

        assert canonicalize(message) == (
            "application_id=5&auth_key=K&nonce=1234&timestamp=1000000"
            "&user[login]=bob&user[password]=pw"
        )

    def test_signature_field_excluded(self):
        signed = dict(SAMPLE_MESSAGE, signature="abc123")
        assert canonicalize(signed) == canonicalize(SAMPLE_MESSAGE)

    def test_auth_message_input(self):
        message = AuthMessage(application_id=5, auth_key='K', nonce=1234, timestamp=1000000)
        assert canonicalize(message) == canonicalize(SAMPLE_MESSAGE)

    def test_boolean_rendering(self):
        assert canonicalize({'a': True, 'b': False}) == "a=true&b=false"

    @pytest.mark.parametrize("message", [
        {'application_id': None},
        {'ids': [1, 2]},
        {'ratio': 1.5},
        {'user': {'profile': {'name': 'x'}}},
        {'user': {'login': None}},
        {1: 'numeric key'},
        {'user': {}},
        {'a': 1, 'extra': {}},
    ])
    def test_unsupported_shapes(self, message):
        with pytest.raises(SigningError):
            canonicalize(message)


class TestSignAuthMessage:
    """Test HMAC-SHA1 signing."""

    def test_signature_matches_hmac_sha1(self):
        signature = sign_auth_message(SAMPLE_MESSAGE, "secret")

        assert len(signature) == 40  # SHA1 hex = 40 chars
        assert signature == signature.lower()
        assert signature == expected_signature(
            "application_id=5&auth_key=K&nonce=1234&timestamp=1000000", "secret"
        )

    def test_signature_stable(self):
        first = sign_auth_message(SAMPLE_MESSAGE, "secret")
        second = sign_auth_message(dict(SAMPLE_MESSAGE), "secret")

        assert first == second

    @pytest.mark.parametrize("field,value", [
        ('application_id', 6),
        ('auth_key', 'L'),
        ('nonce', 1235),
        ('timestamp', 1000001),
    ])
    def test_signature_changes_with_any_field(self, field, value):
        changed = dict(SAMPLE_MESSAGE, **{field: value})

        assert sign_auth_message(changed, "secret") != sign_auth_message(SAMPLE_MESSAGE, "secret")

    def test_signature_changes_with_secret(self):
        assert sign_auth_message(SAMPLE_MESSAGE, "secret") != sign_auth_message(SAMPLE_MESSAGE, "other")

    @pytest.mark.parametrize("secret", ["", None])
    def test_missing_secret(self, secret):
        with pytest.raises(SigningError):
            sign_auth_message(SAMPLE_MESSAGE, secret)


class TestAuthMessageSigner:
    """Test message building through the signer."""

    @pytest.fixture
    def signer(self):
        return AuthMessageSigner("secret", nonce_source=lambda: 1234, clock=lambda: 1000000)

    def test_build_message(self, signer):
        message = signer.build_message(5, "K")

        assert message.application_id == 5
        assert message.auth_key == "K"
        assert message.nonce == 1234
        assert message.timestamp == 1000000
        assert message.signature is None
        assert not message.signed

    def test_generate_signs_message(self, signer):
        message = signer.generate(5, "K")

        assert message.signed
        assert message.signature == sign_auth_message(SAMPLE_MESSAGE, "secret")
        assert signer.verify(message, message.signature)

    def test_signed_message_is_frozen(self, signer):
        message = signer.generate(5, "K")

        with pytest.raises(dataclasses.FrozenInstanceError):
            message.nonce = 1

    def test_verify_rejects_tampered_message(self, signer):
        message = signer.generate(5, "K")
        tampered = dataclasses.replace(message, nonce=4321)

        assert signer.verify(tampered, message.signature) is False

    def test_to_dict_omits_unset_fields(self, signer):
        message = signer.build_message(5)

        assert message.to_dict() == {'application_id': 5, 'nonce': 1234, 'timestamp': 1000000}

    def test_to_dict_with_user(self, signer):
        message = signer.generate(5, "K", user={'email': 'bob@example.com', 'password': 'pw'})
        data = message.to_dict()

        assert data['user'] == {'email': 'bob@example.com', 'password': 'pw'}
        assert data['signature'] == sign_auth_message(data, "secret")

    def test_fresh_nonce_per_message(self):
        nonces = iter([1, 2])
        signer = AuthMessageSigner("secret", nonce_source=lambda: next(nonces))

        first = signer.generate(5)
        second = signer.generate(5)

        assert first.nonce != second.nonce
        assert first.signature != second.signature


class TestNonceAndClock:
    """Test nonce range and timestamp generation."""

    def test_nonce_range_and_spread(self):
        nonces = [random_nonce() for _ in range(10000)]

        assert all(0 <= nonce <= 9999 for nonce in nonces)

        # 10 buckets of 1000 values each, expect ~1000 hits per bucket
        buckets = Counter(nonce // 1000 for nonce in nonces)
        assert len(buckets) == 10
        assert all(800 < count < 1200 for count in buckets.values())

    def test_unix_time_truncated(self):
        before = int(time.time())
        now = unix_time()
        after = int(time.time())

        assert isinstance(now, int)
        assert before <= now <= after
