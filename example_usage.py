#!/usr/bin/env python3
"""
Basic usage examples for the QuickBlox client library.

This script demonstrates how to sign auth messages and obtain sessions
from the QuickBlox REST API.
"""

import os
import sys

from qb_client import (
    AuthMessageSigner,
    SessionClient,
    QBClientError,
    TransportError,
    EVENT_SESSION_CREATED,
    canonicalize
)


def main():
    """Run basic usage examples."""

    # Application configuration
    application_id = int(os.environ.get("QB_APPLICATION_ID", "5"))
    auth_key = os.environ.get("QB_AUTH_KEY", "KnUm1")
    auth_secret = os.environ.get("QB_AUTH_SECRET", "MKmn-asd1")

    print("=== QuickBlox Client Basic Usage Examples ===\n")

    # Example 1: Sign an auth message offline
    print("1. Signing an auth message...")
    signer = AuthMessageSigner(auth_secret)
    message = signer.generate(application_id, auth_key)
    print(f"   Canonical: {canonicalize(message)}")
    print(f"   Signature: {message.signature}")
    print(f"   Verification: {'✓ Valid' if signer.verify(message, message.signature) else '✗ Invalid'}")
    print()

    # Example 2: Application session
    print("2. Creating application session...")
    with SessionClient(application_id, auth_key=auth_key, auth_secret=auth_secret) as client:
        client.events.on(
            EVENT_SESSION_CREATED,
            lambda token, user_id: print(f"   Event: session created for user {user_id}")
        )

        try:
            token = client.auth()
            print(f"   ✓ Token: {token[:8]}...")
        except TransportError as e:
            print(f"   ✗ Request failed: {e}")
            return 1
        except QBClientError as e:
            print(f"   ✗ Error: {e}")
            return 1
        print()

        # Example 3: Sync the same token
        print("3. Syncing existing session...")
        try:
            client.auth({"token": token})
            print(f"   ✓ Session synced, user id: {client.user_id}")
        except (TransportError, QBClientError) as e:
            print(f"   ✗ Sync failed: {e}")
            return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
