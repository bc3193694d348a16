"""
Constants for the QuickBlox client library.
"""

# HTTP Headers
HEADER_SESSION_TOKEN = "QB-Token"

# Default configuration values
DEFAULT_URLS = {
    'session': 'session',
    'users': 'users',
}

DEFAULT_CONFIG = {
    'scheme': 'https',
    'api_host': 'api.quickblox.com',
    'urls': DEFAULT_URLS,
    'timeout': 30,              # HTTP timeout in seconds
}

# Nonces are drawn from [0, NONCE_RANGE); the server expects 4 digits
NONCE_RANGE = 10000

# Key excluded from the canonical string
SIGNATURE_FIELD = "signature"

# Event names
EVENT_SESSION_CREATED = "session:created"
EVENT_SESSION_SYNCED = "session:synced"
EVENT_SESSION_DESTROYED = "session:destroyed"
