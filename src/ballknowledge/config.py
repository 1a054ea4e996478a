"""
Global configuration for the Ball Knowledge client.

This module centralizes the API location, request timeouts and where the
client keeps its persisted credential, so you can tweak them in one place.
"""

import os
from pathlib import Path

# Remote API (the Ball Knowledge backend)
API_BASE_URL: str = os.environ.get(
    "BALLKNOWLEDGE_API_URL", "http://localhost:8081/api"
).rstrip("/")
REQUEST_TIMEOUT_SECONDS: float = 10.0

# Client-side durable state (mirror of the in-memory session)
STATE_DIR: Path = Path(
    os.environ.get("BALLKNOWLEDGE_STATE_DIR", str(Path.home() / ".ballknowledge"))
)
CREDENTIAL_STORE_FILENAME: str = "storage.json"

# Key under which the raw bearer credential is persisted
TOKEN_STORAGE_KEY: str = "token"

# Views
LOGIN_VIEW: str = "login"
HOME_VIEW: str = "home"

# Logging
LOG_LEVEL: str = os.environ.get("BALLKNOWLEDGE_LOG_LEVEL", "INFO").upper()
