"""
Helper functions for file and directory paths used by the Ball Knowledge client.
"""

from pathlib import Path
from typing import Union

from ballknowledge.config import STATE_DIR, CREDENTIAL_STORE_FILENAME


PathLike = Union[str, Path]


def get_state_dir() -> Path:
    """Return the directory holding persisted client state."""
    return STATE_DIR


def get_credential_store_path(filename: str | None = None) -> Path:
    """
    Return the path to the persisted key/value store.

    Parameters
    ----------
    filename : str | None
        Specific filename, or None for the default store file.

    Returns
    -------
    Path
        Full path to the store file. The file (and its directory) may not
        exist yet; it is created on first write.
    """
    if filename is None:
        filename = CREDENTIAL_STORE_FILENAME
    return get_state_dir() / filename


def build_api_url(base_url: str, path: str) -> str:
    """Join the API base URL and an endpoint path ("/matches" etc.)."""
    return f"{base_url.rstrip('/')}/{path.lstrip('/')}"
