"""
Logging utilities for Ball Knowledge.

Every module logs through `get_logger(__name__)`. Loggers handed out here carry
a `CredentialRedactingFilter`, so a bearer credential that slips into a log
call is masked before any handler sees it.
"""

import logging
import re
from typing import Optional

from ballknowledge.config import LOG_LEVEL

PACKAGE_LOGGER = "ballknowledge"
LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

# header.payload.signature, where a JWT header always starts with base64 '{"'
_JWT_PATTERN = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]*")


def mask_credential(credential: Optional[str], visible: int = 6) -> str:
    """
    Return a log-safe rendering of a bearer credential.

    Only the last few characters are shown so two credentials can be told
    apart in the logs without the token itself ending up there.
    """
    if not credential:
        return "<none>"
    tail = credential[-visible:] if len(credential) > visible else ""
    return f"***{tail} (len={len(credential)})"


class CredentialRedactingFilter(logging.Filter):
    """Rewrite records so that JWT-shaped substrings are masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = _JWT_PATTERN.sub(lambda m: mask_credential(m.group(0)), message)
        if redacted != message:
            record.msg = redacted
            record.args = ()
        return True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Return a logger for `name` (the package logger when None).

    The first call configures the root logger with `LOG_FORMAT` at
    `config.LOG_LEVEL`, unless the application already set up logging.
    """
    logger = logging.getLogger(name if name is not None else PACKAGE_LOGGER)

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    if not any(isinstance(f, CredentialRedactingFilter) for f in logger.filters):
        logger.addFilter(CredentialRedactingFilter())

    return logger
