"""
Error types raised by the Ball Knowledge client.
"""

from __future__ import annotations

from typing import Any, Optional


class BallKnowledgeError(Exception):
    """Base error for the client."""
    pass


class MalformedCredential(BallKnowledgeError):
    """The bearer credential could not be decoded into claims."""
    pass


class SessionExpired(BallKnowledgeError):
    """The held credential had expired; the session was logged out locally."""
    pass


class RequestFailed(BallKnowledgeError):
    """
    Transport or HTTP failure from the remote API.

    Attributes
    ----------
    status : int | None
        HTTP status code, or None when no response was received.
    body : Any
        Parsed JSON body when available, raw text otherwise.
    """

    def __init__(self, status: Optional[int], body: Any = None):
        self.status = status
        self.body = body
        super().__init__(f"Request failed (status={status}): {body!r}")

    @property
    def message(self) -> str:
        """Best-effort human message from the server's {"error": ...} body."""
        if isinstance(self.body, dict) and "error" in self.body:
            return str(self.body["error"])
        if self.body:
            return str(self.body)
        return f"HTTP {self.status}" if self.status else "Network error"


class UnexpectedResponse(BallKnowledgeError):
    """A 2xx response whose body lacks the expected envelope."""

    def __init__(self, body: Any = None, expected: tuple = ()):
        self.body = body
        self.expected = expected
        super().__init__(
            f"Unexpected response body (expected one of {list(expected)}): {body!r}"
        )


class StaleIndexWrite(BallKnowledgeError):
    """A response arrived after the session it was requested for had ended."""
    pass
