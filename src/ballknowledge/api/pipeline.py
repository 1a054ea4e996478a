"""
Authorized request pipeline.

Every request to the Ball Knowledge API goes through
`AuthorizedRequestPipeline.request`. Before anything is sent it:

1. reads the current session from the `SessionStore`;
2. forwards anonymous requests untouched (login/register are public);
3. for an authenticated session, checks the credential's expiry against the
   local clock. An expired (or undecodable) credential logs the session out,
   redirects to the login view and raises `SessionExpired` without sending;
   a valid one is attached as `Authorization: Bearer <credential>`.

Transport errors and non-2xx responses come back as `RequestFailed`. There are
no retries, and a 401 from the server is not treated specially.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

import requests

from ballknowledge.auth import token_codec
from ballknowledge.auth.errors import MalformedCredential, RequestFailed, SessionExpired
from ballknowledge.auth.session_store import SessionStore
from ballknowledge.config import API_BASE_URL, REQUEST_TIMEOUT_SECONDS
from ballknowledge.utils.logging_utils import get_logger
from ballknowledge.utils.paths import build_api_url

logger = get_logger(__name__)


def _parse_body(response: requests.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class AuthorizedRequestPipeline:
    """
    Parameters
    ----------
    store : SessionStore
        Source of the current session. Also used to force a logout.
    base_url : str
        API base URL, e.g. "http://localhost:8081/api".
    http : requests.Session | None
        Transport. A fresh `requests.Session` when None.
    on_session_expired : Callable[[], None] | None
        Called after a forced logout; the UI uses it to navigate to login.
    timeout : float
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        store: SessionStore,
        base_url: str = API_BASE_URL,
        http: Optional[requests.Session] = None,
        on_session_expired: Optional[Callable[[], None]] = None,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ):
        self.store = store
        self.base_url = base_url
        self.http = http if http is not None else requests.Session()
        self.on_session_expired = on_session_expired
        self.timeout = timeout

    def authorize(self, prepared: requests.PreparedRequest) -> requests.PreparedRequest:
        """Attach the credential to `prepared`, or raise `SessionExpired`."""
        session = self.store.current_session()
        if not session.is_authenticated:
            return prepared

        try:
            claims = token_codec.decode(session.credential)
            expired = token_codec.is_expired(claims, self.store.clock())
        except MalformedCredential as exc:
            logger.warning("Held credential cannot be decoded: %s", exc)
            expired = True

        if expired:
            self._expire_session()
            raise SessionExpired("Your session has expired. Please log in again.")

        prepared.headers["Authorization"] = f"Bearer {session.credential}"
        return prepared

    def _expire_session(self) -> None:
        logger.info("Credential expired; logging out before sending request.")
        self.store.logout()
        if self.on_session_expired is not None:
            self.on_session_expired()

    def request(
        self,
        method: str,
        path: str,
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Send one request and return the decoded JSON body.

        Raises
        ------
        SessionExpired
            The held credential had expired; nothing was sent.
        RequestFailed
            Network error (status None) or non-2xx response.
        """
        url = build_api_url(self.base_url, path)
        prepared = self.http.prepare_request(
            requests.Request(method.upper(), url, json=json, params=params)
        )
        prepared = self.authorize(prepared)

        try:
            response = self.http.send(prepared, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("%s %s failed: %s", prepared.method, url, exc)
            raise RequestFailed(None, str(exc)) from exc

        body = _parse_body(response)
        if not response.ok:
            logger.warning(
                "%s %s returned HTTP %d", prepared.method, url, response.status_code
            )
            raise RequestFailed(response.status_code, body)

        logger.debug("%s %s -> %d", prepared.method, url, response.status_code)
        return body

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, json: Any = None) -> Any:
        return self.request("POST", path, json=json)

    def put(self, path: str, json: Any = None) -> Any:
        return self.request("PUT", path, json=json)
