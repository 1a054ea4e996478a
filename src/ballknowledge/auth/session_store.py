"""
The client's single source of truth for "who is logged in".

One `SessionStore` is built per client (per process, or per Streamlit browser
session) and is the only writer of the `Session`. Durable storage mirrors the
raw credential: it is read once at construction, and afterwards every change
is applied in memory first and written to storage second. Listeners registered
with `subscribe` are called synchronously, in subscription order, after each
change has been fully applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional

from ballknowledge.auth import token_codec
from ballknowledge.auth.errors import MalformedCredential, SessionExpired
from ballknowledge.auth.storage import CredentialStorage
from ballknowledge.config import TOKEN_STORAGE_KEY
from ballknowledge.utils.logging_utils import get_logger, mask_credential

logger = get_logger(__name__)


@dataclass(frozen=True)
class UserIdentity:
    user_id: str


@dataclass(frozen=True)
class Session:
    """Anonymous when `identity` is None; `identity` and `credential` are set together."""

    identity: Optional[UserIdentity] = None
    credential: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None


ANONYMOUS = Session()

SessionListener = Callable[[Session, Session], None]


class SessionStore:
    """
    Owns the current `Session` and its persisted copy.

    Parameters
    ----------
    storage : CredentialStorage
        Durable key/value storage for the raw credential.
    clock : Callable[[], int]
        Returns "now" in epoch milliseconds.
    storage_key : str
        Key the credential is stored under.
    """

    def __init__(
        self,
        storage: CredentialStorage,
        clock: Callable[[], int] = token_codec.now_ms,
        storage_key: str = TOKEN_STORAGE_KEY,
    ):
        self._storage = storage
        self._clock = clock
        self._storage_key = storage_key
        self._session: Session = ANONYMOUS
        self._listeners: List[SessionListener] = []
        # Bumped on every state change; lets readers notice that the session
        # changed while one of their requests was in flight.
        self.generation = 0
        self._restore()

    @property
    def clock(self) -> Callable[[], int]:
        return self._clock

    def _restore(self) -> None:
        credential = self._storage.get_item(self._storage_key)
        if credential is None:
            logger.debug("No persisted credential; starting anonymous.")
            return

        try:
            claims = token_codec.decode(credential)
        except MalformedCredential as exc:
            logger.warning("Discarding malformed persisted credential: %s", exc)
            self._storage.remove_item(self._storage_key)
            return

        if token_codec.is_expired(claims, self._clock()):
            logger.info("Persisted credential for user %s has expired.", claims.subject)
            self._storage.remove_item(self._storage_key)
            return

        self._session = Session(
            identity=UserIdentity(user_id=claims.subject), credential=credential
        )
        logger.info("Restored session for user %s.", claims.subject)

    def current_session(self) -> Session:
        return self._session

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register `listener(previous, current)` for session changes.

        Returns a function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _replace(self, session: Session) -> Session:
        previous = self._session
        self._session = session
        self.generation += 1
        return previous

    def _notify(self, previous: Session, current: Session) -> None:
        # Copy so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            listener(previous, current)

    def login(self, credential: str) -> Session:
        """
        Authenticate with a credential issued by the server.

        Raises
        ------
        MalformedCredential
            If the credential cannot be decoded. The session is left as it was.
        SessionExpired
            If the credential is already expired. The session is logged out.
        """
        claims = token_codec.decode(credential)

        if token_codec.is_expired(claims, self._clock()):
            logger.warning(
                "Refusing expired credential %s for user %s.",
                mask_credential(credential),
                claims.subject,
            )
            self.logout()
            raise SessionExpired("Credential is already expired")

        session = Session(
            identity=UserIdentity(user_id=claims.subject), credential=credential
        )
        previous = self._replace(session)
        self._storage.set_item(self._storage_key, credential)
        logger.info(
            "Logged in user %s with credential %s.",
            claims.subject,
            mask_credential(credential),
        )
        self._notify(previous, session)
        return session

    def logout(self) -> None:
        """Return to anonymous. Safe to call when already anonymous."""
        previous = self._session
        changed = previous.is_authenticated
        if changed:
            self._replace(ANONYMOUS)
        self._storage.remove_item(self._storage_key)
        if changed:
            logger.info("Logged out user %s.", previous.identity.user_id)
            self._notify(previous, ANONYMOUS)
