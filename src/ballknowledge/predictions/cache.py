"""
Per-match index of the logged-in user's predictions.

The server enforces one prediction per (user, match); this cache mirrors that
so views can show "already predicted" instead of a form. It is advisory only:
a fetch that completes after a local `add_prediction` simply overwrites it.

States: EMPTY (no session) -> LOADING (fetch in flight) -> READY (indexed).
Logging out sends the cache back to EMPTY and drops the index.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, List, Optional

from ballknowledge.api.models import Prediction
from ballknowledge.auth.errors import BallKnowledgeError, StaleIndexWrite
from ballknowledge.auth.session_store import Session, SessionStore
from ballknowledge.utils.logging_utils import get_logger

logger = get_logger(__name__)


class CacheState(str, Enum):
    EMPTY = "empty"
    LOADING = "loading"
    READY = "ready"


class PredictionCache:
    """
    Parameters
    ----------
    store : SessionStore
        Session to follow. The cache fetches on login and clears on logout.
    fetch : Callable[[], List[Prediction]]
        "List my predictions" call, normally `ApiClient.get_user_predictions`.
    """

    def __init__(self, store: SessionStore, fetch: Callable[[], List[Prediction]]):
        self._store = store
        self._fetch = fetch
        self.index: Dict[str, Prediction] = {}
        self.state = CacheState.EMPTY
        self.error: Optional[Exception] = None
        self._unsubscribe = store.subscribe(self._on_session_change)

        if store.current_session().is_authenticated:
            self.fetch_user_predictions()

    def close(self) -> None:
        """Stop following the session store."""
        self._unsubscribe()

    def _on_session_change(self, previous: Session, current: Session) -> None:
        if not current.is_authenticated:
            self._clear()
        elif previous.identity != current.identity:
            self._clear()
            self.fetch_user_predictions()

    def _clear(self) -> None:
        self.index = {}
        self.state = CacheState.EMPTY
        self.error = None

    def _check_still_current(self, generation: int, session: Session) -> None:
        current = self._store.current_session()
        if (
            self._store.generation != generation
            or current.identity != session.identity
        ):
            raise StaleIndexWrite(
                f"Session changed while fetching predictions for {session.identity}"
            )

    def fetch_user_predictions(self) -> None:
        """
        Rebuild the index from the server.

        Failures are recorded in `error` rather than raised; the previous
        index (if any) is kept so callers may retry with `refetch`.
        """
        session = self._store.current_session()
        if not session.is_authenticated:
            return

        generation = self._store.generation
        previous_state = self.state
        self.state = CacheState.LOADING

        try:
            predictions = self._fetch()
            self._check_still_current(generation, session)
        except StaleIndexWrite as exc:
            logger.info("Dropping late predictions response: %s", exc)
            if self.state is CacheState.LOADING:
                self.state = previous_state
            return
        except (BallKnowledgeError, ValueError) as exc:
            # ValueError covers pydantic validation of a malformed response
            self.error = exc
            # A forced logout during the call has already reset us to EMPTY
            if self.state is CacheState.LOADING:
                self.state = previous_state
            logger.error("Predictions fetch error: %s", exc)
            return

        index: Dict[str, Prediction] = {}
        for prediction in predictions:
            # Last write wins if the server ever repeats a match
            index[prediction.match_id] = prediction

        self.index = index
        self.state = CacheState.READY
        self.error = None
        logger.info(
            "Indexed %d predictions for user %s.",
            len(index),
            session.identity.user_id,
        )

    def refetch(self) -> None:
        self.fetch_user_predictions()

    def add_prediction(self, match_id: str, prediction: Prediction) -> None:
        """Record a prediction the server has just accepted. No network call."""
        if not self._store.current_session().is_authenticated:
            logger.debug("Ignoring local prediction for %s: no session.", match_id)
            return
        self.index[str(match_id)] = prediction

    def has_prediction(self, match_id: str) -> bool:
        return str(match_id) in self.index

    def get(self, match_id: str) -> Optional[Prediction]:
        return self.index.get(str(match_id))

    @property
    def loading(self) -> bool:
        return self.state is CacheState.LOADING
