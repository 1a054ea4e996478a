"""
Gate for views that need a logged-in user.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional, TypeVar

from ballknowledge.auth.session_store import SessionStore
from ballknowledge.config import LOGIN_VIEW
from ballknowledge.utils.logging_utils import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Navigator = Callable[[str], None]


class RouteGuard:
    """
    Renders a view only for an authenticated session, otherwise redirects.

    The session is read on every render; the guard keeps no state of its own.
    """

    def __init__(
        self,
        store: SessionStore,
        navigator: Navigator,
        login_view: str = LOGIN_VIEW,
    ):
        self.store = store
        self.navigator = navigator
        self.login_view = login_view

    def render(self, view: Callable[[], T]) -> Optional[T]:
        if not self.store.current_session().is_authenticated:
            logger.debug("Anonymous session; redirecting to %s.", self.login_view)
            self.navigator(self.login_view)
            return None
        return view()

    def protected(self, view: Callable[..., T]) -> Callable[..., Optional[T]]:
        """Decorator form of `render`."""

        @wraps(view)
        def guarded(*args, **kwargs):
            return self.render(lambda: view(*args, **kwargs))

        return guarded
