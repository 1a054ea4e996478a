"""
Wiring for one client: session store, request pipeline, API client and
prediction cache, built together so they share the same session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

import requests

from ballknowledge.api.client import ApiClient
from ballknowledge.api.pipeline import AuthorizedRequestPipeline
from ballknowledge.auth import token_codec
from ballknowledge.auth.session_store import SessionStore
from ballknowledge.auth.storage import CredentialStorage, FileCredentialStorage
from ballknowledge.config import API_BASE_URL
from ballknowledge.predictions.cache import PredictionCache


@dataclass
class ClientContext:
    store: SessionStore
    pipeline: AuthorizedRequestPipeline
    api: ApiClient
    predictions: PredictionCache

    def close(self) -> None:
        self.predictions.close()
        self.pipeline.http.close()


def build_client_context(
    storage: Optional[CredentialStorage] = None,
    base_url: str = API_BASE_URL,
    http: Optional[requests.Session] = None,
    on_session_expired: Optional[Callable[[], None]] = None,
    clock: Callable[[], int] = token_codec.now_ms,
) -> ClientContext:
    """
    Build a client.

    The session store restores any persisted credential here, and the
    prediction cache fetches right away if that restore succeeded.
    """
    store = SessionStore(
        storage if storage is not None else FileCredentialStorage(), clock=clock
    )
    pipeline = AuthorizedRequestPipeline(
        store,
        base_url=base_url,
        http=http,
        on_session_expired=on_session_expired,
    )
    api = ApiClient(pipeline)
    predictions = PredictionCache(store, api.get_user_predictions)
    return ClientContext(store=store, pipeline=pipeline, api=api, predictions=predictions)
