import json
from typing import Any, Callable, Dict, List, Tuple, Union
from urllib.parse import urlparse

import jwt
import pytest
import requests
from requests.adapters import BaseAdapter

from ballknowledge.app_context import build_client_context
from ballknowledge.auth.storage import MemoryCredentialStorage

SECRET = "test-secret-key-that-is-long-enough-for-hs256"
NOW_MS = 1_700_000_000_000
NOW_S = NOW_MS // 1000
BASE_URL = "http://api.test/api"

RouteResult = Union[Tuple[int, Any], Exception, Callable[[requests.PreparedRequest], Tuple[int, Any]]]


def make_token(user_id: str = "user-1", exp: float | None = NOW_S + 3600, **extra) -> str:
    payload: Dict[str, Any] = {"user_id": user_id, **extra}
    if exp is not None:
        payload["exp"] = exp
    return jwt.encode(payload, SECRET, algorithm="HS256")


class FakeClock:
    def __init__(self, now: int = NOW_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now


class RecordingAdapter(BaseAdapter):
    """Transport that answers from a route table and records every request."""

    def __init__(self, routes: Dict[Tuple[str, str], RouteResult] | None = None):
        super().__init__()
        self.routes: Dict[Tuple[str, str], RouteResult] = dict(routes or {})
        self.requests: List[requests.PreparedRequest] = []

    def send(self, request, **kwargs):
        self.requests.append(request)
        result = self.routes.get(
            (request.method, urlparse(request.url).path),
            (404, {"error": "not found"}),
        )
        if isinstance(result, Exception):
            raise result
        if callable(result):
            result = result(request)
        status, body = result

        response = requests.Response()
        response.status_code = status
        response.reason = "OK" if status < 400 else "Error"
        response.url = request.url
        response.request = request
        response.encoding = "utf-8"
        if isinstance(body, str):
            response._content = body.encode("utf-8")
            response.headers["Content-Type"] = "text/plain"
        elif body is None:
            response._content = b""
        else:
            response._content = json.dumps(body).encode("utf-8")
            response.headers["Content-Type"] = "application/json"
        return response

    def close(self):
        pass


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def storage():
    return MemoryCredentialStorage()


@pytest.fixture
def adapter():
    return RecordingAdapter()


@pytest.fixture
def http(adapter):
    session = requests.Session()
    session.mount("http://", adapter)
    return session


@pytest.fixture
def redirects():
    return []


@pytest.fixture
def make_client(storage, http, clock, redirects):
    def _make(**overrides):
        kwargs = dict(
            storage=storage,
            base_url=BASE_URL,
            http=http,
            on_session_expired=lambda: redirects.append("login"),
            clock=clock,
        )
        kwargs.update(overrides)
        return build_client_context(**kwargs)

    return _make
