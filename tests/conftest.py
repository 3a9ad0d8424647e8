import os
import sys

import httpx
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fake_backend import VALID_TOKEN, BackendState, create_backend  # noqa: E402
from homeserve.http_client import ApiClient  # noqa: E402
from homeserve.session_store import SessionStore  # noqa: E402

BASE_URL = "http://backend.test/api"


@pytest.fixture
def backend():
    return BackendState()


@pytest.fixture
def transport(backend):
    return httpx.ASGITransport(app=create_backend(backend))


@pytest.fixture
def session_store():
    return SessionStore(token=VALID_TOKEN)


@pytest.fixture
def redirects():
    return []


@pytest.fixture
def make_api(session_store, transport, redirects):
    def _make(**kwargs):
        kwargs.setdefault("base_url", BASE_URL)
        kwargs.setdefault("on_unauthorized", redirects.append)
        kwargs.setdefault("transport", transport)
        return ApiClient(session_store, **kwargs)

    return _make
