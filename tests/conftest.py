"""Pytest fixtures."""

import base64
import json
from typing import Callable

import pytest
import requests
from nacl.public import PrivateKey

from repostrap.config import Config


class FakeSession:
    """Stand-in for requests.Session that routes requests to a handler."""

    def __init__(self, handler: Callable):
        self.headers = {}
        self.calls = []
        self.handler = handler

    def request(self, method, url, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        return self.handler(method, url, kwargs)


def build_response(status: int, body=None, url: str = "https://api.github.com/") -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.encoding = "utf-8"
    if body is None:
        response._content = b""
    elif isinstance(body, (bytes, str)):
        response._content = body.encode("utf-8") if isinstance(body, str) else body
    else:
        response._content = json.dumps(body).encode("utf-8")
    return response


@pytest.fixture
def config() -> Config:
    return Config(token="test-token-123456", org="acme")


@pytest.fixture
def recipient_key() -> PrivateKey:
    """The repository's Actions keypair, as GitHub would hold it."""
    return PrivateKey.generate()


@pytest.fixture
def recipient_key_b64(recipient_key: PrivateKey) -> str:
    return base64.b64encode(bytes(recipient_key.public_key)).decode("ascii")


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    return build_response


@pytest.fixture
def fake_session() -> Callable[[Callable], FakeSession]:
    return FakeSession
