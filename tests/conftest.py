"""Shared fixtures: a recording stand-in for aiohttp.ClientSession."""

import json
from dataclasses import dataclass, field
from unittest.mock import AsyncMock

import pytest

from authgate.config import Settings

API = "https://discord.test/api/v10"
STORE = "https://store.test/users"


@dataclass
class Call:
    method: str
    url: str
    kwargs: dict = field(default_factory=dict)


class FakeResponse:
    def __init__(self, status=200, body=""):
        self.status = status
        if isinstance(body, bytes):
            self.raw = body
        else:
            self.raw = (body if isinstance(body, str) else json.dumps(body)).encode("utf-8")

    async def read(self):
        return self.raw

    async def text(self):
        return self.raw.decode("utf-8")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Answers requests from a route table and records every call in order."""

    def __init__(self):
        self.calls: list[Call] = []
        self.routes: dict[tuple[str, str], list] = {}
        self.opened = 0
        self.closed = 0

    def add(self, method, url, status=200, body="", exc=None):
        self.routes.setdefault((method, url), []).append(exc or FakeResponse(status, body))
        return self

    def _request(self, method, url, **kwargs):
        self.calls.append(Call(method, url, kwargs))
        queue = self.routes.get((method, url))
        if not queue:
            return FakeResponse(404, '{"message": "Unknown route"}')
        answer = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(answer, BaseException):
            raise answer
        return answer

    def post(self, url, **kwargs):
        return self._request("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._request("GET", url, **kwargs)

    def put(self, url, **kwargs):
        return self._request("PUT", url, **kwargs)

    def calls_to(self, method):
        return [c for c in self.calls if c.method == method]

    async def __aenter__(self):
        self.opened += 1
        return self

    async def __aexit__(self, *exc):
        self.closed += 1
        return False


def token_url():
    return f"{API}/oauth2/token"


def profile_url():
    return f"{API}/users/@me"


def join_url(guild_id, user_id="42"):
    return f"{API}/guilds/{guild_id}/members/{user_id}"


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def happy_session(session):
    """Exchange -> tok1, profile -> alice (42), store and joins succeed."""
    session.add("POST", token_url(), body={"access_token": "tok1", "token_type": "Bearer", "scope": "identify guilds.join"})
    session.add("GET", profile_url(), body={"id": "42", "username": "alice"})
    session.add("POST", STORE, status=201, body="{}")
    session.add("PUT", join_url("g1"), status=201, body="{}")
    session.add("PUT", join_url("g2"), status=201, body="{}")
    return session


@pytest.fixture
def settings():
    return Settings(
        client_id="cid",
        client_secret="csec",
        bot_token="bot-token",
        guild_ids=("g1", "g2"),
        store_url=STORE,
        api_base=API,
        join_delay=30.0,
    )


@pytest.fixture
def sleep():
    return AsyncMock()
