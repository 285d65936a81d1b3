"""
Pytest config.

Provides a scripted stand-in for the HTTP layer so no test touches the network.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()

from scratchauth.config import ScratchConfig  # noqa: E402

SESSION_SET_COOKIE = (
    'scratchcsrftoken=csrf123; expires=Fri, 01 Jan 2100 00:00:00 GMT; Path=/, '
    'scratchsessionsid="sess.abc"; expires=Fri, 01 Jan 2100 00:00:00 GMT; HttpOnly; Path=/'
)


def session_info(username: str = "Griffpatch", user_id: int = 1882674) -> dict:
    return {
        "user": {
            "id": user_id,
            "banned": False,
            "username": username,
            "token": "xtoken-1",
            "thumbnailUrl": "//cdn2.scratch.mit.edu/get_image/user/1882674_32x32.png",
            "dateJoined": "2012-10-24T20:37:53",
            "email": "someone@example.com",
        },
        "permissions": {
            "admin": False,
            "scratcher": True,
            "new_scratcher": False,
            "social": True,
            "educator": False,
            "educator_invitee": False,
            "student": False,
            "mute_status": {},
        },
        "flags": {},
    }


class FakeResponse:
    def __init__(
        self,
        status_code: int = 200,
        json_data: Any = None,
        headers: dict | None = None,
        text: str | None = None,
    ):
        self.status_code = status_code
        self._json = json_data
        self.headers = headers or {}
        self.text = text if text is not None else repr(json_data)

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("no JSON body")
        return self._json


class FakeHttp:
    """Scripted HTTP session: routes (method, url) to responses, records calls.

    A route value may be a FakeResponse, an exception to raise, a list of
    either (consumed in order), or an awaitable factory for slow responses.
    """

    def __init__(self, routes: dict | None = None):
        self.routes: dict[tuple[str, str], Any] = dict(routes or {})
        self.calls: list[dict] = []

    async def _respond(self, method: str, url: str, **kwargs):
        self.calls.append({"method": method, "url": url, **kwargs})
        route = self.routes.get((method, url))
        if route is None:
            return FakeResponse(404, text="not found")
        if isinstance(route, list):
            route = route.pop(0) if len(route) > 1 else route[0]
        if callable(route):
            route = await route()
        if isinstance(route, BaseException):
            raise route
        return route

    async def get(self, url, headers=None, params=None):
        return await self._respond("GET", url, headers=headers, params=params)

    async def post(self, url, headers=None, json=None):
        return await self._respond("POST", url, headers=headers, json=json)

    def calls_to(self, url: str) -> list[dict]:
        return [c for c in self.calls if c["url"] == url]


def slow(response: Any, delay: float, started: asyncio.Event | None = None):
    """Route factory that answers after ``delay`` seconds"""

    async def factory():
        if started is not None:
            started.set()
        await asyncio.sleep(delay)
        return response

    return factory


@pytest.fixture
def config() -> ScratchConfig:
    return ScratchConfig()


@pytest.fixture
def ok_routes(config: ScratchConfig) -> dict:
    return {
        ("POST", config.login_url): FakeResponse(
            200,
            [{"username": "griffpatch", "success": 1, "msg": ""}],
            headers={"set-cookie": SESSION_SET_COOKIE},
        ),
        ("POST", config.session_url): FakeResponse(200, session_info()),
        ("POST", config.logout_url): FakeResponse(200, text=""),
    }


@pytest.fixture
def http(ok_routes: dict) -> FakeHttp:
    return FakeHttp(ok_routes)
