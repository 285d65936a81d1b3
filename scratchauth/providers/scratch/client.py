"""Scratch API client for calls made on behalf of a session"""

import logging
from typing import Any, Mapping

from ...auth.headers import XTOKEN_HEADER, base_headers, without_cookie
from ...client.base import HttpSession
from ...config import ScratchConfig
from ...core.exceptions import APIError, NetworkFailure, SessionError
from ...session.lifecycle import Session

logger = logging.getLogger(__name__)

MY_STUFF_FILTERS = ("all", "shared", "notshared", "trashed")
MY_STUFF_SORTS = ("", "view_count", "love_count", "remixers_count", "title")


class ScratchClient:
    """Thin pass-through calls; all credential handling stays in Session"""

    def __init__(self, http: HttpSession, config: ScratchConfig | None = None):
        self._http = http
        self._config = config or ScratchConfig()

    async def _get(
        self, url: str, headers: Mapping[str, str], params: dict | None = None
    ) -> Any:
        try:
            resp = await self._http.get(url, headers=dict(headers), params=params)
        except SessionError:
            raise
        except Exception as e:
            logger.error(f"[Scratch API] GET {url} failed: {e}")
            raise NetworkFailure(url, str(e)) from e

        if resp.status_code != 200:
            logger.warning(f"[Scratch API] GET {url} returned {resp.status_code}")
            raise APIError(resp.status_code, f"GET {url} failed", response=resp.text)

        try:
            return resp.json()
        except Exception as e:
            raise APIError(resp.status_code, "invalid JSON response", resp.text) from e

    def _optional_headers(self, session: Session | None) -> dict[str, str]:
        """Session headers when it still has a cookie, else the public set.

        The API host authenticates with X-Token only, so no Cookie is sent.
        """
        if session is not None and session.session_cookie:
            return without_cookie(session.headers)
        return base_headers(self._config)

    async def get_user_profile(
        self, username: str, session: Session | None = None
    ) -> dict:
        """Public profile: {"scratchteam", "profile": {"status", "bio", "country"}, ...}"""
        return await self._get(
            f"{self._config.api_url}/users/{username}", self._optional_headers(session)
        )

    async def get_user_projects(
        self,
        username: str,
        limit: int = 20,
        offset: int = 0,
        session: Session | None = None,
    ) -> list[dict]:
        """A user's shared projects; unshared ones need the owner's xtoken"""
        headers = self._optional_headers(session)
        if XTOKEN_HEADER in headers:
            logger.debug(f"[Scratch API] Listing projects of {username} with xtoken")
        return await self._get(
            f"{self._config.api_url}/users/{username}/projects",
            headers,
            params={"limit": limit, "offset": offset},
        )

    async def get_my_stuff_projects(
        self,
        session: Session,
        page: int = 1,
        sort_by: str = "",
        filter_by: str = "all",
        descending: bool = True,
    ) -> list[dict]:
        """One page of the logged-in user's "My Stuff" projects"""
        if filter_by not in MY_STUFF_FILTERS:
            raise ValueError(f"filter_by must be one of {MY_STUFF_FILTERS}")
        if sort_by not in MY_STUFF_SORTS:
            raise ValueError(f"sort_by must be one of {MY_STUFF_SORTS}")
        if page < 1:
            raise ValueError("page starts at 1")

        headers = session.require_authenticated("get_my_stuff_projects")
        params = {
            "page": page,
            "ascsort": "" if descending else sort_by,
            "descsort": sort_by if descending else "",
        }
        return await self._get(
            f"{self._config.base_url}/site-api/projects/{filter_by}/",
            headers,
            params=params,
        )
