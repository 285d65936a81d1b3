"""curl_cffi backed HTTP transport"""

import logging
from typing import Any, Mapping

from curl_cffi.requests import AsyncSession

logger = logging.getLogger(__name__)


class CurlTransport:
    """Issues each request on a short-lived AsyncSession.

    No cookie jar survives between requests: credentials travel only in the
    explicit Cookie header each Session builds for itself.
    """

    def __init__(self, impersonate: str = "chrome", timeout: float = 30.0):
        self._impersonate = impersonate
        self._timeout = timeout

    async def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        params: dict | None = None,
    ):
        logger.debug(f"[HTTP] GET {url}")
        async with AsyncSession(
            impersonate=self._impersonate, timeout=self._timeout
        ) as s:
            return await s.get(url, headers=dict(headers or {}), params=params)

    async def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        json: Any = None,
    ):
        logger.debug(f"[HTTP] POST {url}")
        async with AsyncSession(
            impersonate=self._impersonate, timeout=self._timeout
        ) as s:
            return await s.post(url, headers=dict(headers or {}), json=json)
