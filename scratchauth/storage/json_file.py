"""JSON file cookie storage implementation"""

import asyncio
import json
import logging
from pathlib import Path

from ..core.types import LoginCookies

logger = logging.getLogger(__name__)


class JsonFileCookieStorage:
    """Store session cookies in a JSON file, keyed by lower-cased username"""

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._lock = asyncio.Lock()

    async def _read_file(self) -> dict[str, dict]:
        """Read entries from file"""
        if not self._path.exists():
            return {}

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"[Cookie storage] Unreadable file {self._path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    async def _write_file(self, data: dict[str, dict]) -> None:
        """Write entries to file"""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    @staticmethod
    def _key(username: str) -> str:
        return username.strip().lower()

    @staticmethod
    def _to_cookies(entry: dict) -> LoginCookies | None:
        session_cookie = entry.get("session_cookie")
        if not session_cookie:
            return None
        return LoginCookies(
            session_cookie=session_cookie, csrf_token=entry.get("csrf_token", "")
        )

    async def load(self, username: str) -> LoginCookies | None:
        """Load cookies for a user"""
        async with self._lock:
            data = await self._read_file()
        entry = data.get(self._key(username))
        return self._to_cookies(entry) if isinstance(entry, dict) else None

    async def save(self, username: str, cookies: LoginCookies) -> None:
        """Save cookies for a user"""
        if not cookies.session_cookie:
            return

        async with self._lock:
            data = await self._read_file()
            data[self._key(username)] = {
                "session_cookie": cookies.session_cookie,
                "csrf_token": cookies.csrf_token,
            }
            await self._write_file(data)

    async def delete(self, username: str) -> None:
        """Forget cookies for a user"""
        async with self._lock:
            data = await self._read_file()
            if data.pop(self._key(username), None) is not None:
                await self._write_file(data)

    async def load_all(self) -> dict[str, LoginCookies]:
        """Load all stored cookies"""
        async with self._lock:
            data = await self._read_file()
        result = {}
        for key, entry in data.items():
            cookies = self._to_cookies(entry) if isinstance(entry, dict) else None
            if cookies:
                result[key] = cookies
        return result
