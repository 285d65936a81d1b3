"""Cookie storage protocol"""

from typing import Protocol

from ..core.types import LoginCookies


class CookieStorage(Protocol):
    """Protocol for session cookie persistence"""

    async def load(self, username: str) -> LoginCookies | None:
        """Load cookies for a user"""
        ...

    async def save(self, username: str, cookies: LoginCookies) -> None:
        """Save cookies for a user"""
        ...

    async def delete(self, username: str) -> None:
        """Forget cookies for a user"""
        ...

    async def load_all(self) -> dict[str, LoginCookies]:
        """Load all stored cookies"""
        ...
