"""Token acquirer protocol"""

from typing import Mapping, Protocol

from ..core.types import LoginCookies, TokenGrant


class TokenAcquirer(Protocol):
    """Protocol for exchanging credentials for more privileged tokens"""

    async def password_login(
        self, username: str, password: str, csrf_token: str | None = None
    ) -> LoginCookies:
        """
        Exchange username/password for a session cookie and CSRF token.
        Raises CredentialRejected or NetworkFailure.
        """
        ...

    async def fetch_extended_token(
        self, session_cookie: str, csrf_token: str
    ) -> TokenGrant:
        """
        Exchange a session cookie for the xtoken and the user's identity.
        Raises MalformedResponse or NetworkFailure.
        """
        ...

    async def logout(self, headers: Mapping[str, str]) -> bool:
        """
        Invalidate the server-side session. Returns True on HTTP 200.
        Raises NetworkFailure.
        """
        ...
