"""Scratch provider class"""

import logging
from pathlib import Path

from ...client.base import HttpSession
from ...client.curl import CurlTransport
from ...config import ScratchConfig, load_config
from ...core.exceptions import CredentialRejected
from ...core.types import AcquisitionState, LoginCookies
from ...session.lifecycle import Session
from ...storage.base import CookieStorage
from ...storage.json_file import JsonFileCookieStorage
from .auth import ScratchTokenAcquirer
from .client import ScratchClient

logger = logging.getLogger(__name__)


class Scratch:
    """Builds independent Sessions that share one transport and cookie store"""

    def __init__(
        self,
        config: ScratchConfig | None = None,
        http: HttpSession | None = None,
        storage: CookieStorage | None = None,
    ):
        self.config = config or ScratchConfig()
        self._http = http or CurlTransport(
            impersonate=self.config.impersonate, timeout=self.config.request_timeout
        )
        self.storage = storage or JsonFileCookieStorage(self.config.cookie_storage_path)
        self.acquirer = ScratchTokenAcquirer(self._http, self.config)
        self.client = ScratchClient(self._http, self.config)

        logger.info(f"Scratch provider initialized for {self.config.base_url}")

    @classmethod
    def from_config_file(cls, config_path: str | Path = "config.json") -> "Scratch":
        """
        Initialize Scratch provider from config file.

        Args:
            config_path: Path to config.json file
        """
        return cls(load_config(config_path))

    def new_session(self) -> Session:
        """Fresh, unauthenticated session"""
        return Session(self.acquirer, self.config)

    async def login(
        self,
        username: str,
        password: str,
        remember: bool = False,
        timeout_ms: float | None = None,
    ) -> Session:
        """Password login; optionally store the cookie for resume()"""
        session = self.new_session()
        await session.login(username, password, timeout_ms)
        if remember:
            await self.storage.save(
                username, LoginCookies(session.session_cookie, session.csrf_token)
            )
        return session

    async def resume(self, username: str, timeout_ms: float | None = None) -> Session:
        """Log in with a stored session cookie instead of a password"""
        cookies = await self.storage.load(username)
        if cookies is None:
            raise CredentialRejected(username, "no stored session cookie")

        session = self.new_session()
        await session.session_login(cookies.session_cookie, username, cookies.csrf_token)
        state = await session.wait(timeout_ms)
        if state == AcquisitionState.FAILED:
            logger.warning(
                f"Stored cookie for {username} did not yield an xtoken: "
                f"{session.last_error}"
            )
        return session

    async def logout(self, session: Session, keep_identity: bool = False) -> bool:
        """Log out and forget any stored cookie for the user"""
        username = session.username
        confirmed = await session.logout(keep_identity=keep_identity)
        if username:
            await self.storage.delete(username)
        return confirmed
