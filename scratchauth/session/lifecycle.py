"""Session lifecycle: login, background xtoken acquisition, logout and reset"""

import asyncio
import logging

from ..auth.base import TokenAcquirer
from ..auth.headers import build_material
from ..config import ScratchConfig
from ..core.exceptions import (
    AcquisitionTimeout,
    CredentialRejected,
    NotAuthenticated,
    SessionError,
)
from ..core.types import (
    AcquisitionState,
    CredentialMaterial,
    Identity,
    SessionSnapshot,
    SessionState,
)
from .gate import CompletionGate

logger = logging.getLogger(__name__)

FINISHED = (AcquisitionState.COMPLETE, AcquisitionState.FAILED)
LIVE_STATES = (
    SessionState.AUTHENTICATING,
    SessionState.AUTHENTICATED,
    SessionState.DEGRADED,
)


class Session:
    """Credential chain for one user: password -> session cookie -> xtoken.

    ``session_login`` starts the xtoken exchange as a detached task, so code
    running right after it may see ``AcquisitionState.PENDING``; use
    ``wait()`` when the xtoken or identity is needed. ``login`` waits for
    you. Failures of the detached task never propagate: they leave the
    session ``DEGRADED`` with the exception in ``last_error``.

    Every Session owns its own credentials and headers; nothing is shared
    between instances.
    """

    def __init__(self, acquirer: TokenAcquirer, config: ScratchConfig | None = None):
        self._acquirer = acquirer
        self._config = config or ScratchConfig()
        self._gate = CompletionGate()
        self._task: asyncio.Task | None = None
        self._generation = 0
        self._waiters = 0
        self._clear()

    def _clear(self) -> None:
        self._material: CredentialMaterial = build_material(self._config)
        self._identity = Identity()
        self._username = ""
        self._state = SessionState.UNAUTHENTICATED
        self._acquisition_state = AcquisitionState.IDLE
        self._last_error: Exception | None = None

    # Accessors

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def acquisition_state(self) -> AcquisitionState:
        return self._acquisition_state

    @property
    def session_cookie(self) -> str:
        return self._material.session_cookie

    @property
    def csrf_token(self) -> str:
        return self._material.csrf_token

    @property
    def xtoken(self) -> str:
        return self._material.xtoken

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def username(self) -> str:
        """Username as returned by the service, else the one we logged in with"""
        return self._identity.username or self._username

    @property
    def headers(self) -> dict[str, str]:
        """Copy of the headers derived from the current credentials"""
        return dict(self._material.headers)

    @property
    def last_error(self) -> Exception | None:
        return self._last_error

    @property
    def is_authenticated(self) -> bool:
        return self._state == SessionState.AUTHENTICATED

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            state=self._state,
            acquisition_state=self._acquisition_state,
            session_cookie=self._material.session_cookie,
            csrf_token=self._material.csrf_token,
            xtoken=self._material.xtoken,
            identity=self._identity,
            username=self._username,
            headers=self.headers,
            last_error=str(self._last_error) if self._last_error else None,
        )

    def __repr__(self) -> str:
        return (
            f"Session(username={self.username!r}, state={self._state.name}, "
            f"acquisition={self._acquisition_state.name})"
        )

    # Guards for callers making authenticated requests

    def require_authenticated(self, operation: str) -> dict[str, str]:
        """Headers for a cookie-level call, or NotAuthenticated"""
        if self._state not in LIVE_STATES or not self._material.has_cookie:
            raise NotAuthenticated(operation, f"session is {self._state.name}")
        return self.headers

    def require_xtoken(self, operation: str) -> dict[str, str]:
        """Headers for a call that needs the xtoken, or NotAuthenticated"""
        headers = self.require_authenticated(operation)
        if self._acquisition_state != AcquisitionState.COMPLETE:
            reason = f"xtoken is {self._acquisition_state.name}"
            if self._last_error:
                reason += f": {self._last_error}"
            raise NotAuthenticated(operation, reason)
        return headers

    # Acquisition

    def _cancel_acquisition(self) -> None:
        """Drop any in-flight acquisition and release its waiters"""
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None
        self._gate.rearm()

    def _start_acquisition(self) -> None:
        self._cancel_acquisition()
        material = build_material(
            self._config, self._material.session_cookie, self._material.csrf_token
        )
        self._material = material
        self._state = SessionState.AUTHENTICATING
        self._acquisition_state = AcquisitionState.PENDING
        self._last_error = None
        self._task = asyncio.create_task(
            self._acquire(self._generation, material.session_cookie, material.csrf_token)
        )

    async def _acquire(self, generation: int, session_cookie: str, csrf_token: str):
        try:
            grant = await self._acquirer.fetch_extended_token(session_cookie, csrf_token)
        except Exception as e:
            if generation != self._generation:
                return
            self._last_error = e
            self._acquisition_state = AcquisitionState.FAILED
            self._state = SessionState.DEGRADED
            if self._waiters:
                logger.info(f"[Scratch session] xtoken fetch failed: {e}")
            else:
                logger.warning(
                    f"Could not fetch xtoken for {self.username or '<unknown>'} even "
                    f"though the session cookie is set. Features needing it will "
                    f"not work. Error: {e}"
                )
            self._gate.open()
            return

        if generation != self._generation:
            logger.debug("[Scratch session] Discarding xtoken from a superseded login")
            return

        self._material = build_material(
            self._config, session_cookie, csrf_token, grant.xtoken
        )
        self._identity = grant.identity
        self._acquisition_state = AcquisitionState.COMPLETE
        self._state = SessionState.AUTHENTICATED
        self._gate.open()

    async def wait(self, timeout_ms: float | None = None) -> AcquisitionState:
        """Wait until the xtoken acquisition completes or fails.

        Returns immediately when it already has. Raises AcquisitionTimeout
        when ``timeout_ms`` elapses first (the acquisition keeps running),
        and NotAuthenticated when no acquisition was started.
        """
        if timeout_ms is None:
            timeout_ms = self._config.login_timeout_ms
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout_ms / 1000

        self._waiters += 1
        try:
            while True:
                if self._acquisition_state in FINISHED:
                    return self._acquisition_state
                if self._acquisition_state == AcquisitionState.IDLE:
                    raise NotAuthenticated("wait", "no xtoken acquisition started")

                remaining_ms = (deadline - loop.time()) * 1000
                if remaining_ms <= 0:
                    raise AcquisitionTimeout(timeout_ms)
                try:
                    await self._gate.wait(remaining_ms)
                except AcquisitionTimeout:
                    raise AcquisitionTimeout(timeout_ms) from None
        finally:
            self._waiters -= 1

    # Lifecycle

    async def session_login(
        self, session_cookie: str, username: str = "", csrf_token: str | None = None
    ) -> "Session":
        """Use an already obtained session cookie and start fetching the xtoken.

        Returns without waiting; see ``wait()``.
        """
        if not session_cookie:
            raise CredentialRejected(username, "empty session cookie")

        self.reset()
        self._username = username
        self._material = build_material(
            self._config, session_cookie, csrf_token or self._config.default_csrf_token
        )
        self._start_acquisition()
        logger.info(f"[Scratch session] Session login for {username or '<unknown>'}")
        return self

    async def login(
        self, username: str, password: str, timeout_ms: float | None = None
    ) -> "Session":
        """Password login, then wait (bounded) for the xtoken.

        A session whose xtoken fetch failed is returned ``DEGRADED``, not
        raised. A rejected password or transport failure drops any earlier
        credentials and leaves the session ``UNAUTHENTICATED``.
        """
        try:
            cookies = await self._acquirer.password_login(
                username, password, self._config.default_csrf_token
            )
        except SessionError:
            self.reset()
            raise
        await self.session_login(cookies.session_cookie, username, cookies.csrf_token)
        await self.wait(timeout_ms)
        return self

    async def fetch_extended_token(
        self, timeout_ms: float | None = None
    ) -> AcquisitionState:
        """Retry the xtoken exchange with the current cookie and wait for it"""
        self.require_authenticated("fetch_extended_token")
        self._start_acquisition()
        return await self.wait(timeout_ms)

    async def logout(self, keep_identity: bool = False) -> bool:
        """Log out server-side and clear local credentials.

        Returns whether the service confirmed (HTTP 200). Local credentials
        are cleared either way. With ``keep_identity`` the identity stays
        readable but the session can't make authenticated calls.
        """
        # Local state is cleared before the request is awaited
        headers = self.headers if self._material.has_cookie else None

        if keep_identity:
            identity, username = self._identity, self._username
            self._cancel_acquisition()
            self._clear()
            self._identity, self._username = identity, username
            self._state = SessionState.LOGGED_OUT_KEEP_DATA
        else:
            self.reset()

        if headers is None:
            logger.info("[Scratch logout] No session cookie, skipping server logout")
            return False

        try:
            return await self._acquirer.logout(headers)
        except SessionError as e:
            logger.warning(f"[Scratch logout] Request failed: {e}")
            return False

    def reset(self) -> None:
        """Return to the state of a freshly constructed session"""
        self._cancel_acquisition()
        self._clear()
