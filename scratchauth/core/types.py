"""Core data types for scratchauth"""

from dataclasses import dataclass, field
from enum import Enum, auto
from types import MappingProxyType
from typing import Mapping

DEFAULT_DATE_JOINED = "2000-01-01T00:00:00"


class AcquisitionState(Enum):
    """Progress of the cookie -> xtoken exchange"""

    IDLE = auto()  # Nothing started
    PENDING = auto()  # Request in flight
    COMPLETE = auto()  # xtoken and identity stored
    FAILED = auto()  # last_error holds the reason


class SessionState(Enum):
    """Lifecycle state of a Session"""

    UNAUTHENTICATED = auto()
    AUTHENTICATING = auto()  # Cookie set, xtoken pending
    AUTHENTICATED = auto()  # Cookie and xtoken
    DEGRADED = auto()  # Cookie only, xtoken fetch failed
    LOGGED_OUT_KEEP_DATA = auto()  # Identity kept for display, no credentials


@dataclass(frozen=True)
class Roles:
    """Permission flags reported by the session endpoint"""

    new_member: bool = False
    admin: bool = False
    verified_member: bool = False
    educator: bool = False
    student: bool = False


@dataclass(frozen=True)
class Identity:
    """User identity, populated by a completed acquisition"""

    id: int = 0
    username: str = ""
    date_joined: str = DEFAULT_DATE_JOINED  # YYYY-MM-DDTHH:MM:SS
    thumbnail_url: str = ""  # 32x32, without leading "//"
    banned: bool = False
    roles: Roles = field(default_factory=Roles)
    mute_status: dict = field(default_factory=dict)


@dataclass(frozen=True)
class LoginCookies:
    """Result of a password login"""

    session_cookie: str
    csrf_token: str


@dataclass(frozen=True)
class TokenGrant:
    """Result of the cookie -> xtoken exchange"""

    xtoken: str
    identity: Identity


@dataclass(frozen=True)
class CredentialMaterial:
    """Credentials of one session plus the headers derived from them.

    Instances are never mutated. Every write to the cookie, CSRF token or
    xtoken builds a new instance (see ``auth.headers.build_material``), so
    ``headers`` always matches the credentials next to it.
    """

    session_cookie: str = ""
    csrf_token: str = ""
    xtoken: str = ""
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def has_cookie(self) -> bool:
        return bool(self.session_cookie)


@dataclass(frozen=True)
class SessionSnapshot:
    """Field-by-field view of a Session, used for comparisons"""

    state: SessionState
    acquisition_state: AcquisitionState
    session_cookie: str
    csrf_token: str
    xtoken: str
    identity: Identity
    username: str
    headers: dict
    last_error: str | None
