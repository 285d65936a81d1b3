"""Request header synthesis from session credentials"""

from types import MappingProxyType

from ..config import ScratchConfig
from ..core.types import CredentialMaterial

COOKIE_HEADER = "Cookie"
XTOKEN_HEADER = "X-Token"
CSRF_HEADER = "x-csrftoken"


def base_headers(config: ScratchConfig) -> dict[str, str]:
    """Headers carried by every request"""
    return {
        "user-agent": config.user_agent,
        "x-requested-with": "XMLHttpRequest",
        "referer": config.referer,
        "accept": "application/json",
        "Content-Type": "application/json",
    }


def cookie_header(session_cookie: str, csrf_token: str, language: str = "en") -> str:
    """Cookie header value; the session cookie part is left out when empty"""
    value = ""
    if session_cookie:
        value += f"scratchsessionsid={session_cookie};"
    value += f"scratchcsrftoken={csrf_token};scratchlanguage={language};"
    return value


def unauthenticated_headers(
    config: ScratchConfig, csrf_token: str | None = None
) -> dict[str, str]:
    """Headers for the password login call: CSRF only"""
    csrf_token = csrf_token or config.default_csrf_token
    headers = base_headers(config)
    headers[CSRF_HEADER] = csrf_token
    headers[COOKIE_HEADER] = cookie_header("", csrf_token, config.language)
    return headers


def build_headers(
    config: ScratchConfig, session_cookie: str, csrf_token: str, xtoken: str = ""
) -> dict[str, str]:
    """Headers for authenticated calls.

    With no session cookie this is the bare base set: there is nothing to
    authenticate with, so no Cookie header is produced.
    """
    headers = base_headers(config)
    if not session_cookie:
        return headers

    headers[CSRF_HEADER] = csrf_token
    headers[COOKIE_HEADER] = cookie_header(session_cookie, csrf_token, config.language)
    if xtoken:
        headers[XTOKEN_HEADER] = xtoken
    return headers


def build_material(
    config: ScratchConfig, session_cookie: str = "", csrf_token: str = "", xtoken: str = ""
) -> CredentialMaterial:
    """Snapshot credentials together with their derived headers"""
    return CredentialMaterial(
        session_cookie=session_cookie,
        csrf_token=csrf_token,
        xtoken=xtoken,
        headers=MappingProxyType(build_headers(config, session_cookie, csrf_token, xtoken)),
    )


def without_cookie(headers: dict[str, str]) -> dict[str, str]:
    """Copy of headers with the Cookie header removed (no-op if absent)"""
    stripped = dict(headers)
    stripped.pop(COOKIE_HEADER, None)
    return stripped
