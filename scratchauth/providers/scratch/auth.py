"""Scratch token acquirer"""

import logging
import re
from typing import Any, Mapping

from ...auth.headers import build_headers, unauthenticated_headers
from ...client.base import HttpSession
from ...config import ScratchConfig
from ...core.exceptions import (
    CredentialRejected,
    MalformedResponse,
    NetworkFailure,
    SessionError,
)
from ...core.types import Identity, LoginCookies, Roles, TokenGrant

logger = logging.getLogger(__name__)

# The quotes are part of the cookie value and are sent back as-is
SESSION_COOKIE_RE = re.compile(r'scratchsessionsid=("[^"]+");')
CSRF_COOKIE_RE = re.compile(r"scratchcsrftoken=([^;\s,]+)")
PROTOCOL_RELATIVE_RE = re.compile(r"^//")


def mask(secret: str) -> str:
    """Short prefix of a secret, safe for logs"""
    secret = secret.strip('"')
    return f"{secret[:6]}..." if secret else "<empty>"


def _login_failure_detail(body: Any) -> str | None:
    """Pull "msg" out of the login endpoint's [{"success": 0, "msg": ...}] body"""
    if isinstance(body, list) and body and isinstance(body[0], dict):
        body = body[0]
    if isinstance(body, dict):
        msg = body.get("msg")
        return str(msg) if msg else None
    return None


def parse_login_cookies(
    set_cookie: str | None,
    username: str,
    fallback_csrf: str,
    body: Any = None,
) -> LoginCookies:
    """Extract the session cookie and CSRF token from Set-Cookie data.

    A missing CSRF cookie falls back to the token sent with the request;
    a missing session cookie means the login was refused.
    """
    match = SESSION_COOKIE_RE.search(set_cookie or "")
    if not match:
        raise CredentialRejected(username, _login_failure_detail(body))

    csrf_match = CSRF_COOKIE_RE.search(set_cookie or "")
    csrf_token = csrf_match.group(1) if csrf_match else fallback_csrf
    return LoginCookies(session_cookie=match.group(1), csrf_token=csrf_token)


def parse_session_info(data: Any) -> TokenGrant:
    """Build the xtoken grant from the session endpoint's JSON body"""
    try:
        user = data["user"]
        permissions = data["permissions"]
        xtoken = user["token"]
        identity = Identity(
            id=int(user["id"]),
            username=user["username"],
            date_joined=user["dateJoined"],
            thumbnail_url=PROTOCOL_RELATIVE_RE.sub("", user["thumbnailUrl"]),
            banned=bool(user["banned"]),
            roles=Roles(
                new_member=bool(permissions.get("new_scratcher", False)),
                admin=bool(permissions.get("admin", False)),
                verified_member=bool(permissions.get("scratcher", False)),
                educator=bool(permissions.get("educator", False)),
                student=bool(permissions.get("student", False)),
            ),
            mute_status=permissions.get("mute_status") or {},
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise MalformedResponse(f"missing or invalid field: {e}", response=data) from e

    if not xtoken:
        raise MalformedResponse("empty user.token", response=data)
    return TokenGrant(xtoken=xtoken, identity=identity)


class ScratchTokenAcquirer:
    """Password -> session cookie -> xtoken exchanges against scratch.mit.edu"""

    def __init__(self, http: HttpSession, config: ScratchConfig | None = None):
        self._http = http
        self._config = config or ScratchConfig()

    async def _post(
        self, url: str, headers: Mapping[str, str], json: Any = None
    ):
        try:
            return await self._http.post(url, headers=dict(headers), json=json)
        except SessionError:
            raise
        except Exception as e:
            logger.error(f"[Scratch] POST {url} failed: {e}")
            raise NetworkFailure(url, str(e)) from e

    async def password_login(
        self, username: str, password: str, csrf_token: str | None = None
    ) -> LoginCookies:
        """Login via username + password"""
        csrf_token = csrf_token or self._config.default_csrf_token
        resp = await self._post(
            self._config.login_url,
            unauthenticated_headers(self._config, csrf_token),
            json={"username": username, "password": password},
        )

        try:
            body = resp.json()
        except Exception:
            body = None

        set_cookie = resp.headers.get("set-cookie")
        try:
            cookies = parse_login_cookies(set_cookie, username, csrf_token, body)
        except CredentialRejected as e:
            logger.error(
                f"[Scratch login] No session cookie for {username} "
                f"(HTTP {resp.status_code}): {e.detail or 'no detail'}"
            )
            raise

        logger.info(
            f"[Scratch login] Got session cookie {mask(cookies.session_cookie)} "
            f"for {username}"
        )
        return cookies

    async def fetch_extended_token(
        self, session_cookie: str, csrf_token: str
    ) -> TokenGrant:
        """Exchange the session cookie for the xtoken and identity"""
        resp = await self._post(
            self._config.session_url,
            build_headers(self._config, session_cookie, csrf_token),
        )

        if resp.status_code != 200:
            logger.warning(f"[Scratch session] Failed with status {resp.status_code}")
            raise MalformedResponse(
                f"session endpoint returned HTTP {resp.status_code}", response=resp.text
            )

        try:
            data = resp.json()
        except Exception as e:
            logger.error(f"[Scratch session] JSON parse failed: {e}")
            raise MalformedResponse("invalid JSON response", response=resp.text) from e

        grant = parse_session_info(data)
        logger.info(
            f"[Scratch session] xtoken acquired for {grant.identity.username} "
            f"(id={grant.identity.id})"
        )
        return grant

    async def logout(self, headers: Mapping[str, str]) -> bool:
        """Invalidate the server-side session"""
        resp = await self._post(self._config.logout_url, headers)
        if resp.status_code != 200:
            logger.warning(f"[Scratch logout] Failed with status {resp.status_code}")
            return False
        return True
