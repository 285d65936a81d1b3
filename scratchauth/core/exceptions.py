"""Custom exceptions for scratchauth"""

from typing import Any


class SessionError(Exception):
    """Base exception for session and credential failures"""

    pass


class CredentialRejected(SessionError):
    """Login did not produce a session cookie"""

    def __init__(self, username: str, detail: str | None = None):
        self.username = username
        self.detail = detail
        msg = f"Credentials rejected for user: {username or '<unknown>'}"
        if detail:
            msg += f" ({detail})"
        super().__init__(msg)


class NetworkFailure(SessionError):
    """Transport-level failure talking to the service"""

    def __init__(self, url: str, detail: str):
        self.url = url
        self.detail = detail
        super().__init__(f"Request to {url} failed: {detail}")


class MalformedResponse(SessionError):
    """Session endpoint answered without the fields we need"""

    def __init__(self, detail: str, response: Any = None):
        self.detail = detail
        self.response = response
        super().__init__(f"Malformed response: {detail}")


class AcquisitionTimeout(SessionError):
    """Waited too long for the xtoken"""

    def __init__(self, timeout_ms: float):
        self.timeout_ms = timeout_ms
        super().__init__(f"xtoken acquisition did not finish within {timeout_ms} ms")


class NotAuthenticated(SessionError):
    """Authenticated call attempted without live credentials"""

    def __init__(self, operation: str, reason: str | None = None):
        self.operation = operation
        self.reason = reason
        msg = f"{operation} requires an authenticated session"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class APIError(SessionError):
    """API call error"""

    def __init__(self, status_code: int, detail: str, response: Any = None):
        self.status_code = status_code
        self.detail = detail
        self.response = response
        super().__init__(f"API error {status_code}: {detail}")
