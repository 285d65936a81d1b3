"""HTTP session protocol"""

from typing import Any, Mapping, Protocol


class HttpResponse(Protocol):
    """The parts of a response object we read"""

    status_code: int
    headers: Any
    text: str

    def json(self) -> Any: ...


class HttpSession(Protocol):
    """Protocol for the async HTTP layer (curl_cffi AsyncSession compatible)"""

    async def get(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        params: dict | None = None,
    ) -> HttpResponse:
        ...

    async def post(
        self,
        url: str,
        headers: Mapping[str, str] | None = None,
        json: Any = None,
    ) -> HttpResponse:
        ...
