"""
TodoMVC — HTTP Client for the Task API
========================================

What:  Async calls to the six task endpoints, MessagePack in and out.
How:   Wraps an httpx.AsyncClient. Every request carries
       `Content-Type: application/msgpack`; no timeout is applied.

Failures:
    StatusError  the server answered with a non-2xx status
    DataError    a 2xx body could not be decoded
    httpx.HTTPError subclasses propagate for transport failures
"""

import logging
from http import HTTPStatus
from typing import Any, Iterable, List, Optional
from uuid import UUID

import httpx

from todomvc import codec
from todomvc.exceptions import PayloadError
from todomvc.schemas.task import Entry

logger = logging.getLogger(__name__)

_HEADERS = {"Content-Type": codec.MSGPACK_MEDIA_TYPE}


class FetchError(Exception):
    """Base class for failed API calls."""


class StatusError(FetchError):
    """Non-success HTTP status, with the canonical reason phrase and server message."""

    def __init__(self, status: int, reason: Optional[str] = None, body: str = ""):
        self.status = status
        self.reason = reason
        self.body = body
        super().__init__(f"Got status code: {status}, reason: {reason or 'No reason'}")


class DataError(FetchError):
    """A successful response carried a body that is not the expected payload."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Error fetching data, reason: {reason}")


def _reason_phrase(status: int) -> Optional[str]:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return None


class TodoApi:
    """
    Client for the task endpoints.

    Pass `client` to reuse an existing httpx.AsyncClient (for instance one
    bound to an ASGI app in tests); otherwise one is created for `base_url`
    and closed by `aclose()`.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=None)

    async def __aenter__(self) -> "TodoApi":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(
        self,
        method: str,
        url: str,
        content: Optional[bytes] = None,
        params: Optional[dict] = None,
    ) -> httpx.Response:
        response = await self._client.request(
            method, url, content=content, params=params, headers=_HEADERS
        )
        if not response.is_success:
            raise StatusError(response.status_code, _reason_phrase(response.status_code), response.text)
        return response

    @staticmethod
    def _decode(response: httpx.Response, unpack):
        try:
            return unpack(response.content)
        except PayloadError as e:
            raise DataError(e.message) from e

    async def fetch_all(self) -> List[Entry]:
        response = await self._request("GET", "/tasks")
        return self._decode(response, codec.unpack_entries)

    async def create(self, content: str) -> Entry:
        response = await self._request("POST", "/task", content=codec.pack_task_request(content))
        return self._decode(response, codec.unpack_entry)

    async def get(self, task_id: UUID) -> Optional[Entry]:
        response = await self._request("GET", "/task", params={"id": str(task_id)})
        return self._decode(response, codec.unpack_optional_entry)

    async def update(self, entry: Entry) -> None:
        await self._request(
            "PUT", "/task", content=codec.pack_entry(entry), params={"id": str(entry.id)}
        )

    async def update_all(self, entries: Iterable[Entry]) -> None:
        await self._request("POST", "/tasks", content=codec.pack_entries(entries))

    async def remove(self, task_id: UUID) -> None:
        await self._request("DELETE", "/task", params={"id": str(task_id)})
