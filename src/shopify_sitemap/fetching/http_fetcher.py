from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import StrEnum
from http import HTTPStatus
from typing import TYPE_CHECKING, Protocol
from urllib.parse import urlsplit

import httpx

from shopify_sitemap import __version__

if TYPE_CHECKING:
    from shopify_sitemap.fetching.domain import DomainValidator

USER_AGENT = f"shopify-sitemap/{__version__} (+https://github.com/MrGKanev/Shopify-to-WordPress-sitemap)"
FETCH_TIMEOUT_SECONDS = 30.0
MAX_RESPONSE_BYTES = 10 * 1024 * 1024


class HTTPHeader(StrEnum):
    USER_AGENT = "User-Agent"
    ACCEPT = "Accept"
    CONTENT_LENGTH = "Content-Length"


class FetchError(Exception):
    """Base class for a failed sitemap fetch."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(message)


class InvalidUrlError(FetchError):
    def __init__(self, url: str, reason: str = "URL has no host") -> None:
        super().__init__(url, f"{reason}: {url!r}")


class InsecureSchemeError(FetchError):
    def __init__(self, url: str, scheme: str) -> None:
        self.scheme = scheme
        super().__init__(url, f"refusing non-https scheme {scheme!r}")


class UnsafeDomainError(FetchError):
    def __init__(self, url: str, host: str) -> None:
        self.host = host
        super().__init__(url, f"host failed validation: {host}")


class TransportError(FetchError):
    def __init__(self, url: str, cause: Exception) -> None:
        super().__init__(url, f"transport error: {type(cause).__name__}: {cause}")


class HttpStatusError(FetchError):
    def __init__(self, url: str, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(url, f"unexpected HTTP status {status_code}")


class ResponseTooLargeError(FetchError):
    def __init__(self, url: str, limit: int) -> None:
        self.limit = limit
        super().__init__(url, f"response body exceeds {limit} bytes")


@dataclass(frozen=True, slots=True)
class FetchResult:
    url: str
    status_code: int
    content: bytes


class Fetcher(Protocol):
    async def fetch(self, url: str) -> FetchResult: ...


def create_client() -> httpx.AsyncClient:
    """Client used for every sitemap request: TLS verified, HTTP/1.1, no redirects."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(FETCH_TIMEOUT_SECONDS),
        headers={HTTPHeader.USER_AGENT: USER_AGENT, HTTPHeader.ACCEPT: "application/xml, text/xml;q=0.9, */*;q=0.1"},
        verify=True,
        http1=True,
        http2=False,
        follow_redirects=False,
    )


class SafeFetcher:
    def __init__(
        self,
        client: httpx.AsyncClient,
        validator: DomainValidator,
        *,
        max_bytes: int = MAX_RESPONSE_BYTES,
    ) -> None:
        self._client = client
        self._validator = validator
        self._max_bytes = max_bytes

    async def fetch(self, url: str) -> FetchResult:
        try:
            parts = urlsplit(url)
            hostname = parts.hostname
        except ValueError as exc:
            raise InvalidUrlError(url, str(exc)) from exc
        if not hostname:
            raise InvalidUrlError(url)
        if parts.scheme.lower() != "https":
            raise InsecureSchemeError(url, parts.scheme)
        if not await asyncio.to_thread(self._validator.validate, hostname):
            raise UnsafeDomainError(url, hostname)

        try:
            async with self._client.stream("GET", url, follow_redirects=False) as response:
                if response.status_code != HTTPStatus.OK:
                    raise HttpStatusError(url, response.status_code)
                self._check_declared_length(url, response)
                content = await self._read_bounded(url, response)
        except httpx.InvalidURL as exc:
            raise InvalidUrlError(url, str(exc)) from exc
        except httpx.HTTPError as exc:
            raise TransportError(url, exc) from exc

        return FetchResult(url=url, status_code=HTTPStatus.OK, content=content)

    def _check_declared_length(self, url: str, response: httpx.Response) -> None:
        declared = response.headers.get(HTTPHeader.CONTENT_LENGTH)
        if declared is None:
            return
        try:
            length = int(declared)
        except ValueError:
            return
        if length > self._max_bytes:
            raise ResponseTooLargeError(url, self._max_bytes)

    async def _read_bounded(self, url: str, response: httpx.Response) -> bytes:
        buffer = bytearray()
        async for chunk in response.aiter_bytes():
            buffer.extend(chunk)
            if len(buffer) > self._max_bytes:
                raise ResponseTooLargeError(url, self._max_bytes)
        return bytes(buffer)
