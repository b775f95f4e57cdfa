"""
HTTP transport for the Ollama API.

Thin wrappers around ``httpx.Client`` and ``httpx.AsyncClient``: one network
call per ``execute``, no retries, no interpretation of the payload. Error
statuses are returned with their body so the caller can decode the
server's error message.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .errors import RequestCancelledError, TransportError

logger = logging.getLogger(__name__)

USER_AGENT = "ollama-rest"


@dataclass(frozen=True)
class RawResponse:
    """Undecoded response of one request."""
    status_code: int
    body: bytes
    url: str = ""

    @property
    def is_error(self) -> bool:
        return self.status_code >= 400

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


def _translate(error: httpx.HTTPError, method: str, url: str) -> TransportError:
    if isinstance(error, httpx.TimeoutException):
        return TransportError(f"{method} {url} timed out: {error}", cause=error)
    return TransportError(f"{method} {url} failed: {error}", cause=error)


class _BaseTransport:
    def __init__(self, base_url: str, timeout: Optional[float], enable_logging: bool = False):
        self._base_url = base_url.rstrip("/")
        self._timeout = httpx.Timeout(timeout)
        self._log = enable_logging

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> httpx.Timeout:
        return self._timeout

    def url_for(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _build(self, http, method: str, path: str, payload: Optional[dict[str, Any]]) -> httpx.Request:
        url = self.url_for(path)
        if self._log:
            logger.info("Sending %s request to URL: %s", method, url)
        return http.build_request(method, url, json=payload)

    def _received(self, request: httpx.Request, response: httpx.Response) -> RawResponse:
        raw = RawResponse(
            status_code=response.status_code,
            body=response.content,
            url=str(request.url),
        )
        if self._log:
            logger.debug("Received response: status=%d body=%s", raw.status_code, raw.text)
        return raw

    def _failed(self, request: httpx.Request, error: httpx.HTTPError) -> TransportError:
        translated = _translate(error, request.method, str(request.url))
        if self._log:
            logger.error("Transport error: %s", translated)
        return translated


class SyncTransport(_BaseTransport):
    """Blocking transport backed by ``httpx.Client``."""

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float],
        enable_logging: bool = False,
        http_transport: Optional[httpx.BaseTransport] = None,
    ):
        super().__init__(base_url, timeout, enable_logging)
        self._http = httpx.Client(
            timeout=self._timeout,
            transport=http_transport,
            headers={"User-Agent": USER_AGENT},
        )

    def execute(self, method: str, path: str, payload: Optional[dict[str, Any]] = None) -> RawResponse:
        request = self._build(self._http, method, path, payload)
        try:
            response = self._http.send(request)
        except httpx.HTTPError as e:
            raise self._failed(request, e) from e
        return self._received(request, response)

    def open_stream(self, method: str, path: str, payload: Optional[dict[str, Any]] = None) -> httpx.Response:
        """Send a request and return the response with its body unread.

        The caller must close the response.
        """
        request = self._build(self._http, method, path, payload)
        try:
            return self._http.send(request, stream=True)
        except httpx.HTTPError as e:
            raise self._failed(request, e) from e

    def read_error(self, response: httpx.Response) -> RawResponse:
        """Read the body of a streamed error response and close it."""
        try:
            response.read()
        except httpx.HTTPError as e:
            raise self._failed(response.request, e) from e
        finally:
            response.close()
        return self._received(response.request, response)

    def close(self):
        self._http.close()


class AsyncTransport(_BaseTransport):
    """Suspending transport backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: str,
        timeout: Optional[float],
        enable_logging: bool = False,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(base_url, timeout, enable_logging)
        self._http = httpx.AsyncClient(
            timeout=self._timeout,
            transport=http_transport,
            headers={"User-Agent": USER_AGENT},
        )

    def _cancelled(self, request: httpx.Request) -> RequestCancelledError:
        # Attached as the cause of the task's own CancelledError, which must
        # propagate as is.
        if self._log:
            logger.info("Request cancelled: %s %s", request.method, request.url)
        return RequestCancelledError(f"{request.method} {request.url} cancelled")

    async def execute(self, method: str, path: str, payload: Optional[dict[str, Any]] = None) -> RawResponse:
        request = self._build(self._http, method, path, payload)
        try:
            response = await self._http.send(request)
        except httpx.HTTPError as e:
            raise self._failed(request, e) from e
        except asyncio.CancelledError as e:
            raise e from self._cancelled(request)
        return self._received(request, response)

    async def open_stream(self, method: str, path: str, payload: Optional[dict[str, Any]] = None) -> httpx.Response:
        """Send a request and return the response with its body unread.

        The caller must close the response.
        """
        request = self._build(self._http, method, path, payload)
        try:
            return await self._http.send(request, stream=True)
        except httpx.HTTPError as e:
            raise self._failed(request, e) from e
        except asyncio.CancelledError as e:
            raise e from self._cancelled(request)

    async def read_error(self, response: httpx.Response) -> RawResponse:
        """Read the body of a streamed error response and close it."""
        try:
            await response.aread()
        except httpx.HTTPError as e:
            raise self._failed(response.request, e) from e
        finally:
            await response.aclose()
        return self._received(response.request, response)

    async def aclose(self):
        await self._http.aclose()
