"""
HTTP content source.

Streams a layer blob from a URL (for example a registry blob endpoint or a
pre-signed storage URL). Only the opening request is retried; once bytes
are flowing, network failures surface to the reader as OSError. Auth flows
and manifest handling belong to the caller.
"""
from __future__ import annotations

import logging
from typing import BinaryIO, Dict, Iterator, Optional

import httpx
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..errors import OpenError
from ..settings import Settings
from .base import ContentSource

__all__ = ["HTTPBlobSource"]

logger = logging.getLogger(__name__)

USER_AGENT = "described-layers/0.1.0"

# Transient failures worth another attempt at opening
_RETRYABLE = (httpx.ConnectError, httpx.TimeoutException)


class _ResponseStream:
    """File-like view over a streaming httpx response body, as sent (no Content-Encoding decoding)."""

    def __init__(self, response: httpx.Response, chunk_size: int) -> None:
        self._response = response
        self._chunks: Iterator[bytes] = response.iter_raw(chunk_size)
        self._buffer = bytearray()
        self._exhausted = False
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        if self.closed:
            raise ValueError("I/O operation on closed file")
        if size is None:
            size = -1
        try:
            while not self._exhausted and (size < 0 or len(self._buffer) < size):
                chunk = next(self._chunks, None)
                if chunk is None:
                    self._exhausted = True
                else:
                    self._buffer += chunk
        except httpx.TransportError as e:
            raise OSError(f"Error reading {self._response.url}: {e}") from e
        n = len(self._buffer) if size < 0 else min(size, len(self._buffer))
        out = bytes(self._buffer[:n])
        del self._buffer[:n]
        return out

    def readable(self) -> bool:
        return True

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._buffer.clear()
        self._response.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class HTTPBlobSource(ContentSource):
    """
    Layer bytes served over HTTP(S).

    Each open() issues a new GET, so streams are independent. The httpx
    client is thread-safe and shared across opens; a client created here is
    closed by close().

    Args:
        url: Blob URL
        settings: Timeout, retry and TLS settings (defaults to Settings())
        client: Preconfigured httpx client (e.g. with auth); not closed by us
        headers: Extra request headers, e.g. Authorization
        retry_wait: tenacity wait strategy between open attempts
    """

    def __init__(
        self,
        url: str,
        *,
        settings: Optional[Settings] = None,
        client: Optional[httpx.Client] = None,
        headers: Optional[Dict[str, str]] = None,
        retry_wait=None,
    ) -> None:
        self.url = url
        self._settings = settings or Settings()
        self._headers = dict(headers or {})
        self._retry_wait = retry_wait or wait_exponential(multiplier=0.5, min=0.5, max=8)
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(self._settings.http_timeout_s),
            follow_redirects=True,
            verify=not self._settings.http_insecure,
            headers={"User-Agent": USER_AGENT},
        )

    def open(self) -> BinaryIO:
        retrying = Retrying(
            stop=stop_after_attempt(self._settings.http_retry + 1),
            wait=self._retry_wait,
            retry=retry_if_exception_type(_RETRYABLE),
            before_sleep=before_sleep_log(logger, logging.DEBUG),
            reraise=True,
        )
        try:
            response = retrying(self._send)
        except httpx.HTTPStatusError as e:
            raise OpenError(
                f"Blob request failed with HTTP {e.response.status_code}: {self.url}", source=self.url
            ) from e
        except httpx.HTTPError as e:
            raise OpenError(f"Network error opening {self.url}: {e}", source=self.url) from e

        logger.debug(f"Opened blob stream {self.url}")
        return _ResponseStream(response, self._settings.chunk_size)

    def _send(self) -> httpx.Response:
        request = self._client.build_request("GET", self.url, headers=self._headers)
        response = self._client.send(request, stream=True)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError:
            response.close()
            raise
        return response

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HTTPBlobSource:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"HTTPBlobSource({self.url!r})"
