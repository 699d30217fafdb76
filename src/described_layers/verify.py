"""
Verified byte streams.

VerifiedReader wraps a readable byte stream and an expected digest. Bytes
pass through unchanged while being hashed; reaching end of stream, or
closing, checks the hash (and the declared size, when known). A stream that
is closed early is drained and verified, or reported as unverified, never
trusted.

Memory use is one chunk plus hash state, independent of layer size.
"""
from __future__ import annotations

import logging
from typing import BinaryIO, Optional

from .descriptor import SIZE_UNKNOWN
from .errors import (
    DigestMismatchError,
    SizeMismatchError,
    UnverifiedCloseError,
    VerificationError,
)
from .hashes import Hash
from .settings import CHUNK_SIZE

__all__ = ["VerifiedReader"]

logger = logging.getLogger(__name__)

_STREAMING = "streaming"
_VERIFIED = "verified"
_FAILED = "failed"


class VerifiedReader:
    """
    Read-only stream that authenticates its bytes against a digest.

    The reader exclusively owns ``stream`` and closes it on every path,
    including failed verification. Single consumer, sequential reads only;
    one instance serves exactly one read session.

    Args:
        stream: Underlying readable byte stream, positioned at the start
        expected: Digest the full content must hash to
        size: Declared byte length, or SIZE_UNKNOWN to skip the size check
        drain_on_close: On early close, read and hash the remaining bytes
            (True) or raise UnverifiedCloseError (False)
        chunk_size: Read size used while draining

    Raises (from read/close):
        DigestMismatchError: Content hash differs from ``expected``
        SizeMismatchError: Byte count differs from a known ``size``
        UnverifiedCloseError: Closed early with drain_on_close=False
        OSError: Underlying read failures, unchanged
    """

    def __init__(
        self,
        stream: BinaryIO,
        expected: Hash,
        size: int = SIZE_UNKNOWN,
        *,
        drain_on_close: bool = True,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        if size < 0 and size != SIZE_UNKNOWN:
            raise ValueError(f"size must be non-negative or {SIZE_UNKNOWN}, got {size}")
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self._stream = stream
        self._expected = expected
        self._size = size
        self._drain_on_close = drain_on_close
        self._chunk_size = chunk_size
        self._hasher = expected.new_hasher()
        self._bytes_read = 0
        self._state = _STREAMING
        self._error: Optional[BaseException] = None
        self._closed = False
        self._stream_closed = False

    @property
    def expected(self) -> Hash:
        return self._expected

    @property
    def bytes_read(self) -> int:
        return self._bytes_read

    @property
    def verified(self) -> bool:
        """True once the full content matched the digest (and size)."""
        return self._state == _VERIFIED

    @property
    def closed(self) -> bool:
        return self._closed

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return False

    def read(self, size: int = -1) -> bytes:
        if self._closed:
            raise ValueError("I/O operation on closed file")
        return self._read(size)

    def readinto(self, b) -> int:
        view = memoryview(b).cast("B")
        data = self.read(len(view))
        n = len(data)
        view[:n] = data
        return n

    def close(self) -> None:
        """
        Finish the read session.

        Unread content is drained and verified first (or reported as
        unverified). The underlying stream is closed even if that fails.
        """
        if self._closed:
            return
        self._closed = True
        try:
            if self._state == _STREAMING:
                if self._drain_on_close:
                    while self._state == _STREAMING:
                        self._read(self._chunk_size)
                else:
                    # A single probe read tells a fully consumed stream from a partial one
                    consumed = self._bytes_read
                    self._read(1)
                    if self._state == _STREAMING:
                        self._fail(UnverifiedCloseError(str(self._expected), consumed))
        finally:
            self._close_stream()

    def abort(self) -> None:
        """Close without verifying. The session counts as failed unless already verified."""
        self._closed = True
        if self._state == _STREAMING:
            self._state = _FAILED
        if self._stream_closed:
            return
        self._stream_closed = True
        abort = getattr(self._stream, "abort", None)
        if abort is not None:
            abort()
        else:
            self._stream.close()

    def __enter__(self) -> VerifiedReader:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        # Do not mask an error already in flight with a verification error
        if exc_type is None:
            self.close()
        else:
            self.abort()

    def __repr__(self) -> str:
        return (
            f"VerifiedReader(expected={self._expected}, size={self._size}, "
            f"bytes_read={self._bytes_read}, state={self._state})"
        )

    def _read(self, size: int) -> bytes:
        if self._state == _VERIFIED:
            return b""
        if self._state == _FAILED:
            if self._error is not None:
                raise self._error
            raise ValueError("read from a failed verified stream")
        if size == 0:
            return b""

        try:
            data = self._stream.read(size)
        except Exception:
            self._state = _FAILED
            self._close_stream()
            raise

        if not data:
            self._verify()
            return b""

        self._hasher.update(data)
        self._bytes_read += len(data)
        if self._size != SIZE_UNKNOWN and self._bytes_read > self._size:
            self._fail(SizeMismatchError(self._size, self._bytes_read, str(self._expected)))
        return data

    def _verify(self) -> None:
        if self._size != SIZE_UNKNOWN and self._bytes_read != self._size:
            self._fail(SizeMismatchError(self._size, self._bytes_read, str(self._expected)))

        actual = self._hasher.hexdigest()
        if actual != self._expected.hex:
            self._fail(DigestMismatchError(str(self._expected), f"{self._expected.algorithm}:{actual}"))

        self._state = _VERIFIED
        logger.debug(f"Verified {self._bytes_read} bytes against {self._expected}")

    def _fail(self, error: VerificationError) -> None:
        self._state = _FAILED
        self._error = error
        logger.warning(f"Verification failed: {error}")
        self._close_stream()
        raise error

    def _close_stream(self) -> None:
        if self._stream_closed:
            return
        self._stream_closed = True
        self._stream.close()
