"""
Decompression transforms for layer streams.

A decompressor takes a readable (verified) byte stream and returns a readable
stream of plain bytes. Codec failures surface as CorruptDataError; errors
raised by the source stream itself (verification, I/O) pass through as-is.

Which decompressor applies to a layer is decided here from its media type,
not by the Layer facade.
"""
from __future__ import annotations

import abc
import logging
import zlib
from typing import BinaryIO, Callable, Optional

import zstandard as zstd

from .errors import CorruptDataError
from .media_types import GZIP_LAYER_TYPES, UNCOMPRESSED_LAYER_TYPES, ZSTD_LAYER_TYPES

__all__ = [
    "Decompressor",
    "DecompressingReader",
    "GzipReader",
    "ZstdReader",
    "gzip_decompressor",
    "zstd_decompressor",
    "identity_decompressor",
    "decompressor_for",
]

logger = logging.getLogger(__name__)

# Compressed bytes pulled from the source per decode step
READ_SIZE = 64 * 1024

Decompressor = Callable[[BinaryIO], BinaryIO]


class DecompressingReader(abc.ABC):
    """
    Readable stream that decodes a compressed source on the fly.

    Concatenated members (gzip) or frames (zstd) are decoded in sequence.
    Input that ends inside a member is corrupt. Closing the reader closes
    the source; for a VerifiedReader that completes verification.

    Abstract; subclasses provide ``_new_decoder()`` returning an object with
    ``decompress(data)``, ``eof`` and ``unused_data``, and ``_errors``,
    the codec exception types.
    """
    codec = "none"
    _errors: tuple = ()

    def __init__(self, source: BinaryIO, *, read_size: int = READ_SIZE) -> None:
        self._source = source
        self._read_size = read_size
        self._decoder = self._new_decoder()
        self._decoder_fed = False
        self._pending = b""
        self._buffer = bytearray()
        self._eof = False
        self._closed = False

    @abc.abstractmethod
    def _new_decoder(self):
        """Fresh decoder for one member or frame."""

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
        if size is None:
            size = -1
        while (size < 0 or len(self._buffer) < size) and not self._eof:
            if not self._decode_more():
                self._eof = True
        n = len(self._buffer) if size < 0 else min(size, len(self._buffer))
        out = bytes(self._buffer[:n])
        del self._buffer[:n]
        return out

    def readinto(self, b) -> int:
        view = memoryview(b).cast("B")
        data = self.read(len(view))
        n = len(data)
        view[:n] = data
        return n

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._buffer.clear()
        self._source.close()

    def __enter__(self) -> DecompressingReader:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is None:
            self.close()
        else:
            self.abort()

    def _decode_more(self) -> bool:
        """Feed one chunk to the decoder. Returns False once input is exhausted."""
        if self._pending:
            data, self._pending = self._pending, b""
        else:
            data = self._source.read(self._read_size)

        if not data:
            if not self._decoder_fed:
                self._corrupt(f"{self.codec} stream is empty")
            if not self._decoder.eof:
                self._corrupt(f"{self.codec} stream truncated before end of data")
            return False

        if self._decoder.eof:
            self._decoder = self._new_decoder()
            self._decoder_fed = False

        try:
            out = self._decoder.decompress(data)
        except self._errors as e:
            self._corrupt(f"invalid {self.codec} data: {e}", e)
        self._decoder_fed = True

        if self._decoder.eof and self._decoder.unused_data:
            self._pending = self._decoder.unused_data
        self._buffer += out
        return True

    def _corrupt(self, message: str, cause: Optional[BaseException] = None) -> None:
        logger.warning(message)
        self.abort()
        raise CorruptDataError(message) from cause

    def abort(self) -> None:
        """Close without verifying the source."""
        self._closed = True
        self._buffer.clear()
        abort = getattr(self._source, "abort", None)
        if abort is not None:
            abort()
        else:
            self._source.close()


class GzipReader(DecompressingReader):
    codec = "gzip"
    _errors = (zlib.error,)

    def _new_decoder(self):
        return zlib.decompressobj(wbits=zlib.MAX_WBITS | 16)


class ZstdReader(DecompressingReader):
    codec = "zstd"
    _errors = (zstd.ZstdError,)

    def _new_decoder(self):
        return zstd.ZstdDecompressor().decompressobj()


def gzip_decompressor(stream: BinaryIO) -> BinaryIO:
    return GzipReader(stream)


def zstd_decompressor(stream: BinaryIO) -> BinaryIO:
    return ZstdReader(stream)


def identity_decompressor(stream: BinaryIO) -> BinaryIO:
    """Layers stored uncompressed: the verified stream is already plain."""
    return stream


def decompressor_for(media_type: str) -> Decompressor:
    """
    Select the decompressor for a layer media type.

    Unknown media types are treated as gzip, the convention for layers
    in exported image tarballs.
    """
    if media_type in ZSTD_LAYER_TYPES or media_type.endswith("+zstd"):
        return zstd_decompressor
    if media_type in UNCOMPRESSED_LAYER_TYPES:
        return identity_decompressor
    if media_type not in GZIP_LAYER_TYPES:
        logger.debug(f"Unknown layer media type {media_type!r}, assuming gzip")
    return gzip_decompressor
