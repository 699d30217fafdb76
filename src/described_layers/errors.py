"""
Layer error classes.

Provides a clear taxonomy of errors that can occur while opening, verifying
and decompressing a described layer. Every error carries enough context
(expected vs. actual digest or size) for the caller to log and abort the
consuming operation. Underlying I/O errors are never wrapped in these.
"""
from __future__ import annotations

from typing import Optional


class LayerError(Exception):
    """
    Base class for all layer errors.
    """
    pass


class OpenError(LayerError):
    """
    The layer's content source could not be opened.

    Raised when:
    - The backing file or archive member does not exist
    - The blob URL returns an HTTP error or stays unreachable after retries
    """

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.source = source


class MalformedHashError(LayerError, ValueError):
    """
    A digest or diff-id string is not a well-formed ``algorithm:hex`` hash.

    Subclasses ValueError so model validators treat it as a validation failure.
    """

    def __init__(self, message: str, value: Optional[str] = None):
        super().__init__(message)
        self.value = value


class VerificationError(LayerError):
    """
    Base class for integrity failures of a verified stream.

    Any subclass means the bytes already handed out must not be trusted.
    """
    pass


class DigestMismatchError(VerificationError):
    """
    Computed digest of the streamed bytes differs from the declared digest.
    """

    def __init__(self, expected: str, actual: str):
        super().__init__(f"digest mismatch: expected {expected}, got {actual}")
        self.expected = expected
        self.actual = actual


class SizeMismatchError(VerificationError):
    """
    Number of streamed bytes differs from the declared size.

    Raised independently of the hash outcome.
    """

    def __init__(self, expected: int, actual: int, digest: Optional[str] = None):
        where = f" for {digest}" if digest else ""
        super().__init__(f"size mismatch{where}: expected {expected} bytes, got {actual}")
        self.expected = expected
        self.actual = actual
        self.digest = digest


class UnverifiedCloseError(VerificationError):
    """
    Stream closed before it was fully consumed, so it was never verified.

    Only raised when draining on close is disabled.
    """

    def __init__(self, expected: str, bytes_read: int):
        super().__init__(
            f"stream for {expected} closed after {bytes_read} bytes without reaching end; "
            "content was not verified"
        )
        self.expected = expected
        self.bytes_read = bytes_read


class CorruptDataError(LayerError):
    """
    Compressed layer bytes could not be decompressed.

    Distinct from VerificationError: a corrupt payload can fail in the codec
    before the trailing digest check is reached.
    """
    pass


__all__ = [
    "LayerError",
    "OpenError",
    "MalformedHashError",
    "VerificationError",
    "DigestMismatchError",
    "SizeMismatchError",
    "UnverifiedCloseError",
    "CorruptDataError",
]
