"""
Content source interface for described layers.

A content source is how a layer's compressed bytes are physically reached
(in memory, a file, a member of an image tarball, a blob URL). The Layer
facade only ever calls open().
"""
from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable

__all__ = ["ContentSource"]


@runtime_checkable
class ContentSource(Protocol):
    """Protocol for opening a layer's compressed bytes."""

    def open(self) -> BinaryIO:
        """
        Open a fresh stream over the layer's compressed bytes.

        Every call returns an independent stream positioned at the start;
        no cursor state is shared between calls, so concurrent opens are
        safe. The caller owns and closes the returned stream.

        Returns:
            Readable binary stream

        Raises:
            OpenError: If the content is unavailable
        """
        ...
