"""In-memory content source."""
from __future__ import annotations

import io
from typing import BinaryIO

from .base import ContentSource

__all__ = ["BytesSource"]


class BytesSource(ContentSource):
    """Layer bytes held in memory. Each open() gets its own cursor."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)

    def open(self) -> BinaryIO:
        return io.BytesIO(self._data)

    def __repr__(self) -> str:
        return f"BytesSource({len(self._data)} bytes)"
