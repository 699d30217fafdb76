"""Filesystem content source."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, Union

from ..errors import OpenError
from .base import ContentSource

__all__ = ["FileSource"]

logger = logging.getLogger(__name__)


class FileSource(ContentSource):
    """Layer bytes stored as a single file on disk."""

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def open(self) -> BinaryIO:
        try:
            stream = open(self.path, "rb")
        except OSError as e:
            raise OpenError(f"Cannot open layer file {self.path}: {e}", source=str(self.path)) from e
        logger.debug(f"Opened layer file {self.path}")
        return stream

    def __repr__(self) -> str:
        return f"FileSource({str(self.path)!r})"
