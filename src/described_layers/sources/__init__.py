"""Content sources for layer bytes."""

from .archive import TarEntrySource
from .base import ContentSource
from .filesystem import FileSource
from .http import HTTPBlobSource
from .memory import BytesSource

__all__ = ["ContentSource", "BytesSource", "FileSource", "TarEntrySource", "HTTPBlobSource"]
