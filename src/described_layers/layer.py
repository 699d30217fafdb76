"""
Described compressed layers.

A Layer binds a LayerDescriptor (declared digest, diff-id, size, media type)
to a ContentSource. Metadata accessors never touch the source. Every byte
handed out by compressed() has passed through a VerifiedReader keyed on the
declared digest; uncompressed() decodes that same verified stream.

Example:
    >>> layer = Layer(descriptor, FileSource("blobs/sha256/ab12..."))
    >>> with layer.uncompressed() as stream:
    ...     tar = tarfile.open(fileobj=stream, mode="r|")
"""
from __future__ import annotations

import logging
from typing import BinaryIO, Optional, Union

from .compression import Decompressor, decompressor_for
from .descriptor import LayerDescriptor
from .hashes import Hash, parse_hash
from .settings import Settings
from .sources.base import ContentSource
from .verify import VerifiedReader

__all__ = ["Layer"]

logger = logging.getLogger(__name__)


class Layer:
    """
    A content-addressed layer whose bytes are verified as they are read.

    Args:
        descriptor: Declared layer metadata, fixed for the layer's lifetime
        source: Opens the compressed bytes; may be shared between layers
        decompressor: Decompression transform; defaults to the one matching
            the descriptor's media type
        settings: Read tunables (drain on close, chunk size)
    """

    def __init__(
        self,
        descriptor: LayerDescriptor,
        source: ContentSource,
        *,
        decompressor: Optional[Decompressor] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._desc = descriptor
        self._source = source
        self._decompressor = decompressor
        self._settings = settings or Settings()

    @classmethod
    def from_descriptor_json(cls, data: Union[str, bytes], source: ContentSource, **kwargs) -> Layer:
        """Build a layer from descriptor JSON (camelCase keys)."""
        return cls(LayerDescriptor.from_json(data), source, **kwargs)

    @property
    def descriptor(self) -> LayerDescriptor:
        return self._desc

    def digest(self) -> Hash:
        """Digest of the compressed bytes."""
        return parse_hash(self._desc.digest)

    def diff_id(self) -> Hash:
        """Digest of the uncompressed bytes."""
        return parse_hash(self._desc.diff_id)

    def size(self) -> int:
        """Declared compressed size, or SIZE_UNKNOWN. Not measured."""
        return self._desc.size

    def media_type(self) -> str:
        return self._desc.media_type

    def compressed(self) -> BinaryIO:
        """
        Open a verified stream over the layer's compressed bytes.

        Returns:
            VerifiedReader; the caller must close it

        Raises:
            MalformedHashError: Declared digest does not parse (before any I/O)
            OpenError: Content source unavailable
        """
        digest = self.digest()
        stream = self._source.open()
        try:
            reader = VerifiedReader(
                stream,
                digest,
                self._desc.size,
                drain_on_close=self._settings.drain_on_close,
                chunk_size=self._settings.chunk_size,
            )
        except Exception:
            stream.close()
            raise
        logger.debug(f"Opened compressed stream for layer {digest}")
        return reader

    def uncompressed(self) -> BinaryIO:
        """
        Open a stream of decompressed layer bytes.

        Decompression consumes the verified compressed stream; the digest
        check happens on that same pass.

        Raises:
            MalformedHashError, OpenError: As for compressed()
            CorruptDataError: While reading, if the compressed bytes are invalid
            VerificationError: While reading or on close, if verification fails
        """
        reader = self.compressed()
        decompress = self._decompressor or decompressor_for(self._desc.media_type)
        try:
            return decompress(reader)
        except Exception:
            reader.abort()
            raise

    def __repr__(self) -> str:
        return f"Layer(digest={self._desc.digest}, media_type={self._desc.media_type})"
