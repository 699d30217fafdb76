"""Verified, lazily decompressed container image layers."""

from .compression import decompressor_for, gzip_decompressor, identity_decompressor, zstd_decompressor
from .descriptor import SIZE_UNKNOWN, LayerDescriptor
from .errors import (
    CorruptDataError,
    DigestMismatchError,
    LayerError,
    MalformedHashError,
    OpenError,
    SizeMismatchError,
    UnverifiedCloseError,
    VerificationError,
)
from .hashes import Hash, hash_bytes, parse_hash
from .layer import Layer
from .settings import Settings, create_settings_from_env
from .sources import BytesSource, ContentSource, FileSource, HTTPBlobSource, TarEntrySource
from .verify import VerifiedReader

__version__ = "0.1.0"

__all__ = [
    "Layer",
    "LayerDescriptor",
    "SIZE_UNKNOWN",
    "VerifiedReader",
    "Hash",
    "parse_hash",
    "hash_bytes",
    "ContentSource",
    "BytesSource",
    "FileSource",
    "TarEntrySource",
    "HTTPBlobSource",
    "decompressor_for",
    "gzip_decompressor",
    "zstd_decompressor",
    "identity_decompressor",
    "Settings",
    "create_settings_from_env",
    "LayerError",
    "OpenError",
    "MalformedHashError",
    "VerificationError",
    "DigestMismatchError",
    "SizeMismatchError",
    "UnverifiedCloseError",
    "CorruptDataError",
]
