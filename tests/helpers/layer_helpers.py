"""
Layer helpers for tests.

Builders for payloads, digests and descriptors that describe them.
"""
import gzip
import hashlib
import io
import tarfile
from pathlib import Path
from typing import Dict

import zstandard as zstd

from described_layers.descriptor import LayerDescriptor
from described_layers.media_types import OCI_LAYER_GZIP


def sha256_digest(data: bytes) -> str:
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def make_descriptor(compressed: bytes, uncompressed: bytes = b"", *, size=None,
                    media_type: str = OCI_LAYER_GZIP, digest: str = None) -> LayerDescriptor:
    """Descriptor that correctly describes ``compressed`` unless overridden."""
    return LayerDescriptor(
        digest=digest or sha256_digest(compressed),
        diff_id=sha256_digest(uncompressed),
        size=len(compressed) if size is None else size,
        media_type=media_type,
    )


def zstd_compress(data: bytes) -> bytes:
    return zstd.ZstdCompressor(level=3, write_content_size=True).compress(data)


def make_layer_tar(files: Dict[str, bytes]) -> bytes:
    """Uncompressed tar stream holding ``files`` with canonical headers."""
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w", format=tarfile.USTAR_FORMAT) as tar:
        for name in sorted(files):
            info = tarfile.TarInfo(name)
            info.size = len(files[name])
            info.mtime = 0
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(files[name]))
    return buf.getvalue()


def write_image_tarball(path: Path, blobs: Dict[str, bytes]) -> Path:
    """Write a tar archive whose members are the given layer blobs."""
    with tarfile.open(path, mode="w") as tar:
        for name, data in blobs.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return path


def gzip_bytes(data: bytes) -> bytes:
    return gzip.compress(data, mtime=0)
