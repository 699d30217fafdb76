"""
OCI and Docker layer media types.

Single source of truth for the layer media type strings this package knows.
"""
from __future__ import annotations

# OCI image layers
OCI_LAYER = "application/vnd.oci.image.layer.v1.tar"
OCI_LAYER_GZIP = "application/vnd.oci.image.layer.v1.tar+gzip"
OCI_LAYER_ZSTD = "application/vnd.oci.image.layer.v1.tar+zstd"

# OCI non-distributable (foreign) layers
OCI_FOREIGN_LAYER = "application/vnd.oci.image.layer.nondistributable.v1.tar"
OCI_FOREIGN_LAYER_GZIP = "application/vnd.oci.image.layer.nondistributable.v1.tar+gzip"
OCI_FOREIGN_LAYER_ZSTD = "application/vnd.oci.image.layer.nondistributable.v1.tar+zstd"

# Docker schema 2 layers
DOCKER_LAYER = "application/vnd.docker.image.rootfs.diff.tar.gzip"
DOCKER_FOREIGN_LAYER = "application/vnd.docker.image.rootfs.foreign.diff.tar.gzip"
DOCKER_UNCOMPRESSED_LAYER = "application/vnd.docker.image.rootfs.diff.tar"

GZIP_LAYER_TYPES = frozenset({
    OCI_LAYER_GZIP,
    OCI_FOREIGN_LAYER_GZIP,
    DOCKER_LAYER,
    DOCKER_FOREIGN_LAYER,
})

ZSTD_LAYER_TYPES = frozenset({
    OCI_LAYER_ZSTD,
    OCI_FOREIGN_LAYER_ZSTD,
})

UNCOMPRESSED_LAYER_TYPES = frozenset({
    OCI_LAYER,
    OCI_FOREIGN_LAYER,
    DOCKER_UNCOMPRESSED_LAYER,
})


__all__ = [
    "OCI_LAYER",
    "OCI_LAYER_GZIP",
    "OCI_LAYER_ZSTD",
    "OCI_FOREIGN_LAYER",
    "OCI_FOREIGN_LAYER_GZIP",
    "OCI_FOREIGN_LAYER_ZSTD",
    "DOCKER_LAYER",
    "DOCKER_FOREIGN_LAYER",
    "DOCKER_UNCOMPRESSED_LAYER",
    "GZIP_LAYER_TYPES",
    "ZSTD_LAYER_TYPES",
    "UNCOMPRESSED_LAYER_TYPES",
]
