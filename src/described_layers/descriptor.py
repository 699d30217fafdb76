"""
Layer descriptor model.

The descriptor is the declared metadata of one layer as written next to the
layer bytes (for example in an exported image tarball):

    {"digest": "sha256:...", "diffID": "sha256:...", "size": 1234,
     "mediaType": "application/vnd.oci.image.layer.v1.tar+gzip"}

Hashes are kept as their canonical strings and validated on construction;
the Layer facade parses them again on access.
"""
from __future__ import annotations

from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .hashes import parse_hash

__all__ = ["LayerDescriptor", "SIZE_UNKNOWN"]

# Declared size sentinel: skip the size check, verify the digest only
SIZE_UNKNOWN = -1


class LayerDescriptor(BaseModel):
    """Declared digest, diff-id, size and media type of a compressed layer."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    digest: str = Field(..., description="Digest of the compressed bytes (algorithm:hex)")
    diff_id: str = Field(..., alias="diffID", description="Digest of the uncompressed bytes")
    size: int = Field(default=SIZE_UNKNOWN, description="Compressed size in bytes, or -1 if unknown")
    media_type: str = Field(..., alias="mediaType", description="Layer media type")

    @field_validator("digest", "diff_id")
    @classmethod
    def validate_hash(cls, v):
        """Reject anything that does not parse as a hash."""
        parse_hash(v)
        return v

    @field_validator("size")
    @classmethod
    def validate_size(cls, v):
        if v < 0 and v != SIZE_UNKNOWN:
            raise ValueError(f"size must be non-negative or {SIZE_UNKNOWN} (unknown), got {v}")
        return v

    @field_validator("media_type")
    @classmethod
    def validate_media_type(cls, v):
        if not v:
            raise ValueError("media_type must not be empty")
        return v

    @property
    def size_known(self) -> bool:
        return self.size != SIZE_UNKNOWN

    @classmethod
    def from_json(cls, data: Union[str, bytes]) -> LayerDescriptor:
        """Load a descriptor from its JSON form (camelCase keys)."""
        return cls.model_validate_json(data)

    def to_json(self) -> str:
        """Serialize to canonical JSON with camelCase keys."""
        return self.model_dump_json(by_alias=True)
