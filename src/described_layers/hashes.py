"""
Content hashes in canonical ``algorithm:hex`` form.

Hash construction is the only place that knows which algorithms are allowed
and how long their hex digests are. Everything else handles Hash values.
"""
from __future__ import annotations

import hashlib
import re
from dataclasses import dataclass

from .errors import MalformedHashError

__all__ = ["Hash", "parse_hash", "hash_bytes", "SUPPORTED_ALGORITHMS"]

# algorithm -> hex digest length
SUPPORTED_ALGORITHMS = {
    "sha256": 64,
    "sha384": 96,
    "sha512": 128,
}

_HEX_RE = re.compile(r"[a-f0-9]+")


@dataclass(frozen=True)
class Hash:
    """
    A parsed content hash.

    Invariants:
    - algorithm: one of SUPPORTED_ALGORITHMS
    - hex: lowercase hex of exactly the algorithm's digest length
    """
    algorithm: str
    hex: str

    def __post_init__(self) -> None:
        length = SUPPORTED_ALGORITHMS.get(self.algorithm)
        if length is None:
            raise MalformedHashError(
                f"unsupported hash algorithm '{self.algorithm}'", value=str(self)
            )
        if len(self.hex) != length or not _HEX_RE.fullmatch(self.hex):
            raise MalformedHashError(
                f"{self.algorithm} hash must be {length} lowercase hex chars, got '{self.hex}'",
                value=str(self),
            )

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.hex}"

    def new_hasher(self):
        """Return a fresh hashlib object for this hash's algorithm."""
        return hashlib.new(self.algorithm)


def parse_hash(value: str) -> Hash:
    """
    Parse an ``algorithm:hex`` string into a Hash.

    Args:
        value: Hash string, e.g. "sha256:2cf24dba..."

    Returns:
        Parsed Hash

    Raises:
        MalformedHashError: If the string is not a well-formed supported hash

    Examples:
        >>> parse_hash("sha256:" + "a" * 64).algorithm
        'sha256'

        >>> parse_hash("md5:abc")
        MalformedHashError: unsupported hash algorithm 'md5'
    """
    if not isinstance(value, str):
        raise MalformedHashError(f"hash must be a string, got {type(value).__name__}")
    algorithm, sep, hex_part = value.partition(":")
    if not sep or not algorithm or not hex_part:
        raise MalformedHashError(f"hash must be 'algorithm:hex', got '{value}'", value=value)
    return Hash(algorithm=algorithm, hex=hex_part)


def hash_bytes(data: bytes, algorithm: str = "sha256") -> Hash:
    """Hash ``data`` in one shot."""
    if algorithm not in SUPPORTED_ALGORITHMS:
        raise MalformedHashError(f"unsupported hash algorithm '{algorithm}'")
    return Hash(algorithm=algorithm, hex=hashlib.new(algorithm, data).hexdigest())
