"""
Tar archive content source.

Reads one layer stored as a regular member of a tar archive on disk, the
way layers sit inside an exported image tarball. Every open() opens the
archive anew, so streams never share a file position.
"""
from __future__ import annotations

import logging
import tarfile
from pathlib import Path
from typing import BinaryIO, Union

from ..errors import OpenError
from .base import ContentSource

__all__ = ["TarEntrySource"]

logger = logging.getLogger(__name__)


class _MemberStream:
    """Stream over one tar member that owns (and closes) its archive."""

    def __init__(self, archive: tarfile.TarFile, member: BinaryIO) -> None:
        self._archive = archive
        self._member = member
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        return self._member.read(size)

    def readable(self) -> bool:
        return True

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            self._member.close()
        finally:
            self._archive.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class TarEntrySource(ContentSource):
    """
    Layer bytes stored as a member of a tar archive.

    Args:
        archive_path: Path to the tar file (compressed tars are read too)
        member: Member name inside the archive, e.g. "sha256-abc....tar.gz"
    """

    def __init__(self, archive_path: Union[str, Path], member: str) -> None:
        self.archive_path = Path(archive_path)
        self.member = member

    def open(self) -> BinaryIO:
        try:
            archive = tarfile.open(self.archive_path, mode="r")
        except (OSError, tarfile.TarError) as e:
            raise OpenError(
                f"Cannot open archive {self.archive_path}: {e}", source=str(self.archive_path)
            ) from e

        try:
            info = archive.getmember(self.member)
            if not info.isreg():
                raise OpenError(
                    f"Archive member {self.member} in {self.archive_path} is not a regular file",
                    source=self._describe(),
                )
            member = archive.extractfile(info)
        except KeyError as e:
            archive.close()
            raise OpenError(
                f"Member {self.member} not found in {self.archive_path}", source=self._describe()
            ) from e
        except Exception:
            archive.close()
            raise

        logger.debug(f"Opened {self._describe()}")
        return _MemberStream(archive, member)

    def _describe(self) -> str:
        return f"{self.archive_path}!{self.member}"

    def __repr__(self) -> str:
        return f"TarEntrySource({str(self.archive_path)!r}, {self.member!r})"
