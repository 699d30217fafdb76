"""
described-layers CLI

Thin command line surface over the Layer facade:
- verify: Stream a layer file (or tarball member) and check its digests
- cat: Write verified (optionally decompressed) layer bytes to stdout
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Callable, Optional, TypeVar

import typer
from pydantic import ValidationError

from .descriptor import SIZE_UNKNOWN, LayerDescriptor
from .errors import CorruptDataError, LayerError, OpenError, VerificationError
from .layer import Layer
from .settings import create_settings_from_env
from .sources import FileSource, TarEntrySource
from .verify import VerifiedReader

app = typer.Typer(name="described-layers", help="Verified container image layer reader")

T = TypeVar("T")

# Exit codes, most specific class first
EXIT_CODES = (
    (VerificationError, 2),
    (CorruptDataError, 3),
    (OpenError, 1),
    (LayerError, 1),
    (ValidationError, 1),
    (ValueError, 1),
    (OSError, 1),
)


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to exit code.

    - 0: Success
    - 1: Bad input, unreadable source or I/O failure
    - 2: Digest or size verification failed
    - 3: Compressed data is corrupt
    """
    for exc_type, code in EXIT_CODES:
        if isinstance(exc, exc_type):
            return code
    return 1


def run_and_exit(func: Callable[[], T]) -> T:
    """Run a command body, turning known errors into a message and exit code."""
    try:
        return func()
    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=exit_code_for(e)) from e


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _load_descriptor(
    descriptor: Optional[Path],
    digest: Optional[str],
    diff_id: Optional[str],
    size: Optional[int],
    media_type: Optional[str],
) -> LayerDescriptor:
    if descriptor is not None:
        return LayerDescriptor.from_json(descriptor.read_bytes())
    if not digest or not diff_id or not media_type:
        raise typer.BadParameter("Provide --descriptor, or all of --digest, --diff-id and --media-type")
    return LayerDescriptor(
        digest=digest,
        diff_id=diff_id,
        size=SIZE_UNKNOWN if size is None else size,
        media_type=media_type,
    )


def _build_layer(path: Path, member: Optional[str], desc: LayerDescriptor) -> Layer:
    source = TarEntrySource(path, member) if member else FileSource(path)
    return Layer(desc, source, settings=create_settings_from_env())


def _drain(stream, chunk_size: int = 1024 * 1024) -> int:
    total = 0
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            return total
        total += len(chunk)


@app.command()
def verify(
    path: Path = typer.Argument(..., help="Layer blob file, or image tarball with --member"),
    member: Optional[str] = typer.Option(None, "--member", help="Layer member name inside a tar archive"),
    descriptor: Optional[Path] = typer.Option(None, "--descriptor", help="Descriptor JSON file"),
    digest: Optional[str] = typer.Option(None, "--digest", help="Compressed digest (algorithm:hex)"),
    diff_id: Optional[str] = typer.Option(None, "--diff-id", help="Uncompressed digest (algorithm:hex)"),
    size: Optional[int] = typer.Option(None, "--size", help="Compressed size in bytes"),
    media_type: Optional[str] = typer.Option(None, "--media-type", help="Layer media type"),
    uncompressed: bool = typer.Option(False, "--uncompressed", help="Also decompress and check the diff-id"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
) -> None:
    """Verify a layer against its declared digest (and diff-id)."""
    _configure_logging(verbose)

    def _verify() -> None:
        desc = _load_descriptor(descriptor, digest, diff_id, size, media_type)
        layer = _build_layer(path, member, desc)

        with layer.compressed() as stream:
            n = _drain(stream)
        typer.echo(f"digest  OK {layer.digest()} ({n} bytes)")

        if uncompressed:
            with VerifiedReader(layer.uncompressed(), layer.diff_id()) as stream:
                n = _drain(stream)
            typer.echo(f"diff-id OK {layer.diff_id()} ({n} bytes)")

    run_and_exit(_verify)


@app.command()
def cat(
    path: Path = typer.Argument(..., help="Layer blob file, or image tarball with --member"),
    member: Optional[str] = typer.Option(None, "--member", help="Layer member name inside a tar archive"),
    descriptor: Optional[Path] = typer.Option(None, "--descriptor", help="Descriptor JSON file"),
    digest: Optional[str] = typer.Option(None, "--digest", help="Compressed digest (algorithm:hex)"),
    diff_id: Optional[str] = typer.Option(None, "--diff-id", help="Uncompressed digest (algorithm:hex)"),
    size: Optional[int] = typer.Option(None, "--size", help="Compressed size in bytes"),
    media_type: Optional[str] = typer.Option(None, "--media-type", help="Layer media type"),
    uncompressed: bool = typer.Option(False, "--uncompressed", help="Write decompressed bytes"),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
) -> None:
    """
    Write verified layer bytes to stdout.

    Bytes are written as they are verified; a non-zero exit means the
    output must be discarded.
    """
    _configure_logging(verbose)

    def _cat() -> None:
        desc = _load_descriptor(descriptor, digest, diff_id, size, media_type)
        layer = _build_layer(path, member, desc)
        out = sys.stdout.buffer
        with (layer.uncompressed() if uncompressed else layer.compressed()) as stream:
            while True:
                chunk = stream.read(1024 * 1024)
                if not chunk:
                    break
                out.write(chunk)
        out.flush()

    run_and_exit(_cat)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
