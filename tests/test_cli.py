"""
Tests for the command line interface.
"""
import pytest
from typer.testing import CliRunner

from described_layers.cli import app, exit_code_for
from described_layers.errors import (
    CorruptDataError,
    DigestMismatchError,
    OpenError,
    SizeMismatchError,
)
from described_layers.media_types import OCI_LAYER_GZIP

from .helpers.layer_helpers import gzip_bytes, make_descriptor, sha256_digest, write_image_tarball

PLAIN = b"cli layer payload\n" * 100
BLOB = gzip_bytes(PLAIN)

runner = CliRunner()


@pytest.fixture
def blob_path(tmp_path):
    path = tmp_path / "layer.tar.gz"
    path.write_bytes(BLOB)
    return path


def digest_args(compressed=BLOB, uncompressed=PLAIN):
    return [
        "--digest", sha256_digest(compressed),
        "--diff-id", sha256_digest(uncompressed),
        "--media-type", OCI_LAYER_GZIP,
    ]


class TestExitCodes:
    """Test exception to exit code mapping."""

    def test_mapping(self):
        assert exit_code_for(DigestMismatchError("sha256:a", "sha256:b")) == 2
        assert exit_code_for(SizeMismatchError(1, 2)) == 2
        assert exit_code_for(CorruptDataError("bad")) == 3
        assert exit_code_for(OpenError("gone")) == 1
        assert exit_code_for(OSError("io")) == 1
        assert exit_code_for(RuntimeError("other")) == 1


class TestVerifyCommand:
    """Test the verify command."""

    def test_success(self, blob_path):
        """Test that a matching blob exits 0 and reports the digest."""
        result = runner.invoke(app, ["verify", str(blob_path), *digest_args()])
        assert result.exit_code == 0, result.output
        assert f"digest  OK {sha256_digest(BLOB)} ({len(BLOB)} bytes)" in result.output

    def test_uncompressed_checks_diff_id(self, blob_path):
        """Test that --uncompressed verifies the decompressed bytes too."""
        result = runner.invoke(app, ["verify", str(blob_path), *digest_args(), "--uncompressed"])
        assert result.exit_code == 0, result.output
        assert f"diff-id OK {sha256_digest(PLAIN)} ({len(PLAIN)} bytes)" in result.output

    def test_wrong_diff_id(self, blob_path):
        """Test that a bad diff-id exits 2 after the digest passes."""
        args = digest_args(uncompressed=b"something else")
        result = runner.invoke(app, ["verify", str(blob_path), *args, "--uncompressed"])
        assert result.exit_code == 2
        assert "digest  OK" in result.output
        assert "digest mismatch" in result.output

    def test_digest_mismatch(self, blob_path):
        """Test that tampered content exits 2."""
        args = digest_args(compressed=b"other bytes")
        result = runner.invoke(app, ["verify", str(blob_path), *args])
        assert result.exit_code == 2
        assert "Error: digest mismatch" in result.output

    def test_size_mismatch(self, blob_path):
        """Test that a wrong declared size exits 2."""
        args = [*digest_args(), "--size", str(len(BLOB) + 1)]
        result = runner.invoke(app, ["verify", str(blob_path), *args])
        assert result.exit_code == 2
        assert "size mismatch" in result.output

    def test_corrupt_data(self, tmp_path):
        """Test that a blob matching its digest but not valid gzip exits 3."""
        junk = b"this is not gzip data at all"
        path = tmp_path / "junk"
        path.write_bytes(junk)
        args = digest_args(compressed=junk)
        result = runner.invoke(app, ["verify", str(path), *args, "--uncompressed"])
        assert result.exit_code == 3
        assert "invalid gzip data" in result.output

    def test_missing_file(self, tmp_path):
        """Test that an unreadable source exits 1."""
        result = runner.invoke(app, ["verify", str(tmp_path / "missing"), *digest_args()])
        assert result.exit_code == 1
        assert "Cannot open layer file" in result.output

    def test_malformed_digest(self, blob_path):
        """Test that a malformed digest flag exits 1."""
        args = ["--digest", "md5:abc", "--diff-id", sha256_digest(PLAIN), "--media-type", OCI_LAYER_GZIP]
        result = runner.invoke(app, ["verify", str(blob_path), *args])
        assert result.exit_code == 1

    def test_missing_flags(self, blob_path):
        """Test that a descriptor is required in some form."""
        result = runner.invoke(app, ["verify", str(blob_path), "--digest", sha256_digest(BLOB)])
        assert result.exit_code == 1
        assert "Provide --descriptor" in result.output

    def test_descriptor_file(self, tmp_path, blob_path):
        """Test loading the descriptor from JSON."""
        desc_path = tmp_path / "layer.json"
        desc_path.write_text(make_descriptor(BLOB, PLAIN).to_json())
        result = runner.invoke(
            app, ["verify", str(blob_path), "--descriptor", str(desc_path), "--uncompressed"]
        )
        assert result.exit_code == 0, result.output
        assert "diff-id OK" in result.output

    def test_archive_member(self, tmp_path):
        """Test verifying a layer stored inside an image tarball."""
        tarball = write_image_tarball(tmp_path / "image.tar", {"abc/layer.tar": BLOB})
        result = runner.invoke(
            app, ["verify", str(tarball), "--member", "abc/layer.tar", *digest_args(), "--uncompressed"]
        )
        assert result.exit_code == 0, result.output

    def test_missing_member(self, tmp_path):
        tarball = write_image_tarball(tmp_path / "image.tar", {"abc/layer.tar": BLOB})
        result = runner.invoke(app, ["verify", str(tarball), "--member", "nope", *digest_args()])
        assert result.exit_code == 1
        assert "not found" in result.output


class TestCatCommand:
    """Test the cat command."""

    def test_cat_compressed(self, blob_path):
        """Test that compressed bytes are written unmodified."""
        result = runner.invoke(app, ["cat", str(blob_path), *digest_args()])
        assert result.exit_code == 0
        assert result.stdout_bytes == BLOB

    def test_cat_uncompressed(self, blob_path):
        """Test that --uncompressed writes the plain layer."""
        result = runner.invoke(app, ["cat", str(blob_path), *digest_args(), "--uncompressed"])
        assert result.exit_code == 0
        assert result.stdout_bytes == PLAIN

    def test_cat_mismatch_fails(self, blob_path):
        """Test that a digest mismatch exits non-zero."""
        result = runner.invoke(app, ["cat", str(blob_path), *digest_args(compressed=b"x")])
        assert result.exit_code == 2
