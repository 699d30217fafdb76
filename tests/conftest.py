"""Root pytest configuration for described-layers tests."""
import pytest

from described_layers.descriptor import SIZE_UNKNOWN

from .fakes.fake_sources import CountingSource
from .helpers.layer_helpers import gzip_bytes, make_descriptor


# Keep environment-driven settings out of the tests
@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("LAYERS_CHUNK_SIZE", "LAYERS_DRAIN_ON_CLOSE", "LAYERS_HTTP_TIMEOUT",
                "LAYERS_HTTP_RETRY", "LAYERS_HTTP_INSECURE"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def plaintext():
    """Layer content before compression."""
    return b"layer file contents\n" * 500


@pytest.fixture
def gzipped(plaintext):
    return gzip_bytes(plaintext)


@pytest.fixture
def gzip_source(gzipped):
    return CountingSource(gzipped)


@pytest.fixture
def gzip_descriptor(gzipped, plaintext):
    return make_descriptor(gzipped, plaintext)


@pytest.fixture
def unknown_size_descriptor(gzipped, plaintext):
    return make_descriptor(gzipped, plaintext, size=SIZE_UNKNOWN)
