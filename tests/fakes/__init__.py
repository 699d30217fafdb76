# Fake content sources and streams for testing

from .fake_sources import CountingSource, FailingSource, FaultyStream, TrackingStream

__all__ = ["CountingSource", "FailingSource", "FaultyStream", "TrackingStream"]
