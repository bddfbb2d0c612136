import os
import tempfile

import pytest

# service wiring reads these at import time
_STATE_DIR = tempfile.mkdtemp(prefix="paddock-tests-")
os.environ.setdefault("PENDING_STORE_PATH", os.path.join(_STATE_DIR, "scanner_pending.json"))
os.environ.setdefault("CAPTURE_BACKEND", "mock")
os.environ.setdefault("ANALYSIS_ADAPTER", "mock")
os.environ.setdefault("PHOTO_ADAPTER", "mock")
os.environ.setdefault("DETECTOR_ADAPTER", "mock")
os.environ.setdefault("DETECTION_SOURCE", "frames")

from paddock.services.status_store import StatusStore


class FakeClock:
    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int):
        self.now += ms


@pytest.fixture
def status():
    return StatusStore()


@pytest.fixture
def clock():
    return FakeClock()
