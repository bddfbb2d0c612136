import asyncio
import numpy as np

from paddock.adapters.vision.base import Classifier, VideoSource, HAVE_CURRENT_DATA
from paddock.orchestrator.contracts import Prediction


class MockClassifier(Classifier):
    """Replays scripted predictions; `delay` makes inference suspend for that long."""

    def __init__(self, predictions: list[Prediction] | None = None, delay: float = 0.0, error: Exception | None = None):
        self.predictions = predictions if predictions is not None else [
            Prediction(class_name="car", score=0.9, bbox=(10, 10, 40, 20)),
        ]
        self.delay = delay
        self.error = error
        self.calls = 0
        self.released = False

    async def detect(self, image) -> list[Prediction]:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(self.predictions)

    def release(self):
        self.released = True


def mock_loader(classifier: Classifier | None = None, delay: float = 0.0, error: Exception | None = None):
    """Build an async model loader returning `classifier` (a fresh MockClassifier by default)."""
    async def load():
        if delay:
            await asyncio.sleep(delay)
        if error is not None:
            raise error
        return classifier if classifier is not None else MockClassifier()
    return load


class MockVideo(VideoSource):
    def __init__(self, width: int = 64, height: int = 48, ready_state: int = HAVE_CURRENT_DATA):
        self.ready_state = ready_state
        self.frame = np.zeros((height, width, 3), dtype=np.uint8)
        self.opens = 0

    def open(self):
        self.opens += 1

    def read_frame(self):
        return self.frame
