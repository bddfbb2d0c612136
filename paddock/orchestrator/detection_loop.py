"""
Live detection loop: pre-capture "N cars in view" feedback.

    idle --enable()--> loading --model ready--> ready --disable()--> idle

While ready, a DetectionSession ticks immediately and then every
`interval_s` (measured from the previous scheduled time, not from tick
completion). The preview source is opened off-thread on enable. A tick
reads a frame off-thread, samples it into a reused buffer, classifies it and
publishes the number of car-like objects. Ticks are best-effort: errors
are swallowed and never stop the timer.

disable() releases everything the loop owns (timer, in-flight ticks, model,
buffer) and bumps the generation so a tick that finishes afterwards cannot
publish.
"""
import asyncio

import numpy as np

from paddock.adapters.vision.base import HAVE_CURRENT_DATA
from paddock.adapters.vision.coco_ssd import load_coco_ssd
from paddock.orchestrator.contracts import DetectionBox, DetectionState, LoopPhase

DETECT_INTERVAL_S = 1.5
CAR_CLASSES = frozenset({"car", "truck", "bus"})
MIN_SCORE = 0.5


class DetectionSession:
    """Owned timer handle for one ready period. close() is idempotent."""

    def __init__(self, tick, interval_s: float):
        self._tick = tick
        self._interval = interval_s
        self._ticks: set[asyncio.Task] = set()
        self.closed = False
        self._timer = asyncio.get_running_loop().create_task(self._run())

    async def _run(self):
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        while True:
            task = loop.create_task(self._tick())
            self._ticks.add(task)
            task.add_done_callback(self._ticks.discard)
            next_at += self._interval
            await asyncio.sleep(max(0.0, next_at - loop.time()))

    def close(self):
        if self.closed:
            return
        self.closed = True
        self._timer.cancel()
        for task in list(self._ticks):
            task.cancel()


class LiveDetectionLoop:
    def __init__(self, video, status_store, load_model=load_coco_ssd, interval_s: float = DETECT_INTERVAL_S,
                 classes=CAR_CLASSES, min_score: float = MIN_SCORE):
        self.video = video
        self.status = status_store
        self._load_model = load_model
        self.interval_s = interval_s
        self.classes = frozenset(classes)
        self.min_score = min_score

        self.state = DetectionState()
        self._enabled = False
        self._generation = 0
        self._model = None
        self._load_task: asyncio.Task | None = None
        self._session: DetectionSession | None = None
        self._buffer = None

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def phase(self) -> LoopPhase:
        if self.state.model_loading:
            return LoopPhase.LOADING
        if self._enabled and self.state.model_ready:
            return LoopPhase.READY
        return LoopPhase.IDLE

    def enable(self):
        """Must be called from a running event loop."""
        self._enabled = True
        if self._model is None:
            self._begin_load()
        elif self._session is None:
            self._start_session()

    def disable(self):
        was_enabled = self._enabled
        self._enabled = False
        self._generation += 1
        if self._load_task is not None:
            self._load_task.cancel()
            self._load_task = None
        if self._session is not None:
            self._session.close()
            self._session = None
        if self._model is not None:
            self._model.release()
            self._model = None
        self._buffer = None
        self.state.reset()
        if was_enabled:
            self.status.log("detection: disabled")

    async def aclose(self):
        self.disable()
        self.video.release()

    def _begin_load(self):
        if self._load_task is not None:
            return
        self.state.model_loading = True
        self.status.log("detection: loading model...")
        self._load_task = asyncio.get_running_loop().create_task(self._load(self._generation))

    async def _load(self, generation: int):
        try:
            await asyncio.to_thread(self.video.open)
            model = await self._load_model()
        except Exception as e:
            if generation == self._generation:
                self.status.log(f"detection: failed to load model: {type(e).__name__}: {e}")
                self.state.model_loading = False
                self._load_task = None
            return

        if generation != self._generation:
            model.release()
            return
        self._load_task = None
        self._model = model
        self.state.model_loading = False
        self.state.model_ready = True
        self.status.log("detection: model ready")
        self._start_session()

    def _start_session(self):
        generation = self._generation
        self._session = DetectionSession(lambda: self._detect(generation), self.interval_s)

    def _sample(self, frame):
        if self._buffer is None or self._buffer.shape != frame.shape:
            self._buffer = np.empty_like(frame)
        np.copyto(self._buffer, frame)
        return self._buffer

    async def _detect(self, generation: int):
        model = self._model
        if model is None:
            return
        try:
            if self.video.ready_state < HAVE_CURRENT_DATA:
                return
            frame = await asyncio.to_thread(self.video.read_frame)
            if frame is None:
                return
            h, w = frame.shape[:2]
            if w == 0 or h == 0:
                return
            predictions = await model.detect(self._sample(frame))
            if generation != self._generation or not self._enabled:
                return
            boxes = [
                DetectionBox(
                    x=p.bbox[0] / w * 100,
                    y=p.bbox[1] / h * 100,
                    width=p.bbox[2] / w * 100,
                    height=p.bbox[3] / h * 100,
                    score=p.score,
                    label=p.class_name,
                )
                for p in predictions
                if p.class_name in self.classes and p.score > self.min_score
            ]
        except Exception:
            return
        self.state.detections = boxes
        self.state.detected_count = len(boxes)
