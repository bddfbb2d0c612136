"""
Preview sources for the live detection loop.

FrameSlot   latest frame pushed by the browser preview (POST /detection/frame)
CV2VideoSource  a local webcam, opened once per enable (DETECTION_SOURCE=camera)
"""
import os
import threading

import cv2
import numpy as np

from paddock.adapters.vision.base import VideoSource, HAVE_CURRENT_DATA


class FrameSlot(VideoSource):
    def __init__(self, status_store):
        self.status = status_store
        self._frame = None

    @property
    def ready_state(self) -> int:
        return HAVE_CURRENT_DATA if self._frame is not None else 0

    def push(self, image_bytes: bytes) -> bool:
        frame = cv2.imdecode(np.frombuffer(image_bytes, dtype=np.uint8), cv2.IMREAD_COLOR)
        if frame is None:
            self.status.log("frame_slot: could not decode pushed frame")
            return False
        self._frame = frame
        return True

    def read_frame(self):
        return self._frame

    def release(self):
        self._frame = None


class CV2VideoSource(VideoSource):
    def __init__(self, status_store, index: int | None = None):
        self.status = status_store
        self._index = index if index is not None else int(os.getenv("CAMERA_INDEX", "0"))
        self._cap = None
        self._lock = threading.Lock()   # VideoCapture is not safe across threads

    def open(self):
        with self._lock:
            if self._cap is not None and self._cap.isOpened():
                return
            self._cap = cv2.VideoCapture(self._index)
            if not self._cap.isOpened():
                self.status.log(f"cv2_video: failed to open device {self._index}")

    @property
    def ready_state(self) -> int:
        cap = self._cap
        return HAVE_CURRENT_DATA if cap is not None and cap.isOpened() else 0

    def read_frame(self):
        with self._lock:
            if self._cap is None:
                return None
            ret, frame = self._cap.read()
        if not ret:
            return None
        return frame

    def release(self):
        with self._lock:
            if self._cap is not None and self._cap.isOpened():
                self._cap.release()
            self._cap = None
