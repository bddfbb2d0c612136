"""
COCO-SSD object detector on OpenCV's DNN module (SSD MobileNet, TF graph).

COCO_SSD_MODEL  path to frozen_inference_graph.pb
COCO_SSD_CONFIG path to the matching .pbtxt

Inference runs in a worker thread so the event loop keeps servicing
requests and timers while a frame is being classified. Overlapping detect()
calls queue on a lock; the net is never run from two threads at once.
"""
import asyncio
import os

import cv2
import numpy as np

from paddock.adapters.vision.base import Classifier
from paddock.orchestrator.contracts import Prediction

# TF Object Detection API COCO label ids (subset used by the app + neighbours)
COCO_LABELS = {
    1: "person", 2: "bicycle", 3: "car", 4: "motorcycle", 5: "airplane",
    6: "bus", 7: "train", 8: "truck", 9: "boat",
}

INPUT_SIZE = (300, 300)
RAW_THRESHOLD = 0.3   # keep low here, callers apply their own cut-off


class CocoSsdClassifier(Classifier):
    def __init__(self, model):
        self._model = model
        self._lock = asyncio.Lock()   # one cv2.dnn net, one inference at a time

    async def detect(self, image) -> list[Prediction]:
        async with self._lock:
            if self._model is None:
                raise RuntimeError("classifier released")
            class_ids, scores, boxes = await asyncio.to_thread(self._model.detect, image, RAW_THRESHOLD)
        out = []
        for cid, score, box in zip(np.array(class_ids).flatten(), np.array(scores).flatten(), boxes):
            x, y, w, h = (int(v) for v in box)
            out.append(Prediction(class_name=COCO_LABELS.get(int(cid), f"class_{int(cid)}"),
                                  score=float(score), bbox=(x, y, w, h)))
        return out

    def release(self):
        self._model = None


def _build(model_path: str, config_path: str):
    for p in (model_path, config_path):
        if not os.path.isfile(p):
            raise FileNotFoundError(f"coco_ssd: {p} not found")
    model = cv2.dnn_DetectionModel(model_path, config_path)
    model.setInputSize(*INPUT_SIZE)
    model.setInputScale(1.0 / 127.5)
    model.setInputMean((127.5, 127.5, 127.5))
    model.setInputSwapRB(True)
    return model


async def load_coco_ssd(model_path: str | None = None, config_path: str | None = None) -> CocoSsdClassifier:
    model_path = model_path or os.getenv("COCO_SSD_MODEL", "models/ssd_mobilenet_v2_coco/frozen_inference_graph.pb")
    config_path = config_path or os.getenv("COCO_SSD_CONFIG", "models/ssd_mobilenet_v2_coco/graph.pbtxt")
    model = await asyncio.to_thread(_build, model_path, config_path)
    return CocoSsdClassifier(model)
