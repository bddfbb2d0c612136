import base64
import time

import cv2
import numpy as np
from fastapi.testclient import TestClient

from paddock.services import api


def _jpeg_b64() -> str:
    ok, buf = cv2.imencode(".jpg", np.zeros((48, 64, 3), dtype=np.uint8))
    assert ok
    return base64.b64encode(bytes(buf)).decode()


def test_health_and_status():
    client = TestClient(api.app)
    health = client.get("/health").json()
    assert health["all_ok"] is True
    assert health["capture_backend"] == "mock"

    st = client.get("/status").json()
    assert st["busy"] is False
    assert st["detection"]["phase"] == "idle"
    assert any("capture backend" in line for line in st["logs"])


def test_scan_then_dismiss_pending():
    client = TestClient(api.app)
    assert client.get("/capture/permissions").json() == {"native": True, "granted": True}

    r = client.post("/scan", json={"source": "web", "image": f"data:image/jpeg;base64,{_jpeg_b64()}",
                                   "detected_type": "real_car"})
    body = r.json()
    assert r.status_code == 200
    assert body["ok"] is True
    assert body["backend"] == "web"
    [rec] = body["results"]
    assert rec["realCar"]["brand"] == "Ferrari"
    assert len(rec["realCarPhotos"]) == 3

    pending = client.get("/pending").json()
    assert pending["has_pending"] is True
    assert pending["result"]["detected_type"] == "real_car"
    assert pending["result"]["analysis_results"] == body["results"]

    assert client.delete("/pending").json()["has_pending"] is False
    assert client.get("/pending").json() == {"has_pending": False, "result": None}


def test_scan_errors_are_reported_not_raised():
    client = TestClient(api.app)
    r = client.post("/scan", json={"source": "web", "image": "???"})
    assert r.status_code == 200
    assert r.json()["ok"] is False
    assert r.json()["error_code"] == "BAD_IMAGE"


def test_detection_lifecycle():
    with TestClient(api.app) as client:
        assert client.post("/detection/frame", json={"image": _jpeg_b64()}).json() == {"ok": True}
        assert client.post("/detection/frame", json={"image": "bm90IGEganBlZw=="}).json()["ok"] is False

        state = client.post("/detection/enable").json()
        assert state["phase"] in ("loading", "ready")

        deadline = time.time() + 3
        while time.time() < deadline:
            state = client.get("/detection").json()
            if state["detected_count"] == 1:
                break
            time.sleep(0.05)
        assert state["phase"] == "ready"
        assert state["detected_count"] == 1
        assert state["detections"][0]["label"] == "car"

        off = client.post("/detection/disable").json()
        assert off == {"phase": "idle", "detected_count": 0, "model_loading": False,
                       "model_ready": False, "detections": []}


def test_photo_function_validates_input():
    client = TestClient(api.app)
    body = client.post("/photos", json={"brand": "Ferrari"}).json()
    assert body["error"] == "Brand and model are required"
    assert body["photos"] == []
