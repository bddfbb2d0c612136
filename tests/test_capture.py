import asyncio
import base64

import cv2
import numpy as np
import pytest

from paddock.adapters.camera.base import CaptureCancelled
from paddock.adapters.camera.cv2_camera import CV2NativeCamera, fit_within
from paddock.adapters.camera.mock_camera import MockNativeCamera
from paddock.adapters.camera.web_capture import decode_data_url
from paddock.orchestrator.capture import CaptureBackendSelector


def test_no_native_capability(status):
    selector = CaptureBackendSelector(None, status)
    assert selector.is_available() is False
    assert asyncio.run(selector.take_photo()) is None
    assert asyncio.run(selector.pick_from_gallery()) is None
    assert asyncio.run(selector.check_permissions()) is False


def test_take_photo_requests_bounded_resolution(status):
    camera = MockNativeCamera(status, image=b"\xff\xd8jpeg-bytes", fmt="png")
    selector = CaptureBackendSelector(camera, status)

    shot = asyncio.run(selector.take_photo())

    assert shot.backend == "native"
    assert shot.format == "png"
    assert shot.image_data == b"\xff\xd8jpeg-bytes"
    assert shot.data_url == "data:image/png;base64," + base64.b64encode(b"\xff\xd8jpeg-bytes").decode()
    [req] = camera.requests
    assert (req.source, req.width, req.height) == ("camera", 1280, 960)
    assert req.correct_orientation and req.result_type == "base64" and req.quality == 90


def test_gallery_pick_is_unconstrained(status):
    camera = MockNativeCamera(status, fmt=None)
    shot = asyncio.run(CaptureBackendSelector(camera, status).pick_from_gallery())
    assert shot.format == "jpeg"
    [req] = camera.requests
    assert (req.source, req.width, req.height) == ("photos", None, None)


@pytest.mark.parametrize("camera_kw", [
    {"error": CaptureCancelled("user cancelled")},
    {"error": PermissionError("camera access denied")},
    {"error": RuntimeError("hardware fault")},
    {"image": None},
])
def test_acquisition_failures_return_none(status, camera_kw):
    selector = CaptureBackendSelector(MockNativeCamera(status, **camera_kw), status)
    assert asyncio.run(selector.take_photo()) is None
    assert asyncio.run(selector.pick_from_gallery()) is None


def test_permissions_granted_and_denied(status):
    granted = MockNativeCamera(status, permission="granted")
    assert asyncio.run(CaptureBackendSelector(granted, status).check_permissions()) is True
    assert granted.permission_requests == 0

    denied = MockNativeCamera(status, permission="denied", after_request="granted")
    selector = CaptureBackendSelector(denied, status)
    assert asyncio.run(selector.check_permissions()) is False
    assert asyncio.run(selector.check_permissions()) is False
    assert denied.permission_requests == 0


@pytest.mark.parametrize("answer,expected", [("granted", True), ("denied", False)])
def test_prompt_asks_once(status, answer, expected):
    camera = MockNativeCamera(status, permission="prompt", after_request=answer)
    selector = CaptureBackendSelector(camera, status)
    assert asyncio.run(selector.check_permissions()) is expected
    assert camera.permission_requests == 1
    # a denied answer is final, granted needs no new prompt
    asyncio.run(selector.check_permissions())
    assert camera.permission_requests == 1


def test_permission_errors_read_as_denied(status):
    class Exploding(MockNativeCamera):
        def check_permissions(self):
            raise OSError("no such device")

    assert asyncio.run(CaptureBackendSelector(Exploding(status), status).check_permissions()) is False


def test_decode_data_url():
    payload = base64.b64encode(b"png-bytes").decode()
    shot = decode_data_url(f"data:image/png;base64,{payload}")
    assert (shot.image_data, shot.format, shot.backend) == (b"png-bytes", "png", "web")

    bare = decode_data_url(payload)
    assert bare.format == "jpeg"


@pytest.mark.parametrize("bad", ["", "data:image/jpeg;base64,", "not base64 !!", "data:image/jpeg;base64,@@@"])
def test_decode_data_url_rejects_garbage(bad):
    with pytest.raises(ValueError):
        decode_data_url(bad)


def test_fit_within_keeps_aspect_and_never_upscales():
    frame = np.zeros((1080, 1920, 3), dtype=np.uint8)
    assert fit_within(frame, 1280, 960).shape == (720, 1280, 3)
    small = np.zeros((100, 200, 3), dtype=np.uint8)
    assert fit_within(small, 1280, 960) is small
    assert fit_within(frame, None, None) is frame


def test_cv2_gallery_picks_newest_and_bounds_size(tmp_path, status):
    import os
    old = tmp_path / "old.jpg"
    new = tmp_path / "new.png"
    cv2.imwrite(str(old), np.zeros((10, 10, 3), dtype=np.uint8))
    cv2.imwrite(str(new), np.full((400, 800, 3), 255, dtype=np.uint8))
    os.utime(old, (1, 1))
    (tmp_path / "notes.txt").write_text("not an image")

    camera = CV2NativeCamera(status, gallery_dir=str(tmp_path))
    selector = CaptureBackendSelector(camera, status)
    shot = asyncio.run(selector.pick_from_gallery())
    decoded = cv2.imdecode(np.frombuffer(shot.image_data, dtype=np.uint8), cv2.IMREAD_COLOR)
    assert decoded.shape == (400, 800, 3)
    assert shot.format == "jpeg"


def test_cv2_empty_gallery_is_a_cancel(tmp_path, status):
    camera = CV2NativeCamera(status, gallery_dir=str(tmp_path))
    assert asyncio.run(CaptureBackendSelector(camera, status).pick_from_gallery()) is None
    assert any("CaptureCancelled" in line for line in status.logs)
