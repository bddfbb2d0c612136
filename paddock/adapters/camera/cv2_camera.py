"""
OpenCV native capture adapter.
CAMERA_INDEX env var (default 0) selects the webcam device.
GALLERY_DIR env var (default ~/Pictures) is where gallery picks come from:
the newest image file in it is "picked".
"""
import base64
import os
from pathlib import Path

import cv2

from paddock.adapters.camera.base import NativeCamera, PhotoRequest, Photo, CaptureCancelled

_WARMUP_READS = 3
_GALLERY_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp"}


def fit_within(frame, width: int | None, height: int | None):
    """Downscale keeping aspect ratio so the frame fits width x height. Never upscales."""
    if not width and not height:
        return frame
    h, w = frame.shape[:2]
    scale = min((width or w) / w, (height or h) / h)
    if scale >= 1.0:
        return frame
    size = (max(1, int(w * scale)), max(1, int(h * scale)))
    return cv2.resize(frame, size, interpolation=cv2.INTER_AREA)


class CV2NativeCamera(NativeCamera):
    def __init__(self, status_store, index: int | None = None, gallery_dir: str | None = None):
        self.status = status_store
        self._index = index if index is not None else int(os.getenv("CAMERA_INDEX", "0"))
        self._gallery = Path(gallery_dir or os.getenv("GALLERY_DIR", "~/Pictures")).expanduser()

    def get_photo(self, request: PhotoRequest) -> Photo:
        if request.source == "photos":
            frame = self._pick_gallery(request)
        else:
            frame = self._grab_frame()
        frame = fit_within(frame, request.width, request.height)
        ok, buf = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, request.quality])
        if not ok:
            raise RuntimeError("jpeg encode failed")
        return Photo(base64_string=base64.b64encode(bytes(buf)).decode("ascii"), format="jpeg")

    def _grab_frame(self):
        cap = cv2.VideoCapture(self._index)
        try:
            if not cap.isOpened():
                raise RuntimeError(f"failed to open camera device {self._index}")
            ret, frame = False, None
            for _ in range(_WARMUP_READS):
                ret, frame = cap.read()
            if frame is None or not ret:
                raise RuntimeError("frame capture failed")
            return frame
        finally:
            cap.release()

    def _pick_gallery(self, request: PhotoRequest):
        if not self._gallery.is_dir():
            raise CaptureCancelled(f"gallery {self._gallery} not found")
        files = [p for p in self._gallery.iterdir() if p.suffix.lower() in _GALLERY_SUFFIXES]
        if not files:
            raise CaptureCancelled("no image picked")
        chosen = max(files, key=lambda p: p.stat().st_mtime)
        # IMREAD_COLOR applies the EXIF orientation tag
        flags = cv2.IMREAD_COLOR if request.correct_orientation else cv2.IMREAD_COLOR | cv2.IMREAD_IGNORE_ORIENTATION
        frame = cv2.imread(str(chosen), flags)
        if frame is None:
            raise RuntimeError(f"could not decode {chosen.name}")
        self.status.log(f"cv2_camera: picked {chosen.name}")
        return frame

    def check_permissions(self):
        node = Path(f"/dev/video{self._index}")
        if node.exists():
            return "granted" if os.access(node, os.R_OK | os.W_OK) else "denied"
        return "prompt"

    def request_permissions(self):
        cap = cv2.VideoCapture(self._index)
        try:
            return "granted" if cap.isOpened() else "denied"
        finally:
            cap.release()
