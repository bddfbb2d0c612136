"""
Capture backend selector.

Uniform CaptureResult regardless of backend. Native capture goes through a
NativeCamera adapter (None when this runtime has no native capability, in
which case the caller falls back to the browser upload path). Nothing here
raises: every acquisition failure is logged and returned as None / False.
"""
import asyncio
import base64
import binascii

from paddock.adapters.camera.base import PhotoRequest
from paddock.orchestrator.contracts import CaptureResult

CAMERA_REQUEST = PhotoRequest(quality=90, source="camera", correct_orientation=True, width=1280, height=960)
GALLERY_REQUEST = PhotoRequest(quality=90, source="photos", correct_orientation=True)


class CaptureBackendSelector:
    def __init__(self, native, status_store):
        self.native = native
        self.status = status_store

    def is_available(self) -> bool:
        return self.native is not None

    async def take_photo(self) -> CaptureResult | None:
        return await self._acquire(CAMERA_REQUEST, "photo captured")

    async def pick_from_gallery(self) -> CaptureResult | None:
        return await self._acquire(GALLERY_REQUEST, "photo selected")

    async def check_permissions(self) -> bool:
        if self.native is None:
            return False
        try:
            state = await asyncio.to_thread(self.native.check_permissions)
            if state == "granted":
                return True
            if state == "denied":
                self.status.log("capture: camera permission denied")
                return False
            state = await asyncio.to_thread(self.native.request_permissions)
            self.status.log(f"capture: permission request -> {state}")
            return state == "granted"
        except Exception as e:
            self.status.log(f"capture: error checking permissions: {e}")
            return False

    async def _acquire(self, request: PhotoRequest, done_msg: str) -> CaptureResult | None:
        if self.native is None:
            self.status.log("capture: no native capability, use the web backend")
            return None
        try:
            self.status.log(f"capture: opening native {request.source}...")
            photo = await asyncio.to_thread(self.native.get_photo, request)
        except Exception as e:
            self.status.log(f"capture: {request.source} failed: {type(e).__name__}: {e}")
            return None

        if not photo.base64_string:
            self.status.log("capture: no image data returned")
            return None
        try:
            image = base64.b64decode(photo.base64_string, validate=True)
        except binascii.Error as e:
            self.status.log(f"capture: bad image payload: {e}")
            return None

        self.status.log(f"capture: {done_msg}")
        return CaptureResult(image_data=image, format=photo.format or "jpeg", backend="native")
