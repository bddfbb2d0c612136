"""Mock native camera: serves a fixed payload and a scripted permission state."""
import base64

from paddock.adapters.camera.base import NativeCamera, PhotoRequest, Photo

# JPEG SOI .. EOI markers around a marker payload; never decoded
_PIXEL_JPEG = b"\xff\xd8\xff\xe0mock-frame\xff\xd9"

class MockNativeCamera(NativeCamera):
    def __init__(self, status_store, permission: str = "granted", after_request: str | None = None,
                 image: bytes | None = _PIXEL_JPEG, fmt: str | None = "jpeg", error: Exception | None = None):
        self.status = status_store
        self.permission = permission
        self.after_request = after_request or permission
        self.image = image
        self.fmt = fmt
        self.error = error
        self.requests: list[PhotoRequest] = []
        self.permission_requests = 0

    def get_photo(self, request: PhotoRequest) -> Photo:
        self.requests.append(request)
        self.status.log(f"mock_camera: get_photo source={request.source}")
        if self.error is not None:
            raise self.error
        if self.image is None:
            return Photo(base64_string=None, format=self.fmt)
        return Photo(base64_string=base64.b64encode(self.image).decode("ascii"), format=self.fmt)

    def check_permissions(self):
        return self.permission

    def request_permissions(self):
        self.permission_requests += 1
        self.permission = self.after_request
        return self.permission
